# apps/core/views.py

from django.core.cache import cache
from django.http import JsonResponse
from django.utils import timezone
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET, require_http_methods

from .models import User
from .project_service import project_service
from .utils import api_view, parse_json_body


@csrf_exempt
@require_http_methods(["GET", "POST", "DELETE"])
@api_view
def projects_resource(request, pk):
    """
    GET    /projects/<user_id>     projetos do usuário
    POST   /projects/<user_id>     cria projeto do usuário
    DELETE /projects/<project_id>  remove projeto e tarefas
    """
    if request.method == 'GET':
        return JsonResponse(project_service.list_projects(pk), safe=False)

    if request.method == 'POST':
        data = parse_json_body(request)
        project = project_service.create_project(pk, data)
        return JsonResponse(project, status=201)

    project_service.delete_project(pk)
    return JsonResponse({'message': 'Projeto removido'})


@require_GET
@api_view
def project_collaborators(request, project_id):
    """Colaboradores do projeto - candidatos a responsável"""
    return JsonResponse(project_service.list_collaborators(project_id), safe=False)


def health_check(request):
    """
    Health check para monitoramento
    """
    try:
        # Verificar conexão com banco
        User.objects.count()

        # Verificar cache
        cache.set('health_check', 'ok', 60)
        cache.get('health_check')

        status = {
            'status': 'healthy',
            'database': 'ok',
            'cache': 'ok',
            'timestamp': timezone.now().isoformat(),
        }

        return JsonResponse(status)

    except Exception as e:
        status = {
            'status': 'unhealthy',
            'error': str(e),
            'timestamp': timezone.now().isoformat(),
        }

        return JsonResponse(status, status=500)
