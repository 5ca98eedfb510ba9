# apps/board/views.py

from django.http import HttpResponse, JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_http_methods

from apps.core.utils import api_view, parse_json_body
from .task_service import task_service


@csrf_exempt
@require_http_methods(["POST"])
@api_view
def create_task(request):
    """
    Cria tarefa - POST /tasks

    O cliente não insere a tarefa localmente: espera o broadcast task_created
    """
    data = parse_json_body(request)
    task = task_service.create_task(data)
    return JsonResponse(task, status=201)


@csrf_exempt
@require_http_methods(["GET", "PUT", "DELETE"])
@api_view
def task_resource(request, pk):
    """
    GET    /tasks/<project_id>  lista as tarefas do projeto
    PUT    /tasks/<task_id>     substituição completa da tarefa
    DELETE /tasks/<task_id>     remoção (204 sem corpo)
    """
    if request.method == 'GET':
        tasks = task_service.list_tasks(pk)
        return JsonResponse(tasks, safe=False)

    if request.method == 'PUT':
        data = parse_json_body(request)
        task = task_service.update_task(pk, data)
        return JsonResponse(task)

    task_service.delete_task(pk)
    return HttpResponse(status=204)
