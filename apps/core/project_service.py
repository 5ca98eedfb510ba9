# apps/core/project_service.py

"""
Serviço de Projetos - encanamento fino em volta do board

Criação e remoção tocam duas tabelas e rodam em uma única transação.
"""

import logging
from typing import Dict, List

from django.db import DatabaseError, transaction
from django.db.models import Q

from apps.board.exceptions import StoreUnavailable, TaskNotFound, TaskValidationError
from .models import Project, User

logger = logging.getLogger(__name__)


class ProjectService:
    """Listagem, criação e remoção de projetos e leitura de colaboradores"""

    def list_projects(self, user_id: int) -> List[Dict]:
        """Projetos em que o usuário é dono ou colaborador"""
        try:
            projects = Project.objects.filter(
                Q(owner_id=user_id) | Q(collaborators__id=user_id)
            ).distinct()
            return [self._serialize(project) for project in projects]
        except DatabaseError as e:
            logger.error(f"❌ Erro ao listar projetos do usuário {user_id}: {e}")
            raise StoreUnavailable('Erro ao acessar o banco de dados') from e

    def create_project(self, user_id: int, data: Dict) -> Dict:
        """Cria o projeto e registra o dono como primeiro colaborador"""
        name = data.get('name')
        if not isinstance(name, str) or not name.strip():
            raise TaskValidationError('Campo obrigatório: name')

        try:
            with transaction.atomic():
                owner = User.objects.filter(pk=user_id).first()
                if owner is None:
                    raise TaskNotFound(f'Usuário {user_id} não encontrado')
                project = Project.objects.create(name=name.strip(), owner=owner)
                project.collaborators.add(owner)
        except DatabaseError as e:
            logger.error(f"❌ Erro ao criar projeto: {e}")
            raise StoreUnavailable('Erro ao acessar o banco de dados') from e

        logger.info(f"✅ Projeto '{project.name}' criado por {owner.username}")
        return self._serialize(project)

    def delete_project(self, project_id: int) -> None:
        """Remove o projeto e suas tarefas na mesma transação"""
        try:
            with transaction.atomic():
                project = Project.objects.filter(pk=project_id).first()
                if project is None:
                    raise TaskNotFound(f'Projeto {project_id} não encontrado')
                project.tasks.all().delete()
                project.delete()
        except DatabaseError as e:
            logger.error(f"❌ Erro ao remover projeto {project_id}: {e}")
            raise StoreUnavailable('Erro ao acessar o banco de dados') from e

        logger.info(f"🗑️ Projeto {project_id} removido")

    def list_collaborators(self, project_id: int) -> List[Dict]:
        """Candidatos válidos a responsável por tarefas do projeto"""
        try:
            project = Project.objects.select_related('owner').filter(pk=project_id).first()
            if project is None:
                raise TaskNotFound(f'Projeto {project_id} não encontrado')
            users = User.objects.filter(
                Q(pk=project.owner_id) | Q(projects=project)
            ).distinct().order_by('id')
            return [
                {'id': user.pk, 'name': user.display_name, 'email': user.email}
                for user in users
            ]
        except DatabaseError as e:
            logger.error(f"❌ Erro ao listar colaboradores do projeto {project_id}: {e}")
            raise StoreUnavailable('Erro ao acessar o banco de dados') from e

    def _serialize(self, project: Project) -> Dict:
        return {'id': project.pk, 'name': project.name, 'owner_id': project.owner_id}


# Instância global do serviço
project_service = ProjectService()
