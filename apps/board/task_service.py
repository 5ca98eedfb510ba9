# apps/board/task_service.py

"""
Serviço de Tarefas - única autoridade sobre existência e campos das tarefas

Toda escrita roda dentro de transaction.atomic() e o broadcast é
registrado com transaction.on_commit: escrita rejeitada nunca gera
evento, escrita confirmada gera exatamente um.
"""

import logging
from typing import Dict, List, Optional

from django.db import DatabaseError, transaction

from apps.core.choices import TaskStatus
from apps.core.models import Project, Task, User
from . import broadcast
from .exceptions import StoreUnavailable, TaskNotFound, TaskValidationError

logger = logging.getLogger(__name__)


class TaskService:
    """
    Operações de mutação sobre o Task Store

    Métodos públicos devolvem o dicionário canônico da tarefa, o mesmo
    que é enviado no broadcast.
    """

    def list_tasks(self, project_id: int) -> List[Dict]:
        """Todas as tarefas do projeto com o nome do responsável resolvido"""
        try:
            tasks = self._queryset().filter(project_id=project_id)
            return [task.to_dict() for task in tasks]
        except DatabaseError as e:
            logger.error(f"❌ Erro ao listar tarefas do projeto {project_id}: {e}")
            raise StoreUnavailable('Erro ao acessar o banco de dados') from e

    def create_task(self, data: Dict) -> Dict:
        """
        Cria tarefa na coluna informada

        Obrigatórios: title, status, project_id
        """
        title = self._require_title(data)
        status = self._require_status(data)
        project_id = self._require_id(data, 'project_id')
        description = self._clean_description(data)

        try:
            with transaction.atomic():
                project = self._get_project(project_id)
                assignee_id = self._clean_assignee(project, data.get('assigned_to'))
                creator_id = self._clean_creator(data.get('user_id'))

                task = Task.objects.create(
                    title=title,
                    description=description,
                    status=status,
                    project=project,
                    user_id=creator_id,
                    assigned_to_id=assignee_id,
                )
                payload = self._get_task(task.pk).to_dict()
                self._broadcast_on_commit(project.pk, broadcast.TASK_CREATED, payload)
        except DatabaseError as e:
            logger.error(f"❌ Erro ao criar tarefa: {e}")
            raise StoreUnavailable('Erro ao acessar o banco de dados') from e

        logger.info(f"✅ Tarefa #{payload['id']} criada em '{status}' no projeto {project_id}")
        return payload

    def update_task(self, task_id: int, data: Dict) -> Dict:
        """
        Substitui os campos mutáveis (title, description, status, assigned_to)

        project_id é imutável: se vier no corpo precisa ser o mesmo.
        """
        title = self._require_title(data)
        status = self._require_status(data)
        description = self._clean_description(data)

        try:
            with transaction.atomic():
                task = self._get_task(task_id)

                if data.get('project_id') is not None:
                    if self._as_int(data['project_id'], 'project_id') != task.project_id:
                        raise TaskValidationError('project_id não pode ser alterado')

                task.title = title
                task.description = description
                task.status = status
                task.assigned_to_id = self._clean_assignee(task.project, data.get('assigned_to'))
                task.save(update_fields=['title', 'description', 'status', 'assigned_to', 'updated_at'])

                # Re-resolve o responsável antes de devolver/transmitir
                payload = self._get_task(task.pk).to_dict()
                self._broadcast_on_commit(task.project_id, broadcast.TASK_UPDATED, payload)
        except DatabaseError as e:
            logger.error(f"❌ Erro ao atualizar tarefa #{task_id}: {e}")
            raise StoreUnavailable('Erro ao acessar o banco de dados') from e

        logger.info(f"✅ Tarefa #{task_id} atualizada ({status})")
        return payload

    def delete_task(self, task_id: int) -> Dict:
        """Remove a tarefa e transmite {id, project_id} para os inscritos"""
        try:
            with transaction.atomic():
                task = self._get_task(task_id)
                payload = {'id': task.pk, 'project_id': task.project_id}
                task.delete()
                self._broadcast_on_commit(payload['project_id'], broadcast.TASK_DELETED, payload)
        except DatabaseError as e:
            logger.error(f"❌ Erro ao remover tarefa #{task_id}: {e}")
            raise StoreUnavailable('Erro ao acessar o banco de dados') from e

        logger.info(f"🗑️ Tarefa #{task_id} removida do projeto {payload['project_id']}")
        return payload

    # === Métodos auxiliares ===

    def _queryset(self):
        return Task.objects.select_related('assigned_to')

    def _get_task(self, task_id) -> Task:
        task = self._queryset().filter(pk=task_id).first()
        if task is None:
            raise TaskNotFound(f'Tarefa {task_id} não encontrada')
        return task

    def _get_project(self, project_id) -> Project:
        project = Project.objects.filter(pk=project_id).first()
        if project is None:
            raise TaskNotFound(f'Projeto {project_id} não encontrado')
        return project

    def _broadcast_on_commit(self, project_id, event, payload):
        transaction.on_commit(
            lambda: broadcast.notify_project(project_id, event, payload)
        )

    def _require_title(self, data: Dict) -> str:
        title = data.get('title')
        if not isinstance(title, str) or not title.strip():
            raise TaskValidationError('Campo obrigatório: title')
        return title.strip()

    def _require_status(self, data: Dict) -> str:
        status = data.get('status')
        if status is None or status == '':
            raise TaskValidationError('Campo obrigatório: status')
        if status not in TaskStatus.values:
            raise TaskValidationError(f'Status inválido: {status}')
        return status

    def _require_id(self, data: Dict, field: str) -> int:
        if data.get(field) in (None, ''):
            raise TaskValidationError(f'Campo obrigatório: {field}')
        return self._as_int(data[field], field)

    def _as_int(self, value, field: str) -> int:
        if isinstance(value, bool):
            raise TaskValidationError(f'{field} deve ser um inteiro')
        try:
            return int(value)
        except (TypeError, ValueError):
            raise TaskValidationError(f'{field} deve ser um inteiro')

    def _clean_description(self, data: Dict) -> str:
        description = data.get('description')
        if description is None:
            return ''
        if not isinstance(description, str):
            raise TaskValidationError('description deve ser texto')
        return description

    def _clean_assignee(self, project: Project, value) -> Optional[int]:
        """Responsável precisa ser colaborador do projeto"""
        if value in (None, ''):
            return None
        assignee_id = self._as_int(value, 'assigned_to')
        if not project.is_collaborator(assignee_id):
            raise TaskValidationError(f'Usuário {assignee_id} não é colaborador do projeto')
        return assignee_id

    def _clean_creator(self, value) -> Optional[int]:
        if value in (None, ''):
            return None
        user_id = self._as_int(value, 'user_id')
        if not User.objects.filter(pk=user_id).exists():
            raise TaskValidationError(f'Usuário {user_id} não existe')
        return user_id


# Instância global do serviço
task_service = TaskService()
