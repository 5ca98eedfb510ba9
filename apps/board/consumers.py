# apps/board/consumers.py

import json
import logging

from channels.db import database_sync_to_async
from channels.generic.websocket import AsyncWebsocketConsumer
from django.conf import settings
from django.utils import timezone

from apps.core.models import Project
from .broadcast import project_group_name

logger = logging.getLogger(__name__)


class ProjectConsumer(AsyncWebsocketConsumer):
    """
    Consumer WebSocket do Broadcast Channel

    Funcionalidades:
    - join_project / leave_project para entrar e sair do grupo do projeto
    - Repasse de task_created, task_updated e task_deleted
    - Heartbeat (ping/pong)

    Um cliente pode trocar de projeto na mesma conexão; ao desconectar,
    sai de todos os grupos em que entrou.
    """

    async def connect(self):
        self.joined_projects = set()
        await self.accept()
        logger.info(f"🔌 WebSocket conectado - {self.channel_name}")

    async def disconnect(self, close_code):
        for project_id in list(self.joined_projects):
            await self.channel_layer.group_discard(
                project_group_name(project_id),
                self.channel_name
            )
        self.joined_projects.clear()
        logger.info(f"🔌 WebSocket desconectado - {self.channel_name} ({close_code})")

    async def receive(self, text_data=None, bytes_data=None):
        """
        Recebe mensagens do cliente WebSocket
        """
        try:
            data = json.loads(text_data or '')
        except json.JSONDecodeError:
            logger.error("❌ JSON inválido recebido via WebSocket")
            await self.send_error('JSON inválido')
            return

        if not isinstance(data, dict):
            await self.send_error('Mensagem deve ser um objeto JSON')
            return

        message_type = data.get('type')

        # Heartbeat/Ping
        if message_type == 'ping':
            await self.send_json({
                'type': 'pong',
                'timestamp': timezone.now().isoformat(),
                'heartbeat_interval': getattr(settings, 'KANBOARD_WS_HEARTBEAT_INTERVAL', 30)
            })

        elif message_type == 'join_project':
            await self.join_project(data.get('project_id'))

        elif message_type == 'leave_project':
            await self.leave_project(data.get('project_id'))

        else:
            await self.send_error(f'Tipo de mensagem desconhecido: {message_type}')

    async def join_project(self, project_id):
        if isinstance(project_id, bool) or not isinstance(project_id, int):
            await self.send_error('project_id inválido')
            return

        if not await self.project_exists(project_id):
            logger.warning(f"❌ join_project rejeitado - projeto {project_id} não existe")
            await self.send_error(f'Projeto {project_id} não encontrado')
            return

        await self.channel_layer.group_add(
            project_group_name(project_id),
            self.channel_name
        )
        self.joined_projects.add(project_id)
        logger.info(f"✅ {self.channel_name} entrou no projeto {project_id}")

    async def leave_project(self, project_id):
        if project_id not in self.joined_projects:
            return

        await self.channel_layer.group_discard(
            project_group_name(project_id),
            self.channel_name
        )
        self.joined_projects.discard(project_id)
        logger.info(f"👋 {self.channel_name} saiu do projeto {project_id}")

    # === Handlers para os eventos do grupo ===

    async def task_created(self, event):
        await self.send_json({'type': 'task_created', 'task': event['task']})

    async def task_updated(self, event):
        await self.send_json({'type': 'task_updated', 'task': event['task']})

    async def task_deleted(self, event):
        await self.send_json({'type': 'task_deleted', 'task': event['task']})

    # === Métodos auxiliares ===

    async def send_json(self, content):
        await self.send(text_data=json.dumps(content))

    async def send_error(self, message):
        await self.send_json({'type': 'error', 'message': message})

    @database_sync_to_async
    def project_exists(self, project_id):
        return Project.objects.filter(pk=project_id).exists()
