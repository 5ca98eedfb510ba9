# apps/board/broadcast.py

import logging

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from django.conf import settings

logger = logging.getLogger(__name__)

TASK_CREATED = 'task_created'
TASK_UPDATED = 'task_updated'
TASK_DELETED = 'task_deleted'

TASK_EVENTS = (TASK_CREATED, TASK_UPDATED, TASK_DELETED)


def project_group_name(project_id):
    """Nome do grupo Channels de um projeto"""
    prefix = getattr(settings, 'KANBOARD_BROADCAST_GROUP_PREFIX', 'project')
    return f'{prefix}_{project_id}'


def notify_project(project_id, event, payload):
    """
    Envia um evento de tarefa para todos os clientes inscritos no projeto

    Entrega best-effort: falhas são registradas no log e descartadas,
    o cliente ressincroniza no próximo fetch completo.
    """
    if event not in TASK_EVENTS:
        raise ValueError(f'Evento de broadcast desconhecido: {event}')

    channel_layer = get_channel_layer()
    if channel_layer is None:
        logger.warning(f"⚠️ Sem channel layer configurado - {event} do projeto {project_id} descartado")
        return

    try:
        async_to_sync(channel_layer.group_send)(
            project_group_name(project_id),
            {
                'type': event,
                'task': payload,
            }
        )
    except Exception as e:
        logger.warning(f"⚠️ Falha no broadcast {event} do projeto {project_id}: {e}")
        return

    logger.debug(f"📡 {event} enviado para {project_group_name(project_id)}")
