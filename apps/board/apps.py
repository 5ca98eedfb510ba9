# apps/board/apps.py

import logging

from django.apps import AppConfig
from django.conf import settings

logger = logging.getLogger(__name__)


class BoardConfig(AppConfig):
    """Configuração da app Board"""

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.board'
    verbose_name = 'Board - Sincronização'

    def ready(self):
        backend = getattr(settings, 'CHANNEL_LAYERS', {}).get('default', {}).get('BACKEND', 'nenhum')
        logger.info(f"🔌 Board App inicializada - channel layer: {backend}")
