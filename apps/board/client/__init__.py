# apps/board/client/__init__.py

"""
Cliente do board - projeção local, drag-and-drop e sincronização

Não toca no banco nem nas views: do servidor usa apenas o enum de colunas
(apps.core.choices).
"""

from .api import TaskApiClient, TaskApiError, TaskApiNotFound
from .drag import DragEngine, DragError, DragPhase, DropResult
from .projection import BoardProjection, ProjectionStore, reduce
from .session import BoardSession
from .types import TaskRecord

__all__ = [
    'BoardProjection',
    'BoardSession',
    'DragEngine',
    'DragError',
    'DragPhase',
    'DropResult',
    'ProjectionStore',
    'TaskApiClient',
    'TaskApiError',
    'TaskApiNotFound',
    'TaskRecord',
    'reduce',
]
