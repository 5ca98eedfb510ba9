# apps/board/client/drag.py

"""
Motor de drag-and-drop do board

Traduz os gestos (start, over, drop) em movimentos otimistas na projeção
e, quando a coluna muda, em uma única chamada de update_task.

Estados: IDLE -> DRAGGING -> HOVER_COLUMN | HOVER_TASK -> DROPPED -> IDLE
"""

import enum
import logging
from typing import Awaitable, Callable, Optional, Union

from apps.core.choices import TaskStatus
from .projection import MoveTask, ProjectionStore, ReorderColumn
from .types import TaskRecord

logger = logging.getLogger(__name__)

# Alvo do gesto: id de coluna (str) ou id de tarefa (int)
DropTarget = Union[str, int, None]


class DragPhase(enum.Enum):
    IDLE = 'idle'
    DRAGGING = 'dragging'
    HOVER_COLUMN = 'hover_column'
    HOVER_TASK = 'hover_task'
    DROPPED = 'dropped'


class DropResult(enum.Enum):
    CANCELLED = 'cancelled'
    UNCHANGED = 'unchanged'
    REORDERED = 'reordered'
    MOVED = 'moved'


class DragError(Exception):
    """Gesto abortado: tarefa ou coluna de destino não encontrada"""


def is_task_target(target) -> bool:
    return isinstance(target, int) and not isinstance(target, bool)


class DragEngine:
    """
    Um gesto por vez, sobre a projeção de um ProjectionStore

    update_task recebe a tarefa com o novo status e devolve a versão
    canônica; qualquer exceção dela desfaz o movimento otimista.
    """

    def __init__(self, store: ProjectionStore, update_task: Callable[[TaskRecord], Awaitable[TaskRecord]]):
        self.store = store
        self.update_task = update_task
        self._reset()

    def _reset(self):
        self.phase = DragPhase.IDLE
        self.active_id = None
        self.origin_status = None
        self.origin_index = None

    @property
    def is_dragging(self) -> bool:
        return self.phase in (DragPhase.DRAGGING, DragPhase.HOVER_COLUMN, DragPhase.HOVER_TASK)

    def start(self, task_id: int) -> None:
        """Captura a tarefa e a coluna de origem a partir do estado canônico"""
        projection = self.store.projection
        task = projection.tasks.get(task_id)
        if task is None:
            logger.error(f"❌ Drag iniciado em tarefa desconhecida: {task_id}")
            raise DragError(f'Tarefa {task_id} não encontrada')

        self.active_id = task_id
        self.origin_status = task.status
        self.origin_index = projection.index_of(task_id)
        self.phase = DragPhase.DRAGGING

    def resolve_column(self, target: DropTarget) -> Optional[TaskStatus]:
        """Coluna do alvo: a própria coluna ou a coluna que contém a tarefa sob o cursor"""
        if is_task_target(target):
            return self.store.projection.column_of(target)
        if isinstance(target, str):
            try:
                return TaskStatus(target)
            except ValueError:
                return None
        return None

    def over(self, target: DropTarget) -> None:
        """
        Reflow visual contínuo durante o gesto

        Só move quando a coluna sob o cursor difere da coluna atual da
        tarefa, então alvos repetidos não mudam nada.
        """
        if not self.is_dragging or target is None:
            return

        over_column = self.resolve_column(target)
        if over_column is None:
            return

        self.phase = DragPhase.HOVER_TASK if is_task_target(target) else DragPhase.HOVER_COLUMN

        projection = self.store.projection
        active_column = projection.column_of(self.active_id)
        if active_column is None or active_column == over_column:
            return

        # Fim da coluna por padrão; logo depois da tarefa sob o cursor
        index = None
        if is_task_target(target):
            index = projection.columns[over_column].index(target) + 1

        self.store.dispatch(MoveTask(self.active_id, over_column, index))

    async def drop(self, target: DropTarget) -> DropResult:
        """Fim do gesto - persiste a mudança de coluna ou só reordena localmente"""
        if not self.is_dragging:
            raise DragError('Nenhum drag em andamento')

        self.phase = DragPhase.DROPPED
        try:
            if target is None:
                self._restore_origin()
                return DropResult.CANCELLED

            task = self.store.projection.tasks.get(self.active_id)
            if task is None:
                logger.error(f"❌ Tarefa {self.active_id} não encontrada no drop")
                raise DragError(f'Tarefa {self.active_id} não encontrada')

            target_column = self.resolve_column(target)
            if target_column is None:
                logger.error(f"❌ Não foi possível determinar a coluna de destino ({target!r})")
                self._restore_origin()
                raise DragError(f'Coluna de destino indeterminada: {target!r}')

            if task.status == target_column:
                return self._reorder(target_column, target)

            return await self._move(task, target_column)
        finally:
            self._reset()

    def cancel(self) -> None:
        """Descarta o gesto (ex.: Esc) desfazendo o reflow provisório"""
        if self.is_dragging:
            self._restore_origin()
        self._reset()

    # === Métodos auxiliares ===

    def _reorder(self, status: TaskStatus, target: DropTarget) -> DropResult:
        projection = self.store.projection
        column = projection.columns[status]

        if self.active_id not in column:
            self.store.dispatch(MoveTask(self.active_id, status, self.origin_index))
            column = self.store.projection.columns[status]

        active_index = column.index(self.active_id)
        over_index = active_index
        if is_task_target(target) and target in column:
            over_index = column.index(target)

        if active_index == over_index:
            return DropResult.UNCHANGED

        self.store.dispatch(ReorderColumn(status, active_index, over_index))
        return DropResult.REORDERED

    async def _move(self, task: TaskRecord, target_column: TaskStatus) -> DropResult:
        # Garante que a projeção mostre a tarefa no destino mesmo sem drag-over
        if self.store.projection.column_of(task.id) != target_column:
            self.store.dispatch(MoveTask(task.id, target_column))

        try:
            await self.update_task(task.with_status(target_column))
        except Exception as e:
            logger.error(f"❌ Falha ao mover tarefa {task.id} para '{target_column.value}': {e}")
            # Volta para o status canônico atual: um task_updated pode ter chegado durante a chamada
            current = self.store.projection.tasks.get(task.id)
            if current is not None and current.status != target_column:
                index = self.origin_index if current.status == self.origin_status else None
                self.store.dispatch(MoveTask(task.id, current.status, index))
            raise

        logger.info(f"✅ Tarefa {task.id}: '{task.status.value}' -> '{target_column.value}'")
        return DropResult.MOVED

    def _restore_origin(self):
        task = self.store.projection.tasks.get(self.active_id)
        if task is None:
            return
        index = self.origin_index if task.status == self.origin_status else None
        self.store.dispatch(MoveTask(task.id, task.status, index))
