# apps/board/client/projection.py

"""
Projeção do board no cliente - redutor puro (estado + ação -> novo estado)

Não conhece transporte nem banco: a sessão alimenta o redutor com o
fetch inicial, com os eventos de broadcast e com os movimentos otimistas
do drag-and-drop. Toda aplicação remota é deduplicada por id, então o
eco das próprias mutações do cliente é inofensivo.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple

from apps.core.choices import BOARD_COLUMNS, TaskStatus
from .types import TaskRecord


@dataclass(frozen=True)
class BoardProjection:
    """
    tasks: id -> tarefa canônica
    columns: coluna -> ids em ordem de exibição (ordem local, não persistida)
    """

    project_id: Optional[int] = None
    tasks: Dict[int, TaskRecord] = field(default_factory=dict)
    columns: Dict[TaskStatus, Tuple[int, ...]] = field(
        default_factory=lambda: {status: () for status in BOARD_COLUMNS}
    )

    def column(self, status) -> List[TaskRecord]:
        """Tarefas de uma coluna na ordem de exibição"""
        return [self.tasks[task_id] for task_id in self.columns[TaskStatus(status)]]

    def column_of(self, task_id: int) -> Optional[TaskStatus]:
        """Coluna em que a tarefa aparece agora (pode diferir do status canônico durante um drag)"""
        for status in BOARD_COLUMNS:
            if task_id in self.columns[status]:
                return status
        return None

    def index_of(self, task_id: int) -> Optional[int]:
        status = self.column_of(task_id)
        if status is None:
            return None
        return self.columns[status].index(task_id)


# === Ações ===

@dataclass(frozen=True)
class Seed:
    project_id: int
    tasks: Tuple[TaskRecord, ...]


@dataclass(frozen=True)
class TaskCreated:
    task: TaskRecord


@dataclass(frozen=True)
class TaskUpdated:
    task: TaskRecord


@dataclass(frozen=True)
class TaskDeleted:
    task_id: int
    project_id: int


@dataclass(frozen=True)
class MoveTask:
    """Posicionamento otimista; não altera o status canônico"""

    task_id: int
    status: TaskStatus
    index: Optional[int] = None


@dataclass(frozen=True)
class ReorderColumn:
    status: TaskStatus
    from_index: int
    to_index: int


def reduce(projection: BoardProjection, action) -> BoardProjection:
    """Aplica uma ação e devolve a nova projeção (a original não é alterada)"""
    if isinstance(action, Seed):
        return seed(action.project_id, action.tasks)
    if isinstance(action, TaskCreated):
        return _apply_created(projection, action.task)
    if isinstance(action, TaskUpdated):
        return _apply_updated(projection, action.task)
    if isinstance(action, TaskDeleted):
        return _apply_deleted(projection, action.task_id, action.project_id)
    if isinstance(action, MoveTask):
        return _apply_move(projection, action.task_id, TaskStatus(action.status), action.index)
    if isinstance(action, ReorderColumn):
        return _apply_reorder(projection, TaskStatus(action.status), action.from_index, action.to_index)
    raise TypeError(f'Ação desconhecida: {action!r}')


def seed(project_id: int, tasks: Iterable[TaskRecord]) -> BoardProjection:
    """Substitui a projeção inteira, particionando pelo status"""
    by_id = {}
    for task in tasks:
        if task.project_id == project_id:
            by_id[task.id] = task

    columns = {
        status: tuple(task.id for task in by_id.values() if task.status == status)
        for status in BOARD_COLUMNS
    }
    return BoardProjection(project_id=project_id, tasks=by_id, columns=columns)


def _apply_created(projection, task):
    if task.project_id != projection.project_id:
        return projection
    # Eco de uma criação já aplicada: trata como atualização, nunca duplica
    if task.id in projection.tasks:
        return _apply_updated(projection, task)

    tasks = dict(projection.tasks)
    tasks[task.id] = task
    columns = dict(projection.columns)
    columns[task.status] = columns[task.status] + (task.id,)
    return BoardProjection(projection.project_id, tasks, columns)


def _apply_updated(projection, task):
    if task.project_id != projection.project_id:
        return projection

    in_place = projection.column_of(task.id) == task.status
    if in_place and projection.tasks.get(task.id) == task:
        return projection

    tasks = dict(projection.tasks)
    tasks[task.id] = task

    if in_place:
        # Já está na coluna certa: mantém a posição local
        return BoardProjection(projection.project_id, tasks, dict(projection.columns))

    columns = _without(projection.columns, task.id)
    columns[task.status] = columns[task.status] + (task.id,)
    return BoardProjection(projection.project_id, tasks, columns)


def _apply_deleted(projection, task_id, project_id):
    if project_id != projection.project_id:
        return projection
    if task_id not in projection.tasks and projection.column_of(task_id) is None:
        return projection

    tasks = dict(projection.tasks)
    tasks.pop(task_id, None)
    return BoardProjection(projection.project_id, tasks, _without(projection.columns, task_id))


def _apply_move(projection, task_id, status, index):
    if task_id not in projection.tasks:
        return projection

    columns = _without(projection.columns, task_id)
    target = list(columns[status])
    if index is None or index > len(target):
        index = len(target)
    target.insert(max(index, 0), task_id)
    columns[status] = tuple(target)

    if columns == projection.columns:
        return projection
    return BoardProjection(projection.project_id, dict(projection.tasks), columns)


def _apply_reorder(projection, status, from_index, to_index):
    items = list(projection.columns[status])
    if from_index == to_index:
        return projection
    if not (0 <= from_index < len(items) and 0 <= to_index < len(items)):
        return projection

    items.insert(to_index, items.pop(from_index))
    columns = dict(projection.columns)
    columns[status] = tuple(items)
    return BoardProjection(projection.project_id, dict(projection.tasks), columns)


def _without(columns, task_id):
    return {
        status: tuple(item for item in ids if item != task_id)
        for status, ids in columns.items()
    }


class ProjectionStore:
    """
    Guarda a projeção viva de um cliente e aplica ações pelo redutor

    Ouvintes recebem (projeção, ação) depois de cada mudança efetiva.
    """

    def __init__(self, projection: Optional[BoardProjection] = None):
        self.projection = projection or BoardProjection()
        self._listeners = []

    def dispatch(self, action) -> BoardProjection:
        new_projection = reduce(self.projection, action)
        if new_projection is not self.projection:
            self.projection = new_projection
            for listener in list(self._listeners):
                listener(new_projection, action)
        return self.projection

    def subscribe(self, listener):
        """Registra um ouvinte e devolve a função que o remove"""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe
