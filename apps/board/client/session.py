# apps/board/client/session.py

"""
Sessão do board no cliente - liga projeção, API e Broadcast Channel

O transporte do WebSocket fica de fora: a sessão recebe uma corrotina
send(frame) para as mensagens de saída e é alimentada com os frames
recebidos via handle_message(frame) ou consume(frames).

Exemplo com uma conexão que envia e itera texto JSON:

    async def send(frame):
        await connection.send(json.dumps(frame))

    async with TaskApiClient('http://localhost:8000') as api:
        session = BoardSession(api, send)
        listener = asyncio.create_task(session.consume(connection))
        await session.select_project(7)
"""

import json
import logging
from typing import Any, AsyncIterable, Awaitable, Callable, Dict, List, Optional, Union

from .api import TaskApiClient
from .drag import DragEngine
from .projection import BoardProjection, ProjectionStore, Seed, TaskCreated, TaskDeleted, TaskUpdated
from .types import TaskRecord

logger = logging.getLogger(__name__)


class BoardSession:
    """Projeção de um projeto por vez, sincronizada com o servidor"""

    def __init__(self, api: TaskApiClient, send: Callable[[Dict[str, Any]], Awaitable[None]]):
        self.api = api
        self.send = send
        self.store = ProjectionStore()
        self.drag = DragEngine(self.store, self.update_task)
        self.project_id: Optional[int] = None
        # Eventos recebidos entre o join e o fim do fetch inicial
        self._pending: Optional[List[Any]] = None

    @property
    def projection(self) -> BoardProjection:
        return self.store.projection

    async def select_project(self, project_id: int) -> BoardProjection:
        """
        Troca de projeto: sai do canal anterior, entra no novo e semeia a projeção

        Eventos que chegam enquanto o fetch está em voo ficam guardados e são
        reaplicados depois do Seed (a aplicação remota é deduplicada por id).
        Também serve para ressincronizar depois de uma reconexão.
        """
        previous = self.project_id
        if self.drag.is_dragging:
            self.drag.cancel()
        if previous is not None and previous != project_id:
            await self.send({'type': 'leave_project', 'project_id': previous})

        self.project_id = project_id
        self._pending = []
        await self.send({'type': 'join_project', 'project_id': project_id})

        try:
            tasks = await self.api.list_tasks(project_id)
        except Exception:
            if self.project_id == project_id:
                self._pending = None
            raise

        if self.project_id != project_id:
            # Outro projeto foi selecionado enquanto o fetch estava em voo
            logger.info(f"⏭️ Fetch do projeto {project_id} descartado")
            return self.projection

        pending, self._pending = self._pending, None
        self.store.dispatch(Seed(project_id, tuple(tasks)))
        for action in pending:
            self.store.dispatch(action)

        logger.info(f"✅ Projeto {project_id} carregado com {len(tasks)} tarefas ({len(pending)} eventos reaplicados)")
        return self.projection

    async def close(self) -> None:
        """Sai do canal do projeto atual"""
        if self.drag.is_dragging:
            self.drag.cancel()
        if self.project_id is not None:
            await self.send({'type': 'leave_project', 'project_id': self.project_id})
        self.project_id = None
        self._pending = None

    def handle_message(self, frame: Dict[str, Any]) -> BoardProjection:
        """Aplica um frame recebido do Broadcast Channel"""
        kind = frame.get('type')
        payload = frame.get('task')

        try:
            if kind == 'task_created':
                action = TaskCreated(TaskRecord.from_dict(payload))
            elif kind == 'task_updated':
                action = TaskUpdated(TaskRecord.from_dict(payload))
            elif kind == 'task_deleted':
                action = TaskDeleted(int(payload['id']), int(payload['project_id']))
            elif kind == 'error':
                logger.warning(f"⚠️ Erro do Broadcast Channel: {frame.get('message')}")
                return self.projection
            else:
                return self.projection
        except (KeyError, TypeError, ValueError) as e:
            logger.warning(f"⚠️ Evento {kind} inválido descartado: {e}")
            return self.projection

        if self._pending is not None:
            self._pending.append(action)
            return self.projection

        return self.store.dispatch(action)

    async def consume(self, frames: AsyncIterable[Union[str, bytes, Dict[str, Any]]]) -> None:
        """Aplica cada frame de um iterável assíncrono (texto JSON ou dict) até ele acabar"""
        async for frame in frames:
            if not isinstance(frame, dict):
                try:
                    frame = json.loads(frame)
                except (TypeError, ValueError):
                    logger.warning("⚠️ Frame não-JSON descartado")
                    continue
            if isinstance(frame, dict):
                self.handle_message(frame)

    # === Intenções de mutação ===

    async def create_task(self, fields: Dict[str, Any]) -> TaskRecord:
        """
        Cria tarefa no projeto atual

        A projeção não muda aqui: a tarefa entra quando o task_created chegar.
        """
        data = dict(fields)
        data.setdefault('project_id', self.project_id)
        return await self.api.create_task(data)

    async def update_task(self, task: TaskRecord) -> TaskRecord:
        return await self.api.update_task(task)

    async def delete_task(self, task_id: int) -> None:
        await self.api.delete_task(task_id)
