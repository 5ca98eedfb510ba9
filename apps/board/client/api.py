# apps/board/client/api.py

"""
Cliente HTTP da API de mutação de tarefas (httpx assíncrono)
"""

import logging
from typing import Any, Dict, List, Optional

import httpx

from .types import TaskRecord

logger = logging.getLogger(__name__)


class TaskApiError(RuntimeError):
    """Resposta de erro da API (ou falha de conexão, com status_code 0)"""

    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code
        self.message = message


class TaskApiNotFound(TaskApiError):
    """404 - tarefa ou projeto inexistente"""


def _error_message(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        payload = (response.text or '')[:500]
    if isinstance(payload, dict) and payload.get('error'):
        return str(payload['error'])
    if isinstance(payload, str) and payload.strip():
        return payload.strip()
    return f'Falha na requisição ({response.status_code})'


class TaskApiClient:
    """
    Operações do Task Store vistas pelo cliente

    Aceita um httpx.AsyncClient pronto (útil para testes com MockTransport)
    ou cria um a partir de base_url.
    """

    def __init__(self, base_url: str = '', timeout: float = 30, client: Optional[httpx.AsyncClient] = None):
        self._client = client or httpx.AsyncClient(
            base_url=base_url.rstrip('/'),
            timeout=timeout,
            headers={'Accept': 'application/json'},
        )

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        await self.close()

    async def list_tasks(self, project_id: int) -> List[TaskRecord]:
        data = await self._request('GET', f'/tasks/{project_id}')
        return [TaskRecord.from_dict(item) for item in data or []]

    async def create_task(self, fields: Dict[str, Any]) -> TaskRecord:
        data = await self._request('POST', '/tasks', json=fields)
        return TaskRecord.from_dict(data)

    async def update_task(self, task: TaskRecord) -> TaskRecord:
        """Substituição completa: envia o registro inteiro"""
        data = await self._request('PUT', f'/tasks/{task.id}', json=task.to_dict())
        return TaskRecord.from_dict(data)

    async def delete_task(self, task_id: int) -> None:
        await self._request('DELETE', f'/tasks/{task_id}')

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            logger.error(f"❌ {method} {path} falhou: {e}")
            raise TaskApiError(0, str(e)) from e

        if response.status_code >= 400:
            message = _error_message(response)
            logger.error(f"❌ {method} {path} -> {response.status_code}: {message}")
            if response.status_code == 404:
                raise TaskApiNotFound(response.status_code, message)
            raise TaskApiError(response.status_code, message)

        if response.status_code == 204 or not response.content:
            return None
        return response.json()
