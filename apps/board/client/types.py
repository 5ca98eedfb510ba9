# apps/board/client/types.py

from dataclasses import asdict, dataclass, replace
from typing import Any, Dict, Optional

from apps.core.choices import TaskStatus


@dataclass(frozen=True)
class TaskRecord:
    """Tarefa canônica como vista pelo cliente (última versão recebida do servidor)"""

    id: int
    title: str
    status: TaskStatus
    project_id: int
    description: str = ''
    user_id: Optional[int] = None
    assigned_to: Optional[int] = None
    assigned_user_name: Optional[str] = None

    def __post_init__(self):
        # Colunas são indexadas pelo membro do enum, nunca pela string crua
        object.__setattr__(self, 'status', TaskStatus(self.status))

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'TaskRecord':
        """Status fora do conjunto fixo levanta ValueError"""
        return cls(
            id=int(data['id']),
            title=data.get('title') or '',
            status=TaskStatus(data['status']),
            project_id=int(data['project_id']),
            description=data.get('description') or '',
            user_id=data.get('user_id'),
            assigned_to=data.get('assigned_to'),
            assigned_user_name=data.get('assigned_user_name'),
        )

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['status'] = self.status.value
        return data

    def with_status(self, status: TaskStatus) -> 'TaskRecord':
        return replace(self, status=TaskStatus(status))
