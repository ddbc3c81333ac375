from .tenancy import Instance
from .auth import User, Role
from .tasks import Task, TaskStatus

__all__ = [
    'Instance',
    'User', 'Role',
    'Task', 'TaskStatus',
]
