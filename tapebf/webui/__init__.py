from .app import create_app
from .session import MachineRecord, MachineStore

__all__ = [
    "create_app",
    "MachineRecord",
    "MachineStore",
]
