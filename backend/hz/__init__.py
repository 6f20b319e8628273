from .connection import ConnectionHealth, HazelcastConnectionManager, NotConnectedError
from .errors import available_structures, simple_type_name, translate_error

__all__ = [
    "ConnectionHealth",
    "HazelcastConnectionManager",
    "NotConnectedError",
    "available_structures",
    "simple_type_name",
    "translate_error",
]
