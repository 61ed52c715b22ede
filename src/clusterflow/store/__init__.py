"""Object store da plataforma: contrato e implementação em memória."""

from .base import ChangeListener, ObjectStore
from .memory import InMemoryObjectStore

__all__ = ["ChangeListener", "ObjectStore", "InMemoryObjectStore"]
