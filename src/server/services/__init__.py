"""
Server Services
"""

from .tree_storage import (
    TreeStore, MemoryTreeStore, JsonFileTreeStore,
    load_or_seed, default_store,
)
from .assistant import AssistantService, assistant

__all__ = [
    'TreeStore', 'MemoryTreeStore', 'JsonFileTreeStore', 'load_or_seed', 'default_store',
    'AssistantService', 'assistant',
]
