"""
Tree Storage Service

Persistence for the learned decision tree. The whole tree is one JSON blob;
the engine only ever sees `load()` and `save(tree)`.
"""

import json
import logging
import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from src.engine import MalformedTreeError, Node, deserialize, seed_tree, serialize

logger = logging.getLogger(__name__)


class TreeStore(ABC):
    """Repository for a single serialized tree."""

    @abstractmethod
    def load(self) -> Optional[Node]:
        """Return the stored tree, or None when nothing usable is stored."""
        pass

    @abstractmethod
    def save(self, tree: Node) -> None:
        """Replace the stored tree. Saving the same tree twice is harmless."""
        pass

    @abstractmethod
    def clear(self) -> None:
        """Forget the stored tree."""
        pass


class MemoryTreeStore(TreeStore):
    """Keeps the serialized blob in memory. Used for tests and throwaway servers."""

    def __init__(self, tree: Optional[Node] = None):
        self._blob: Optional[dict] = serialize(tree) if tree is not None else None
        self.save_count = 0

    def load(self) -> Optional[Node]:
        if self._blob is None:
            return None
        return deserialize(self._blob)

    def save(self, tree: Node) -> None:
        self._blob = serialize(tree)
        self.save_count += 1

    def clear(self) -> None:
        self._blob = None


class JsonFileTreeStore(TreeStore):
    """
    File-based tree store.

    The tree lives in `<data_dir>/tree.json`. A missing, unreadable or
    malformed file is treated as "nothing stored" so the game can fall back to
    the seed tree.
    """

    FILENAME = "tree.json"

    def __init__(self, data_dir: str = "data"):
        self.data_dir = Path(data_dir)
        self.tree_path = self.data_dir / self.FILENAME

    def _ensure_data_dir(self):
        """Create data directory if it doesn't exist."""
        self.data_dir.mkdir(parents=True, exist_ok=True)

    def load(self) -> Optional[Node]:
        if not self.tree_path.exists():
            return None

        try:
            with open(self.tree_path, 'r') as f:
                blob = json.load(f)
            return deserialize(blob)
        except (OSError, json.JSONDecodeError, MalformedTreeError) as e:
            logger.warning("Ignoring unusable tree file %s: %s", self.tree_path, e)
            return None

    def save(self, tree: Node) -> None:
        self._ensure_data_dir()
        blob = serialize(tree)
        # tree.json is only ever replaced whole
        tmp_path = self.tree_path.with_name(self.FILENAME + ".tmp")
        try:
            with open(tmp_path, 'w') as f:
                json.dump(blob, f, indent=2)
            os.replace(tmp_path, self.tree_path)
        except BaseException:
            if tmp_path.exists():
                os.remove(tmp_path)
            raise
        logger.debug("Saved tree to %s", self.tree_path)

    def clear(self) -> None:
        if self.tree_path.exists():
            os.remove(self.tree_path)


def load_or_seed(store: TreeStore) -> Node:
    """The stored tree, or the seed tree when the store is empty."""
    tree = store.load()
    if tree is None:
        logger.info("No stored tree, starting from the seed")
        return seed_tree()
    return tree


def default_store() -> TreeStore:
    """File store under TWENTYQ_DATA_DIR (default: ./data)."""
    return JsonFileTreeStore(os.environ.get("TWENTYQ_DATA_DIR", "data"))
