# lighter/registry.py
import uuid
from typing import TYPE_CHECKING, Dict, Optional

from .errors import DuplicateIdentifierError

if TYPE_CHECKING:
    from .core import Node


def create_new_id() -> str:
    """Mints an identifier that no live node can already be using."""
    return f"c-{uuid.uuid4()}"


class NodeRegistry:
    """
    Id -> live node map.

    Entries are added when a node is created and removed when it is destroyed.
    Removal is idempotent because a subtree teardown can reach a node twice.
    """

    def __init__(self):
        self._nodes: Dict[str, "Node"] = {}

    def register(self, node: "Node") -> None:
        existing = self._nodes.get(node.id)
        if existing is not None and existing is not node:
            raise DuplicateIdentifierError(node.id)
        self._nodes[node.id] = node

    def unregister(self, node_id: str) -> None:
        self._nodes.pop(node_id, None)

    def lookup(self, node_id: Optional[str]) -> Optional["Node"]:
        if node_id is None:
            return None
        return self._nodes.get(node_id)

    def __contains__(self, node_id) -> bool:
        return node_id in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)
