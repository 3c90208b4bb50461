from __future__ import annotations

import uuid
from dataclasses import dataclass, field, replace
from typing import Dict, Optional


@dataclass(frozen=True)
class ExpansionState:
    """Global expand/collapse flag plus a cache-invalidation token.

    Tree views remember expansion per node. Whenever ``token`` changes they
    must drop that memory and re-derive every node from ``all_expanded``.
    """

    all_expanded: bool = True
    token: str = field(default_factory=lambda: uuid.uuid4().hex)

    def toggle(self) -> "ExpansionState":
        return replace(self, all_expanded=not self.all_expanded, token=uuid.uuid4().hex)


class ExpansionMemory:
    """Per-node expand/collapse memory for a tree view.

    Nodes the user toggled keep their state until the controller issues a new
    expansion token; then every node falls back to ``all_expanded``.
    """

    def __init__(self) -> None:
        self._token: Optional[str] = None
        self._default = True
        self._overrides: Dict[str, bool] = {}

    def sync(self, state: ExpansionState) -> bool:
        """Adopt ``state``; returns ``True`` if remembered state was discarded."""
        if state.token == self._token:
            return False
        self._token = state.token
        self._default = state.all_expanded
        self._overrides.clear()
        return True

    def is_expanded(self, node_id: str) -> bool:
        return self._overrides.get(node_id, self._default)

    def set_expanded(self, node_id: str, expanded: bool) -> None:
        self._overrides[node_id] = expanded

    def toggle(self, node_id: str) -> bool:
        expanded = not self.is_expanded(node_id)
        self._overrides[node_id] = expanded
        return expanded


__all__ = ["ExpansionMemory", "ExpansionState"]
