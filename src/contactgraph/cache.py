"""Explicit per-structure cache for derived data (valence model, atom lookup)."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Callable, TypeVar

if TYPE_CHECKING:
    from .structure import Structure

logger = logging.getLogger(__name__)

T = TypeVar("T")


class StructureCache:
    """Memoizes values per ``(structure.identifier, key)``.

    Owned by the caller and passed into the engine; nothing is attached
    to the structure itself.
    """

    def __init__(self) -> None:
        self._store: dict[tuple[str, str], Any] = {}

    def compute_or_get(self, structure: Structure, key: str, factory: Callable[[Structure], T]) -> T:
        """Return the cached value for ``key`` or compute it with ``factory(structure)``."""
        k = (structure.identifier, key)
        if k not in self._store:
            logger.debug("Cache miss: %s for structure %s", key, structure.identifier)
            self._store[k] = factory(structure)
        return self._store[k]

    def __contains__(self, item: tuple[str, str]) -> bool:
        return item in self._store

    def __len__(self) -> int:
        return len(self._store)
