"""Contact storage: append-only edge list, survival bit-set and CSR adjacency."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import IntEnum
from typing import TYPE_CHECKING, Iterable, Iterator

import numpy as np

if TYPE_CHECKING:
    from ..spatial_hash import SpatialHash
    from .features import FeatureSet

logger = logging.getLogger(__name__)


class ContactType(IntEnum):
    Unknown = 0
    IonicInteraction = 1
    CationPi = 2
    PiStacking = 3
    HydrogenBond = 4
    HalogenBond = 5
    Hydrophobic = 6
    MetalCoordination = 7
    WeakHydrogenBond = 8
    WaterHydrogenBond = 9
    BackboneHydrogenBond = 10


HYDROGEN_BOND_TYPES = (
    ContactType.HydrogenBond,
    ContactType.WaterHydrogenBond,
    ContactType.BackboneHydrogenBond,
)


class ContactStore:
    """Append-only list of ``(index1, index2, type)`` with ``index1 < index2``."""

    def __init__(self) -> None:
        self._index1: list[int] = []
        self._index2: list[int] = []
        self._type: list[int] = []
        self._frozen = False
        self._arrays: tuple[np.ndarray, np.ndarray, np.ndarray] | None = None

    def add_contact(self, i: int, j: int, contact_type: ContactType) -> int:
        """Store a contact between features ``i`` and ``j``; returns its index."""
        if self._frozen:
            raise RuntimeError("ContactStore is frozen; contacts can no longer be added")
        if i == j:
            raise ValueError(f"A feature cannot contact itself (feature {i})")
        if i > j:
            i, j = j, i
        self._index1.append(int(i))
        self._index2.append(int(j))
        self._type.append(int(contact_type))
        return len(self._type) - 1

    def freeze(self) -> ContactStore:
        if not self._frozen:
            self._frozen = True
            self._arrays = (
                np.array(self._index1, dtype=np.int32),
                np.array(self._index2, dtype=np.int32),
                np.array(self._type, dtype=np.int8),
            )
            for arr in self._arrays:
                arr.setflags(write=False)
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    @property
    def count(self) -> int:
        return len(self._type)

    def __len__(self) -> int:
        return len(self._type)

    @property
    def index1(self) -> np.ndarray:
        return self._arrays[0] if self._arrays else np.array(self._index1, dtype=np.int32)

    @property
    def index2(self) -> np.ndarray:
        return self._arrays[1] if self._arrays else np.array(self._index2, dtype=np.int32)

    @property
    def type(self) -> np.ndarray:
        return self._arrays[2] if self._arrays else np.array(self._type, dtype=np.int8)

    def contact(self, k: int) -> tuple[int, int, ContactType]:
        return self._index1[k], self._index2[k], ContactType(self._type[k])

    def __iter__(self) -> Iterator[tuple[int, int, ContactType]]:
        for k in range(len(self)):
            yield self.contact(k)


class ContactSet:
    """Bit-vector over contact indices; starts all set, bits are only cleared."""

    def __init__(self, size: int) -> None:
        self._bits = np.ones(size, dtype=bool)

    def __len__(self) -> int:
        return len(self._bits)

    def __contains__(self, k: int) -> bool:
        return bool(self._bits[k])

    def is_set(self, k: int) -> bool:
        return bool(self._bits[k])

    def clear(self, k: int) -> None:
        self._bits[k] = False

    def count(self) -> int:
        """Number of surviving contacts."""
        return int(np.count_nonzero(self._bits))

    def indices(self) -> np.ndarray:
        return np.flatnonzero(self._bits)

    def __iter__(self) -> Iterator[int]:
        # snapshot: clearing while iterating does not skip later entries
        for k in np.flatnonzero(self._bits).tolist():
            yield k

    def to_array(self) -> np.ndarray:
        return self._bits.copy()


class AdjacencyList:
    """CSR map from feature index to the contacts touching it.

    ``contact_indices[offsets[f]:offsets[f + 1]]`` are the contacts of
    feature ``f`` in ascending order and ``neighbors`` holds the feature
    at the other end of each of them.
    """

    def __init__(self, index1: np.ndarray, index2: np.ndarray, types: np.ndarray, node_count: int) -> None:
        index1 = np.asarray(index1, dtype=np.int64)
        index2 = np.asarray(index2, dtype=np.int64)
        m = len(index1)

        nodes = np.concatenate([index1, index2])
        others = np.concatenate([index2, index1])
        contact_ids = np.concatenate([np.arange(m), np.arange(m)])
        order = np.lexsort((contact_ids, nodes))

        counts = np.bincount(nodes, minlength=node_count) if m else np.zeros(node_count, dtype=np.int64)
        self.offsets = np.zeros(node_count + 1, dtype=np.int64)
        np.cumsum(counts, out=self.offsets[1:])
        self.contact_indices = contact_ids[order].astype(np.int32)
        self.neighbors = others[order].astype(np.int32)
        self._types = np.asarray(types)
        for arr in (self.offsets, self.contact_indices, self.neighbors):
            arr.setflags(write=False)

    @classmethod
    def from_store(cls, store: ContactStore, node_count: int) -> AdjacencyList:
        return cls(store.index1, store.index2, store.type, node_count)

    @property
    def node_count(self) -> int:
        return len(self.offsets) - 1

    def degree(self, feature: int) -> int:
        return int(self.offsets[feature + 1] - self.offsets[feature])

    def contacts_of(self, feature: int) -> np.ndarray:
        return self.contact_indices[self.offsets[feature]:self.offsets[feature + 1]]

    def neighbors_of(self, feature: int) -> np.ndarray:
        return self.neighbors[self.offsets[feature]:self.offsets[feature + 1]]

    def has_contact_of_type(
        self,
        feature: int,
        types: Iterable[ContactType],
        contact_set: ContactSet | None = None,
    ) -> bool:
        """Whether ``feature`` takes part in a contact of one of ``types``.

        With ``contact_set`` only surviving contacts count.
        """
        wanted = {int(t) for t in types}
        for k in self.contacts_of(feature).tolist():
            if int(self._types[k]) in wanted and (contact_set is None or contact_set.is_set(k)):
                return True
        return False


@dataclass
class Contacts:
    """Detection state: features, their spatial hash, the store and participation flags."""

    features: FeatureSet
    spatial_hash: SpatialHash
    store: ContactStore
    feature_flags: np.ndarray

    def add(self, i: int, j: int, contact_type: ContactType) -> int:
        self.feature_flags[i] = True
        self.feature_flags[j] = True
        return self.store.add_contact(i, j, contact_type)


@dataclass
class FrozenContacts(Contacts):
    """Detection output plus the adjacency list and survival set used by refinement."""

    adjacency: AdjacencyList = None
    contact_set: ContactSet = None

    @classmethod
    def freeze(cls, contacts: Contacts) -> FrozenContacts:
        store = contacts.store.freeze()
        adjacency = AdjacencyList.from_store(store, len(contacts.features))
        logger.debug("Frozen %d contacts over %d features", len(store), len(contacts.features))
        return cls(
            features=contacts.features,
            spatial_hash=contacts.spatial_hash,
            store=store,
            feature_flags=contacts.feature_flags,
            adjacency=adjacency,
            contact_set=ContactSet(len(store)),
        )

    def surviving(self) -> Iterator[tuple[int, int, int, ContactType]]:
        """Yield ``(contact_index, feature1, feature2, type)`` for every surviving contact."""
        for k in self.contact_set:
            i, j, t = self.store.contact(k)
            yield k, i, j, t

    def count(self, contact_type: ContactType | None = None) -> int:
        """Surviving contacts, optionally of one type."""
        if contact_type is None:
            return self.contact_set.count()
        types = self.store.type
        return sum(1 for k in self.contact_set if types[k] == contact_type)
