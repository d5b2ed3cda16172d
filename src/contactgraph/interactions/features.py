"""Interaction features: typed groups of atoms with an averaged centre."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import TYPE_CHECKING, Iterator

import numpy as np

if TYPE_CHECKING:
    from ..structure import Structure


class FeatureType(IntEnum):
    Unknown = 0
    PositiveCharge = 1
    NegativeCharge = 2
    AromaticRing = 3
    HydrogenDonor = 4
    HydrogenAcceptor = 5
    HalogenDonor = 6
    HalogenAcceptor = 7
    Hydrophobic = 8
    WeakHydrogenDonor = 9
    IonicTypePartner = 10
    DativeBondPartner = 11
    TransitionMetal = 12
    IonicTypeMetal = 13


class FeatureGroup(IntEnum):
    Unknown = 0
    QuaternaryAmine = 1
    TertiaryAmine = 2
    Sulfonium = 3
    SulfonicAcid = 4
    Sulfate = 5
    Phosphate = 6
    Halocarbon = 7
    Guanidine = 8
    Acetamidine = 9
    Carboxylate = 10


@dataclass
class FeatureBuilder:
    """Scratch state for one feature while its atoms are collected."""

    type: FeatureType = FeatureType.Unknown
    group: FeatureGroup = FeatureGroup.Unknown
    coord_sum: np.ndarray = field(default_factory=lambda: np.zeros(3))
    atoms: list[int] = field(default_factory=list)

    def add_atom(self, structure: Structure, atom: int) -> FeatureBuilder:
        self.coord_sum = self.coord_sum + structure.position(atom)
        self.atoms.append(int(atom))
        return self

    @property
    def center(self) -> np.ndarray:
        return self.coord_sum / len(self.atoms)


@dataclass(frozen=True)
class Feature:
    """Read-only view of one stored feature."""

    index: int
    type: FeatureType
    group: FeatureGroup
    center: np.ndarray
    atoms: tuple[int, ...]

    @property
    def representative(self) -> int:
        """First member atom, used for validity and identity checks."""
        return self.atoms[0]


class FeatureSet:
    """Columnar feature storage indexed by a dense feature index.

    Builders are appended during extraction; :meth:`freeze` ends that
    phase and exposes the numpy columns.
    """

    def __init__(self) -> None:
        self._types: list[int] = []
        self._groups: list[int] = []
        self._centers: list[np.ndarray] = []
        self._atom_sets: list[tuple[int, ...]] = []
        self._frozen = False
        self._types_arr: np.ndarray | None = None
        self._groups_arr: np.ndarray | None = None
        self._centers_arr: np.ndarray | None = None

    def add(self, builder: FeatureBuilder) -> int | None:
        """Finalize ``builder``; returns the new feature index, or None when it has no atoms."""
        if self._frozen:
            raise RuntimeError("FeatureSet is frozen; features can no longer be added")
        if not builder.atoms:
            return None
        self._types.append(int(builder.type))
        self._groups.append(int(builder.group))
        self._centers.append(builder.center)
        self._atom_sets.append(tuple(builder.atoms))
        return len(self._types) - 1

    def freeze(self) -> FeatureSet:
        if not self._frozen:
            self._frozen = True
            self._types_arr = np.array(self._types, dtype=np.int8)
            self._groups_arr = np.array(self._groups, dtype=np.int8)
            self._centers_arr = np.array(self._centers, dtype=np.float32).reshape(-1, 3)
            for arr in (self._types_arr, self._groups_arr, self._centers_arr):
                arr.setflags(write=False)
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    def _require_frozen(self) -> None:
        if not self._frozen:
            raise RuntimeError("FeatureSet must be frozen before its columns are read")

    @property
    def types(self) -> np.ndarray:
        self._require_frozen()
        return self._types_arr

    @property
    def groups(self) -> np.ndarray:
        self._require_frozen()
        return self._groups_arr

    @property
    def centers(self) -> np.ndarray:
        """(n, 3) float32 feature centres."""
        self._require_frozen()
        return self._centers_arr

    @property
    def atom_sets(self) -> tuple[tuple[int, ...], ...]:
        return tuple(self._atom_sets)

    def atom_set(self, i: int) -> tuple[int, ...]:
        return self._atom_sets[i]

    def representative(self, i: int) -> int:
        return self._atom_sets[i][0]

    def __len__(self) -> int:
        return len(self._types)

    def __getitem__(self, i: int) -> Feature:
        self._require_frozen()
        return Feature(
            index=i,
            type=FeatureType(int(self._types_arr[i])),
            group=FeatureGroup(int(self._groups_arr[i])),
            center=self._centers_arr[i],
            atoms=self._atom_sets[i],
        )

    def __iter__(self) -> Iterator[Feature]:
        for i in range(len(self)):
            yield self[i]

    def count(self, feature_type: FeatureType) -> int:
        return sum(1 for t in self._types if t == feature_type)

    def of_type(self, feature_type: FeatureType) -> list[int]:
        """Indices of features with ``feature_type``."""
        return [i for i, t in enumerate(self._types) if t == feature_type]


def add_single_atom(
    features: FeatureSet,
    structure: Structure,
    atom: int,
    feature_type: FeatureType,
    group: FeatureGroup = FeatureGroup.Unknown,
) -> None:
    features.add(FeatureBuilder(feature_type, group).add_atom(structure, atom))
