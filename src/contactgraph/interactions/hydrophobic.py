"""Hydrophobic atoms and contacts."""

from __future__ import annotations

from typing import TYPE_CHECKING

from .contact_store import ContactType
from .detector import ContactFamily, type_pairs
from .features import FeatureSet, FeatureType, add_single_atom

if TYPE_CHECKING:
    from ..structure import Structure
    from .contact_store import Contacts
    from .thresholds import ContactThresholds

H, C, F = 1, 6, 9


def is_hydrophobic_atom(s: Structure, a: int) -> bool:
    """Carbon bonded only to carbon or hydrogen, or any fluorine."""
    number = s.number(a)
    if number == F:
        return True
    return number == C and all(s.number(b) in (C, H) for b in s.neighbors(a))


def add_hydrophobic(s: Structure, features: FeatureSet) -> None:
    for a in s.atoms():
        if is_hydrophobic_atom(s, a):
            add_single_atom(features, s, a, FeatureType.Hydrophobic)


def hydrophobic_family(s: Structure, contacts: Contacts, thr: ContactThresholds) -> ContactFamily:
    atom_sets = contacts.features.atom_sets

    def classify(i: int, j: int, d_sq: float):
        a1, a2 = atom_sets[i][0], atom_sets[j][0]
        if s.number(a1) == F and s.number(a2) == F:
            return None
        if s.connected(a1, a2):
            return None
        return i, j, ContactType.Hydrophobic

    return ContactFamily(
        name="hydrophobic",
        radius=thr.max_hydrophobic_dist,
        pairs=type_pairs((FeatureType.Hydrophobic, FeatureType.Hydrophobic)),
        classify=classify,
    )
