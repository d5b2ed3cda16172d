"""Halogen bond donors/acceptors and the halogen bond family.

Optimal angles after Auffinger et al., PNAS 101, 16789 (2004); the
C-X...A optimum is taken as 180 degrees to allow for spherical statistics.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

from .. import functional_groups as fg
from .. import geometry as geom
from .contact_store import ContactType
from .detector import ContactFamily, type_pairs
from .features import FeatureGroup, FeatureSet, FeatureType, add_single_atom

if TYPE_CHECKING:
    from ..structure import Structure
    from .contact_store import Contacts
    from .thresholds import ContactThresholds

C = 6
HALOGEN_BOND_DONORS = (17, 35, 53, 85)  # Cl, Br, I, At; never F
ACCEPTOR_ELEMENTS = (7, 8, 16)  # N, O, S
ACCEPTOR_PARTNERS = (6, 7, 15, 16)  # C, N, P, S

OPTIMAL_HALOGEN_ANGLE = np.radians(180.0)
OPTIMAL_ACCEPTOR_ANGLE = np.radians(120.0)


def add_halogen_donors(s: Structure, features: FeatureSet) -> None:
    for a in s.atoms():
        if s.number(a) in HALOGEN_BOND_DONORS and s.bond_to_element_count(a, C) == 1:
            group = FeatureGroup.Halocarbon if fg.is_halocarbon(s, a) else FeatureGroup.Unknown
            add_single_atom(features, s, a, FeatureType.HalogenDonor, group)


def add_halogen_acceptors(s: Structure, features: FeatureSet) -> None:
    for a in s.atoms():
        if s.number(a) not in ACCEPTOR_ELEMENTS:
            continue
        if any(s.number(b) in ACCEPTOR_PARTNERS for b in s.neighbors(a)):
            add_single_atom(features, s, a, FeatureType.HalogenAcceptor)


def halogen_bond_family(s: Structure, contacts: Contacts, thr: ContactThresholds) -> ContactFamily:
    types = contacts.features.types
    atom_sets = contacts.features.atom_sets
    max_angle = np.radians(thr.max_halogen_bond_angle)

    def classify(i: int, j: int, d_sq: float):
        if types[i] == FeatureType.HalogenDonor:
            halogen, acceptor = atom_sets[i][0], atom_sets[j][0]
        else:
            halogen, acceptor = atom_sets[j][0], atom_sets[i][0]

        halogen_angles = geom.calc_angles(s, halogen, acceptor)
        # singly bonded halogen only, not halide ions
        if len(halogen_angles) != 1:
            return None
        if OPTIMAL_HALOGEN_ANGLE - halogen_angles[0] > max_angle:
            return None

        acceptor_angles = geom.calc_angles(s, acceptor, halogen)
        # undefined acceptor angle (e.g. water) is rejected
        if not acceptor_angles:
            return None
        if any(OPTIMAL_ACCEPTOR_ANGLE - a > max_angle for a in acceptor_angles):
            return None
        return i, j, ContactType.HalogenBond

    return ContactFamily(
        name="halogen bonds",
        radius=thr.max_halogen_bond_dist,
        pairs=type_pairs((FeatureType.HalogenDonor, FeatureType.HalogenAcceptor)),
        classify=classify,
    )
