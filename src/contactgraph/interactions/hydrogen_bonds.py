"""Hydrogen bond donors/acceptors and the hydrogen bond family.

Angle criteria follow HBPLUS (doi:10.1006/jmbi.1994.1334); the longer
sulfur cut-off follows doi:10.1002/prot.22327.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import numpy as np

from .. import functional_groups as fg
from .. import geometry as geom
from ..geometry import IdealGeometry
from .contact_store import ContactType
from .detector import ContactFamily, type_pairs
from .features import FeatureSet, FeatureType, add_single_atom

if TYPE_CHECKING:
    from ..structure import Structure
    from ..valence_model import ValenceModel
    from .contact_store import Contacts
    from .thresholds import ContactThresholds

logger = logging.getLogger(__name__)

C, N, O, S = 6, 7, 8, 16


def is_histidine_nitrogen(s: Structure, a: int) -> bool:
    """Ring nitrogen of histidine; protonation is ambiguous so it is both donor and acceptor."""
    return s.resname(a) == "HIS" and s.number(a) == N and s.is_ring(a)


def add_hydrogen_donors(s: Structure, features: FeatureSet, vm: ValenceModel) -> None:
    for a in s.atoms():
        if is_histidine_nitrogen(s, a) or (vm.total_h[a] > 0 and s.number(a) in (N, O, S)):
            add_single_atom(features, s, a, FeatureType.HydrogenDonor)


def add_weak_hydrogen_donors(s: Structure, features: FeatureSet, vm: ValenceModel) -> None:
    """C-H next to N/O, or in an aromatic ring containing N/O."""
    for a in s.atoms():
        if s.number(a) != C or vm.total_h[a] <= 0:
            continue
        if (
            s.bond_to_element_count(a, N) > 0
            or s.bond_to_element_count(a, O) > 0
            or fg.in_aromatic_ring_with_electronegative_element(s, a)
        ):
            add_single_atom(features, s, a, FeatureType.WeakHydrogenDonor)


def _has_free_lone_pair(s: Structure, a: int, vm: ValenceModel) -> bool:
    total_bonds = s.bond_count(a) + int(vm.implicit_h[a])
    ig = int(vm.ideal_geometry[a])
    return (
        (ig == IdealGeometry.Tetrahedral and total_bonds < 4)
        or (ig == IdealGeometry.Trigonal and total_bonds < 3)
        or (ig == IdealGeometry.Linear and total_bonds < 2)
    )


def add_hydrogen_acceptors(s: Structure, features: FeatureSet, vm: ValenceModel) -> None:
    for a in s.atoms():
        number = s.number(a)
        if number == O:
            accept = True
        elif number == N:
            accept = is_histidine_nitrogen(s, a) or (vm.charge[a] < 1 and _has_free_lone_pair(s, a, vm))
        elif number == S:
            accept = s.resname(a) in ("CYS", "MET") or s.formal_charge(a) == -1
        else:
            accept = False
        if accept:
            add_single_atom(features, s, a, FeatureType.HydrogenAcceptor)


def hydrogen_bond_type(s: Structure, donor: int, acceptor: int) -> ContactType:
    if s.is_water(donor) and s.is_water(acceptor):
        return ContactType.WaterHydrogenBond
    if s.is_backbone(donor) and s.is_backbone(acceptor):
        return ContactType.BackboneHydrogenBond
    return ContactType.HydrogenBond


def hydrogen_bond_family(s: Structure, contacts: Contacts, thr: ContactThresholds, vm: ValenceModel) -> ContactFamily:
    features = contacts.features
    types = features.types
    atom_sets = features.atom_sets

    max_dist_sq = thr.max_hbond_dist**2
    max_sulfur_dist_sq = thr.max_hbond_sulfur_dist**2
    max_acc_angle = np.radians(thr.max_hbond_acc_angle)
    max_don_angle = np.radians(thr.max_hbond_don_angle)
    max_acc_plane = np.radians(thr.max_hbond_acc_plane_angle)
    max_don_plane = np.radians(thr.max_hbond_don_plane_angle)

    def classify(i: int, j: int, d_sq: float):
        weak = FeatureType.WeakHydrogenDonor in (types[i], types[j])
        don_f, acc_f = (i, j) if types[j] == FeatureType.HydrogenAcceptor else (j, i)
        donor, acceptor = atom_sets[don_f][0], atom_sets[acc_f][0]
        if donor == acceptor:
            return None
        limit_sq = max_sulfur_dist_sq if S in (s.number(donor), s.number(acceptor)) else max_dist_sq
        if d_sq > limit_sq:
            return None
        if s.connected(donor, acceptor):
            return None

        don_geom = int(vm.ideal_geometry[donor])
        ideal = geom.ideal_angle(don_geom)
        if any(abs(ideal - a) > max_don_angle for a in geom.calc_angles(s, donor, acceptor)):
            return None
        if don_geom == IdealGeometry.Trigonal:
            out_of_plane = geom.calc_plane_angle(s, donor, acceptor)
            if out_of_plane is not None and out_of_plane > max_don_plane:
                return None

        acc_geom = int(vm.ideal_geometry[acceptor])
        ideal = geom.ideal_angle(acc_geom)
        # large acceptor angles are not limited
        if any(ideal - a > max_acc_angle for a in geom.calc_angles(s, acceptor, donor)):
            return None
        if acc_geom == IdealGeometry.Trigonal:
            out_of_plane = geom.calc_plane_angle(s, acceptor, donor)
            if out_of_plane is not None and out_of_plane > max_acc_plane:
                return None

        contact_type = ContactType.WeakHydrogenBond if weak else hydrogen_bond_type(s, donor, acceptor)
        return don_f, acc_f, contact_type

    return ContactFamily(
        name="hydrogen bonds",
        radius=max(thr.max_hbond_dist, thr.max_hbond_sulfur_dist),
        pairs=type_pairs(
            (FeatureType.HydrogenDonor, FeatureType.HydrogenAcceptor),
            (FeatureType.WeakHydrogenDonor, FeatureType.HydrogenAcceptor),
        ),
        classify=classify,
    )
