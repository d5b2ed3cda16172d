"""Charge centres, aromatic rings and the ionic / pi-stacking / cation-pi family."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import numpy as np

from .. import functional_groups as fg
from .. import geometry as geom
from .contact_store import ContactType
from .detector import ContactFamily, type_pairs
from .features import FeatureBuilder, FeatureGroup, FeatureSet, FeatureType

if TYPE_CHECKING:
    from ..structure import Structure
    from ..valence_model import ValenceModel
    from .contact_store import Contacts
    from .thresholds import ContactThresholds

logger = logging.getLogger(__name__)

N, O = 7, 8

POSITIVELY_CHARGED = ("ARG", "HIS", "LYS")
NEGATIVELY_CHARGED = ("GLU", "ASP")


def _is_ligand_residue(s: Structure, r: int) -> bool:
    a = s.residue_atoms(r)[0]
    return not s.is_amino_acid(a) and not s.is_nucleotide(a)


def cation_group(s: Structure, a: int) -> FeatureGroup:
    if fg.is_quaternary_amine(s, a):
        return FeatureGroup.QuaternaryAmine
    if fg.is_tertiary_amine(s, a):
        return FeatureGroup.TertiaryAmine
    if fg.is_sulfonium(s, a):
        return FeatureGroup.Sulfonium
    return FeatureGroup.Unknown


def add_positive_charges(s: Structure, features: FeatureSet, vm: ValenceModel) -> None:
    """Charged sidechains of ARG/HIS/LYS; guanidine, acetamidine and cations elsewhere."""
    in_group: set[int] = set()
    for r in s.residues():
        atoms = s.residue_atoms(r)
        resname = s.residue_name(r)
        if resname in POSITIVELY_CHARGED:
            builder = FeatureBuilder(FeatureType.PositiveCharge)
            for a in atoms:
                if s.number(a) == N and s.is_sidechain(a):
                    builder.add_atom(s, a)
            features.add(builder)
        elif _is_ligand_residue(s, r):
            for a in atoms:
                if fg.is_guanidine(s, a):
                    group = FeatureGroup.Guanidine
                elif fg.is_acetamidine(s, a):
                    group = FeatureGroup.Acetamidine
                else:
                    continue
                builder = FeatureBuilder(FeatureType.PositiveCharge, group)
                for b in s.neighbors(a):
                    if s.number(b) == N:
                        in_group.add(b)
                        builder.add_atom(s, b)
                features.add(builder)
            for a in atoms:
                if vm.charge[a] > 0 and a not in in_group:
                    features.add(FeatureBuilder(FeatureType.PositiveCharge, cation_group(s, a)).add_atom(s, a))


def _oxygen_neighbours(s: Structure, a: int) -> list[int]:
    return [b for b in s.neighbors(a) if s.number(b) == O]


def add_negative_charges(s: Structure, features: FeatureSet, vm: ValenceModel) -> None:
    """Charged sidechains of GLU/ASP, nucleotide phosphates and anionic groups elsewhere."""
    in_group: set[int] = set()
    for r in s.residues():
        atoms = s.residue_atoms(r)
        resname = s.residue_name(r)
        if resname in NEGATIVELY_CHARGED:
            builder = FeatureBuilder(FeatureType.NegativeCharge)
            for a in atoms:
                if s.number(a) == O and s.is_sidechain(a):
                    builder.add_atom(s, a)
            features.add(builder)
        elif s.is_nucleotide(atoms[0]):
            for a in atoms:
                if fg.is_phosphate(s, a):
                    builder = FeatureBuilder(FeatureType.NegativeCharge, FeatureGroup.Phosphate)
                    for b in _oxygen_neighbours(s, a):
                        builder.add_atom(s, b)
                    features.add(builder)
        elif not s.is_amino_acid(atoms[0]):
            for a in atoms:
                if fg.is_sulfonic_acid(s, a):
                    group = FeatureGroup.SulfonicAcid
                elif fg.is_phosphate(s, a):
                    group = FeatureGroup.Phosphate
                elif fg.is_sulfate(s, a):
                    group = FeatureGroup.Sulfate
                elif fg.is_carboxylate(s, a):
                    group = FeatureGroup.Carboxylate
                else:
                    continue
                builder = FeatureBuilder(FeatureType.NegativeCharge, group)
                for b in _oxygen_neighbours(s, a):
                    in_group.add(b)
                    builder.add_atom(s, b)
                features.add(builder)
            for a in atoms:
                if vm.charge[a] < 0 and a not in in_group:
                    features.add(FeatureBuilder(FeatureType.NegativeCharge).add_atom(s, a))


def add_aromatic_rings(s: Structure, features: FeatureSet) -> None:
    for r in s.residues():
        for ring in s.aromatic_rings(r):
            builder = FeatureBuilder(FeatureType.AromaticRing)
            for a in ring:
                builder.add_atom(s, a)
            features.add(builder)


def ring_normal(s: Structure, atoms: tuple[int, ...]) -> np.ndarray:
    """Least-squares plane normal of a ring."""
    return geom.plane_normal(s.positions[list(atoms)])


def _offset(center: np.ndarray, origin: np.ndarray, normal: np.ndarray) -> float:
    return geom.in_plane_offset(center, origin, normal)


def _atom_sets_within(s: Structure, set1: tuple[int, ...], set2: tuple[int, ...], max_dist: float) -> bool:
    p1 = s.positions[list(set1)]
    p2 = s.positions[list(set2)]
    d = p1[:, None, :] - p2[None, :, :]
    return bool(np.any(np.einsum("ijk,ijk->ij", d, d) <= max_dist * max_dist))


def charged_family(s: Structure, contacts: Contacts, thr: ContactThresholds) -> ContactFamily:
    """Ionic interactions, pi-stacking and cation-pi in one scan."""
    features = contacts.features
    types = features.types
    centers = features.centers.astype(np.float64)
    atom_sets = features.atom_sets

    max_pi_sq = thr.max_pi_stacking_dist**2
    max_cation_pi_sq = thr.max_cation_pi_dist**2
    normals: dict[int, np.ndarray] = {}

    def normal(f: int) -> np.ndarray:
        if f not in normals:
            normals[f] = ring_normal(s, atom_sets[f])
        return normals[f]

    def classify(i: int, j: int, d_sq: float):
        ti, tj = int(types[i]), int(types[j])
        if {ti, tj} == {FeatureType.PositiveCharge, FeatureType.NegativeCharge}:
            if _atom_sets_within(s, atom_sets[i], atom_sets[j], thr.max_ionic_dist):
                return i, j, ContactType.IonicInteraction
            return None

        if ti == tj == FeatureType.AromaticRing:
            if d_sq > max_pi_sq:
                return None
            n1, n2 = normal(i), normal(j)
            angle = geom.angle_deg(n1, n2)
            offset = min(_offset(centers[i], centers[j], n2), _offset(centers[j], centers[i], n1))
            if offset > thr.max_pi_stacking_offset:
                return None
            theta = thr.max_pi_stacking_angle
            parallel = angle <= theta or angle >= 180.0 - theta
            t_shaped = 90.0 - theta <= angle <= 90.0 + theta
            if parallel or t_shaped:
                return i, j, ContactType.PiStacking
            return None

        # cation-pi
        if d_sq > max_cation_pi_sq:
            return None
        ring, cation = (i, j) if ti == FeatureType.AromaticRing else (j, i)
        if _offset(centers[cation], centers[ring], normal(ring)) <= thr.max_cation_pi_offset:
            return ring, cation, ContactType.CationPi
        return None

    return ContactFamily(
        name="charged",
        radius=max(thr.max_ionic_dist + 2.0, thr.max_pi_stacking_dist, thr.max_cation_pi_dist),
        pairs=type_pairs(
            (FeatureType.PositiveCharge, FeatureType.NegativeCharge),
            (FeatureType.AromaticRing, FeatureType.AromaticRing),
            (FeatureType.AromaticRing, FeatureType.PositiveCharge),
        ),
        classify=classify,
    )
