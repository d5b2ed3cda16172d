"""Metal binding partners, metals and the metal coordination family."""

from __future__ import annotations

from typing import TYPE_CHECKING

from .contact_store import ContactType
from .detector import ContactFamily, type_pairs
from .features import FeatureSet, FeatureType, add_single_atom

if TYPE_CHECKING:
    from ..structure import Structure
    from .contact_store import Contacts
    from .thresholds import ContactThresholds

N, O, S, ZN, CD = 7, 8, 16, 30, 48

IONIC_TYPE_METALS = frozenset({
    3, 11, 19, 37, 55,  # Li Na K Rb Cs
    12, 20, 38, 56,  # Mg Ca Sr Ba
    13, 31, 49, 81,  # Al Ga In Tl
    21, 50, 82, 83, 51, 80,  # Sc Sn Pb Bi Sb Hg
})

OXYGEN_BINDING_RESIDUES = ("ASP", "GLU", "SER", "THR", "TYR", "ASN", "GLN")
BASE_DATIVE_ATOMS = ("N3", "N4", "N7")
BASE_OXYGEN_ATOMS = ("O2", "O4", "O6")


def metal_binding_roles(s: Structure, a: int) -> tuple[bool, bool]:
    """``(dative, ionic)`` partner roles of an atom.

    Depends on whether the atom sits in a standard amino acid, a
    standard nucleotide or anything else (ligands, water, ions).
    """
    number = s.number(a)
    resname = s.resname(a)

    if s.is_amino_acid(a):
        if number == O:
            if (resname in OXYGEN_BINDING_RESIDUES and s.is_sidechain(a)) or s.is_backbone(a):
                return True, True
        elif number == S and resname == "CYS":
            return True, True
        elif number == N and resname == "HIS" and s.is_sidechain(a):
            return True, False
        return False, False

    if s.is_nucleotide(a):
        name = s.atomname(a)
        if number == O and s.is_backbone(a):
            return True, True
        if name in BASE_DATIVE_ATOMS:
            return True, False
        if name in BASE_OXYGEN_ATOMS:
            return True, True
        return False, False

    if s.is_halogen(a) or number in (O, S):
        return True, True
    if number == N:
        return True, False
    return False, False


def add_metal_binding(s: Structure, features: FeatureSet) -> None:
    for a in s.atoms():
        dative, ionic = metal_binding_roles(s, a)
        if dative:
            add_single_atom(features, s, a, FeatureType.DativeBondPartner)
        if ionic:
            add_single_atom(features, s, a, FeatureType.IonicTypePartner)


def add_metals(s: Structure, features: FeatureSet) -> None:
    for a in s.atoms():
        if s.is_transition_metal(a) or s.number(a) in (ZN, CD):
            add_single_atom(features, s, a, FeatureType.TransitionMetal)
        elif s.number(a) in IONIC_TYPE_METALS:
            add_single_atom(features, s, a, FeatureType.IonicTypeMetal)


def is_metal_complex(metal_type: int, partner_type: int) -> bool:
    if metal_type == FeatureType.TransitionMetal:
        return partner_type in (FeatureType.DativeBondPartner, FeatureType.TransitionMetal)
    if metal_type == FeatureType.IonicTypeMetal:
        return partner_type == FeatureType.IonicTypePartner
    return False


def metal_coordination_family(s: Structure, contacts: Contacts, thr: ContactThresholds) -> ContactFamily:
    types = contacts.features.types
    atom_sets = contacts.features.atom_sets

    def classify(i: int, j: int, d_sq: float):
        m1 = s.is_metal(atom_sets[i][0])
        m2 = s.is_metal(atom_sets[j][0])
        if not m1 and not m2:
            return None
        ti, tj = (int(types[i]), int(types[j])) if m1 else (int(types[j]), int(types[i]))
        if is_metal_complex(ti, tj):
            return i, j, ContactType.MetalCoordination
        return None

    return ContactFamily(
        name="metal coordination",
        radius=thr.max_metal_dist,
        pairs=type_pairs(
            (FeatureType.TransitionMetal, FeatureType.DativeBondPartner),
            (FeatureType.TransitionMetal, FeatureType.TransitionMetal),
            (FeatureType.IonicTypeMetal, FeatureType.IonicTypePartner),
        ),
        classify=classify,
    )
