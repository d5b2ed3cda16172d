"""Tests for connectivity-based functional group predicates."""

from __future__ import annotations

from contactgraph import build_structure
from contactgraph import functional_groups as fg

from helpers import acetate, histidine, methyl_guanidinium


def _star(center, ligands, orders=None):
    """Central atom at the origin bonded to each ligand element."""
    atoms = [(center, (0.0, 0.0, 0.0))]
    bonds = []
    for k, sym in enumerate(ligands):
        atoms.append((sym, (1.5 * (k + 1), 0.0, 0.0)))
        bonds.append((0, k + 1, (orders or {}).get(k, 1)))
    return build_structure(atoms, bonds)


def test_guanidine():
    s = methyl_guanidinium()
    assert fg.is_guanidine(s, 0)
    assert not fg.is_acetamidine(s, 0)
    assert not fg.is_guanidine(s, 4)


def test_acetamidine():
    # C(=N)(N)-CH2-CH3; the ethyl carbon is not terminal
    s = build_structure(
        [("C", (0, 0, 0)), ("N", (0, 1.3, 0)), ("N", (-1.2, -0.7, 0)), ("C", (1.3, -0.7, 0)), ("C", (2.6, 0, 0))],
        [(0, 1, 2), (0, 2), (0, 3), (3, 4)],
    )
    assert fg.is_acetamidine(s, 0)
    assert not fg.is_guanidine(s, 0)


def test_carboxylate():
    atoms, bonds = acetate(resno=1)
    s = build_structure(atoms, bonds)
    assert fg.is_carboxylate(s, 0)
    assert not fg.is_carboxylate(s, 3)


def test_ester_is_not_carboxylate():
    atoms, bonds = acetate(resno=1)
    atoms = atoms + [{"symbol": "C", "position": (2.0, -1.2, 0.0)}]
    s = build_structure(atoms, bonds + [(2, 4, 1)])
    assert not fg.is_carboxylate(s, 0)


def test_phosphate_and_sulfur_acids():
    assert fg.is_phosphate(_star("P", ["O", "O", "O", "O"]), 0)
    assert not fg.is_phosphate(_star("P", ["O", "O", "O", "C"]), 0)
    assert not fg.is_phosphate(build_structure([("P", (0, 0, 0))]), 0)
    assert fg.is_sulfate(_star("S", ["O", "O", "O", "O"]), 0)
    assert fg.is_sulfonic_acid(_star("S", ["O", "O", "O", "C"]), 0)
    assert not fg.is_sulfonic_acid(_star("S", ["O", "O", "O", "O"]), 0)


def test_sulfonium():
    assert fg.is_sulfonium(_star("S", ["C", "C", "C"]), 0)
    assert not fg.is_sulfonium(_star("S", ["C", "C", "H"]), 0)


def test_amines():
    assert fg.is_quaternary_amine(_star("N", ["C", "C", "C", "C"]), 0)
    assert not fg.is_quaternary_amine(_star("N", ["C", "C", "C", "H"]), 0)
    assert fg.is_tertiary_amine(_star("N", ["C", "C", "C", "H"]), 0)
    assert not fg.is_tertiary_amine(_star("N", ["C", "C", "C", "C"]), 0)
    assert not fg.is_tertiary_amine(_star("N", ["C", "C", "H"]), 0)


def test_halocarbon():
    s = build_structure([("C", (0, 0, 0)), ("Br", (1.9, 0, 0)), ("Cl", (6, 0, 0))], [(0, 1)])
    assert fg.is_halocarbon(s, 1)
    assert not fg.is_halocarbon(s, 2)


def test_aromatic_ring_with_nitrogen():
    s = histidine()
    assert fg.in_aromatic_ring_with_electronegative_element(s, 2)  # CE1
    assert not fg.in_aromatic_ring_with_electronegative_element(s, 5)  # CB
