"""Tests for Structure construction and derived residues, rings and flags."""

from __future__ import annotations

import networkx as nx
import pytest

from contactgraph import Structure, build_structure

from helpers import backbone_pair, benzene, histidine, salt_bridge, water_dimer


def test_empty_structure_rejected():
    with pytest.raises(ValueError):
        build_structure([])


def test_non_contiguous_nodes_rejected():
    G = nx.Graph()
    G.add_node(0, symbol="C", position=(0, 0, 0))
    G.add_node(2, symbol="C", position=(1, 0, 0))
    with pytest.raises(ValueError):
        Structure(G)


def test_unknown_element_rejected():
    with pytest.raises(ValueError):
        build_structure([("Qq", (0, 0, 0))])


def test_tuple_atoms_and_default_bond_order():
    s = build_structure([("C", (0, 0, 0)), ("O", (1.2, 0, 0))], [(0, 1)])
    assert s.atom_count == 2
    assert s.symbol(1) == "O"
    assert s.bond_order(0, 1) == 1
    assert list(s.bonds()) == [(0, 1, 1)]


def test_identifier_kept_or_generated():
    assert salt_bridge(identifier="abc").identifier == "abc"
    assert salt_bridge().identifier != salt_bridge().identifier


def test_positions_read_only():
    s = salt_bridge()
    with pytest.raises(ValueError):
        s.positions[0, 0] = 1.0


# ------------------------------------------------------------------
# Residues
# ------------------------------------------------------------------


class TestResidues:
    def test_from_residue_keys(self):
        s = salt_bridge()
        assert s.residue_count == 2
        assert s.residue_atoms(0) == (0, 1)
        assert s.residue_atoms(1) == (2, 3, 4, 5)
        assert s.residue_name(1) == "ACT"

    def test_from_connected_components(self):
        atoms, bonds = benzene()
        atoms = atoms + [("N", (0.0, 0.0, 3.5))]
        s = build_structure(atoms, bonds)
        assert s.residue_count == 2
        assert s.residue_index(6) == 1
        assert s.residue_name(1) == ""

    def test_explicit_residue_index(self):
        s = build_structure(
            [
                {"symbol": "C", "position": (0, 0, 0), "residue_index": 7},
                {"symbol": "C", "position": (5, 0, 0), "residue_index": 3},
            ]
        )
        assert s.residue_count == 2
        assert s.residue_index(0) == 1
        assert s.residue_index(1) == 0


# ------------------------------------------------------------------
# Flags
# ------------------------------------------------------------------


class TestFlags:
    def test_backbone_and_sidechain(self):
        s = backbone_pair()
        assert s.is_backbone(0)  # N
        assert s.is_backbone(4)  # O
        assert s.is_amino_acid(0)
        assert not s.is_sidechain(0)

    def test_histidine_sidechain(self):
        s = histidine()
        assert s.is_sidechain(1)
        assert not s.is_backbone(1)
        assert s.is_polymer(1)

    def test_water(self):
        s = water_dimer()
        assert all(s.is_water(a) for a in s.atoms())

    def test_ligand_is_not_polymer(self):
        s = salt_bridge()
        assert not any(s.is_polymer(a) for a in s.atoms())


# ------------------------------------------------------------------
# Rings
# ------------------------------------------------------------------


class TestRings:
    def test_benzene_aromatic_inferred(self):
        atoms, bonds = benzene()
        s = build_structure(atoms, bonds)
        assert s.aromatic_rings() == [(0, 1, 2, 3, 4, 5)]
        assert all(s.is_aromatic(a) and s.is_ring(a) for a in s.atoms())

    def test_imidazole_aromatic_inferred(self):
        s = histidine()
        assert s.aromatic_rings() == [(0, 1, 2, 3, 4)]
        assert not s.is_ring(5)

    def test_saturated_ring_not_aromatic(self):
        atoms, _ = benzene()
        bonds = [(k, (k + 1) % 6, 1) for k in range(6)]
        s = build_structure(atoms, bonds)
        assert s.aromatic_rings() == []
        assert s.is_ring(0)

    def test_explicit_aromatic_flags(self):
        atoms, bonds = benzene(aromatic=False)
        s = build_structure(atoms, bonds)
        assert s.aromatic_rings() == []
        assert not s.is_aromatic(0)

    def test_explicit_aromatic_rings(self):
        atoms, _ = benzene()
        bonds = [(k, (k + 1) % 6, 1) for k in range(6)]
        s = build_structure(atoms, bonds, aromatic_rings=[[5, 4, 3, 2, 1, 0]])
        assert s.aromatic_rings() == [(0, 1, 2, 3, 4, 5)]
        assert s.aromatic_rings(0) == [(0, 1, 2, 3, 4, 5)]

    def test_aromatic_rings_by_residue(self):
        a1, b1 = benzene()
        a2, b2 = benzene(center=(0.0, 0.0, 3.8), offset=6)
        s = build_structure(a1 + a2, b1 + b2)
        assert s.aromatic_rings(0) == [(0, 1, 2, 3, 4, 5)]
        assert s.aromatic_rings(1) == [(6, 7, 8, 9, 10, 11)]


def test_qualified_name():
    s = salt_bridge()
    assert s.qualified_name(0) == "[MAM]0.N1#0"
    t = build_structure([("C", (0, 0, 0))])
    assert t.qualified_name(0) == "C#0"
