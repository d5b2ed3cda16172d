"""Tests for charge, implicit hydrogen and geometry assignment."""

from __future__ import annotations

import logging

import numpy as np
import pytest

from contactgraph import StructureCache, ValenceParams, build_structure, valence_model
from contactgraph.geometry import IdealGeometry
from contactgraph.valence_model import compute_valence_model, explicit_valence, is_conjugated

from helpers import SALT_BRIDGE_ATOMS, acetate, atom, salt_bridge, water_dimer

TETRAHEDRAL_H = [(0.63, 0.63, 0.63), (-0.63, -0.63, 0.63), (-0.63, 0.63, -0.63), (0.63, -0.63, -0.63)]


def _methane(explicit_h=True):
    atoms = [("C", (0.0, 0.0, 0.0))]
    bonds = []
    if explicit_h:
        atoms += [("H", p) for p in TETRAHEDRAL_H]
        bonds = [(0, k) for k in range(1, 5)]
    return build_structure(atoms, bonds)


# ------------------------------------------------------------------
# Carbon
# ------------------------------------------------------------------


class TestCarbon:
    def test_methane_explicit_h(self):
        vm = compute_valence_model(_methane())
        assert vm.charge[0] == 0
        assert vm.implicit_h[0] == 0
        assert vm.total_h[0] == 4
        assert vm.ideal_geometry[0] == IdealGeometry.Tetrahedral

    def test_hydrogens_terminal(self):
        vm = compute_valence_model(_methane())
        assert all(vm.ideal_geometry[k] == IdealGeometry.Terminal for k in range(1, 5))
        assert not np.any(vm.charge)

    def test_bare_carbon_gets_four_h(self):
        vm = compute_valence_model(_methane(explicit_h=False))
        assert vm.implicit_h[0] == 4
        assert vm.total_h[0] == 4
        assert vm.ideal_geometry[0] == IdealGeometry.Tetrahedral

    def test_carboxyl_carbon_trigonal(self):
        atoms, bonds = acetate(resno=1)
        vm = compute_valence_model(build_structure(atoms, bonds))
        assert vm.implicit_h[0] == 0
        assert vm.ideal_geometry[0] == IdealGeometry.Trigonal


# ------------------------------------------------------------------
# Nitrogen and oxygen
# ------------------------------------------------------------------


class TestHeteroatoms:
    def test_isolated_nitrogen_is_ammonium(self):
        vm = compute_valence_model(build_structure([("N", (0, 0, 0))]))
        assert vm.charge[0] == 1
        assert vm.implicit_h[0] == 4
        assert vm.ideal_geometry[0] == IdealGeometry.Tetrahedral

    def test_formal_charge_kept(self):
        vm = compute_valence_model(salt_bridge())
        assert vm.charge[0] == 1
        assert vm.implicit_h[0] == 3

    def test_carboxylate_oxygen_negative(self):
        atoms, bonds = acetate(resno=1)
        vm = compute_valence_model(build_structure(atoms, bonds))
        # 1: O double bonded, 2: O single bonded
        assert vm.charge[1] == 0
        assert vm.charge[2] == -1
        assert vm.implicit_h[2] == 0
        assert vm.ideal_geometry[2] == IdealGeometry.Trigonal

    def test_water_explicit_h(self):
        vm = compute_valence_model(water_dimer())
        assert vm.charge[0] == 0
        assert vm.implicit_h[0] == 0
        assert vm.total_h[0] == 2
        assert vm.ideal_geometry[0] == IdealGeometry.Tetrahedral

    def test_bare_oxygen_gets_two_h(self):
        vm = compute_valence_model(build_structure([("O", (0, 0, 0))]))
        assert vm.charge[0] == 0
        assert vm.implicit_h[0] == 2

    def test_guanidinium_double_bonded_nitrogen(self):
        atoms = [
            ("C", (0.0, 0.0, 0.0)),
            ("N", (0.0, 1.33, 0.0)),
            ("N", (-1.15, -0.66, 0.0)),
            ("N", (1.15, -0.66, 0.0)),
        ]
        s = build_structure(atoms, [(0, 1, 2), (0, 2), (0, 3)])
        vm = compute_valence_model(s)
        assert vm.charge[1] == 1
        assert vm.charge[2] == 0
        assert vm.implicit_h[1] == 2
        assert vm.implicit_h[2] == 2

    def test_sulfonamide_nitrogen_neutral(self):
        atoms = [("S", (0, 0, 0)), ("N", (1.6, 0, 0))]
        vm = compute_valence_model(build_structure(atoms, [(0, 1)]))
        assert vm.charge[1] == 0
        assert vm.implicit_h[1] == 2


# ------------------------------------------------------------------
# Halogens and metals
# ------------------------------------------------------------------


class TestIons:
    def test_halide(self):
        vm = compute_valence_model(build_structure([("Cl", (0, 0, 0))]))
        assert vm.charge[0] == -1
        assert vm.total_h[0] == 0

    def test_halocarbon_neutral(self):
        s = build_structure([("C", (0, 0, 0)), ("Cl", (1.75, 0, 0))], [(0, 1)])
        assert compute_valence_model(s).charge[1] == 0

    def test_alkali_and_alkaline_earth(self):
        s = build_structure([("Na", (0, 0, 0)), ("Mg", (5, 0, 0))])
        vm = compute_valence_model(s)
        assert vm.charge[0] == 1
        assert vm.charge[1] == 2

    def test_unhandled_element_warns(self, caplog):
        s = build_structure([atom("Zn", (0, 0, 0), formal_charge=2)])
        with caplog.at_level(logging.WARNING, logger="contactgraph.valence_model"):
            vm = compute_valence_model(s)
        assert "unhandled element Zn" in caplog.text
        assert vm.charge[0] == 2


# ------------------------------------------------------------------
# Policies and caching
# ------------------------------------------------------------------


class TestPolicies:
    def test_invalid_policy(self):
        with pytest.raises(ValueError):
            ValenceParams(assign_charge="sometimes")

    def test_never_trusts_input(self):
        s = build_structure([("N", (0, 0, 0))])
        vm = compute_valence_model(s, ValenceParams.explicit())
        assert vm.charge[0] == 0
        assert vm.implicit_h[0] == 0

    def test_always_overrides_formal_charge(self):
        s = build_structure([atom("Cl", (0, 0, 0), formal_charge=0), atom("Na", (4, 0, 0), formal_charge=-1)])
        vm = compute_valence_model(s, ValenceParams(assign_charge="always"))
        assert vm.charge[1] == 1

    def test_arrays_read_only(self):
        vm = compute_valence_model(salt_bridge())
        assert len(vm) == len(SALT_BRIDGE_ATOMS)
        with pytest.raises(ValueError):
            vm.charge[0] = 0

    def test_cached_per_structure(self):
        cache = StructureCache()
        s = salt_bridge(identifier="sb")
        vm1 = valence_model(s, cache)
        vm2 = valence_model(s, cache)
        assert vm1 is vm2
        assert ("sb", "valence_model") in cache

    def test_cache_keyed_by_params(self):
        cache = StructureCache()
        s = salt_bridge(identifier="sb")
        default = valence_model(s, cache)
        explicit = valence_model(s, cache, ValenceParams.explicit())
        assert default is not explicit
        assert len(cache) == 2


def test_explicit_valence_and_conjugation():
    atoms, bonds = acetate(resno=1)
    s = build_structure(atoms, bonds)
    assert explicit_valence(s, 0) == 4
    assert is_conjugated(s, 2)  # O next to C=O
    assert not is_conjugated(s, 3)  # methyl carbon
