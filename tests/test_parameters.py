"""Tests for threshold and valence parameter classes."""

import pytest

from contactgraph import ContactThresholds, StructureCache, ValenceParams

from helpers import salt_bridge


def test_all_defaults_instantiate():
    ContactThresholds()
    ValenceParams()


def test_default_values():
    thr = ContactThresholds()
    assert thr.max_hydrophobic_dist == 4.0
    assert thr.max_hbond_dist == 3.5
    assert thr.max_hbond_sulfur_dist == 4.1
    assert thr.max_hbond_acc_angle == 45.0
    assert thr.max_hbond_don_angle == 45.0
    assert thr.max_hbond_acc_plane_angle == 90.0
    assert thr.max_hbond_don_plane_angle == 30.0
    assert thr.max_pi_stacking_dist == 5.5
    assert thr.max_pi_stacking_offset == 2.0
    assert thr.max_pi_stacking_angle == 30.0
    assert thr.max_cation_pi_dist == 6.0
    assert thr.max_cation_pi_offset == 2.0
    assert thr.max_ionic_dist == 5.0
    assert thr.max_halogen_bond_dist == 4.0
    assert thr.max_halogen_bond_angle == 30.0
    assert thr.max_metal_dist == 3.0
    assert thr.refine_salt_bridges is True
    assert thr.refine_weak_hydrogen_bonds is False
    assert thr.master_model_index == -1


def test_from_params_camel_case():
    thr = ContactThresholds.from_params({"maxHbondDist": 3.2, "refineSaltBridges": False})
    assert thr.max_hbond_dist == 3.2
    assert thr.refine_salt_bridges is False
    assert thr.max_ionic_dist == 5.0


def test_from_params_snake_case():
    thr = ContactThresholds.from_params({"max_pi_stacking_dist": 6.0})
    assert thr.max_pi_stacking_dist == 6.0


def test_from_params_unknown_key():
    with pytest.raises(ValueError, match="maxBananaDist"):
        ContactThresholds.from_params({"maxBananaDist": 1.0})


def test_to_params_round_trip():
    thr = ContactThresholds(max_metal_dist=2.5)
    params = thr.to_params()
    assert params["maxMetalDist"] == 2.5
    assert params["maxHbondAccPlaneAngle"] == 90.0
    assert ContactThresholds.from_params(params) == thr


def test_valence_params_explicit():
    params = ValenceParams.explicit()
    assert params.assign_charge == "never"
    assert params.assign_h == "never"


# ------------------------------------------------------------------
# StructureCache
# ------------------------------------------------------------------


class TestStructureCache:
    def test_factory_called_once(self):
        cache = StructureCache()
        s = salt_bridge(identifier="x")
        calls = []

        def factory(st):
            calls.append(st)
            return object()

        first = cache.compute_or_get(s, "thing", factory)
        assert cache.compute_or_get(s, "thing", factory) is first
        assert len(calls) == 1

    def test_keyed_by_identifier(self):
        cache = StructureCache()
        a = cache.compute_or_get(salt_bridge(identifier="a"), "k", lambda st: st.identifier)
        b = cache.compute_or_get(salt_bridge(identifier="b"), "k", lambda st: st.identifier)
        assert (a, b) == ("a", "b")
        assert len(cache) == 2
