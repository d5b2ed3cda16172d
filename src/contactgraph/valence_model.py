"""Charge, implicit hydrogen and ideal geometry assignment from bond topology.

Approximately follows the OpenEye hydrogen count model when both charge
and hydrogens are assigned; when only one of them is assigned the other
is deduced from the input.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np

from .config_classes import ValenceParams
from .data_loader import ALKALI_METALS, ALKALINE_EARTH_METALS, HALOGENS
from .geometry import IdealGeometry, assign_geometry

if TYPE_CHECKING:
    from .cache import StructureCache
    from .structure import Structure

logger = logging.getLogger(__name__)

H, C, N, O, P, S = 1, 6, 7, 8, 15, 16


@dataclass(frozen=True)
class ValenceModel:
    """Per-atom perception results, each an int8 array of length ``atom_count``."""

    charge: np.ndarray
    implicit_h: np.ndarray
    total_h: np.ndarray
    ideal_geometry: np.ndarray

    def __len__(self) -> int:
        return len(self.charge)


def explicit_valence(s: Structure, a: int) -> int:
    """Sum of bond orders."""
    return sum(s.bond_orders(a).values())


def is_conjugated(s: Structure, a: int) -> bool:
    """Whether the atom takes part in a pi system.

    True for atoms with a multiple bond, and for N/O next to a multiple
    bond. N/O with four bonds are never conjugated, and a neighbouring
    P=O or S=O does not count (sulfonamide N stays sp3).
    """
    hetero = s.number(a) in (N, O)
    if hetero and s.bond_count(a) == 4:
        return False

    for b, order in s.bond_orders(a).items():
        if order > 1:
            return True
        if not hetero:
            continue
        nb = s.number(b)
        for c, order2 in s.bond_orders(b).items():
            if order2 <= 1:
                continue
            if nb in (P, S) and s.number(c) == O:
                continue
            return True
    return False


def _applies(policy: str, input_empty: bool) -> bool:
    return policy == "always" or (policy == "auto" and input_empty)


def calculate_hydrogens_charge(s: Structure, a: int, params: ValenceParams) -> tuple[int, int, int, int]:
    """Return ``(charge, implicit_h, total_h, ideal_geometry)`` for one atom."""
    hydrogen_count = s.bond_to_element_count(a, H)
    charge = s.formal_charge(a)
    assign_charge = _applies(params.assign_charge, charge == 0)
    assign_h = _applies(params.assign_h, hydrogen_count == 0)

    degree = s.bond_count(a)
    valence = explicit_valence(s, a)
    conjugated = is_conjugated(s, a)
    multi_bond = valence - degree > 0

    implicit_h = 0
    geometry = IdealGeometry.Unknown
    number = s.number(a)

    if number == H:
        if assign_charge:
            if degree == 0:
                charge = 1
                geometry = IdealGeometry.Spherical
            elif degree == 1:
                charge = 0
                geometry = IdealGeometry.Terminal

    elif number == C:
        if assign_charge:
            charge = 0
        if assign_h:
            # carbocations and carbanions are trivalent
            implicit_h = max(0, 4 - valence - abs(charge))
        # carbocation planar, carbanion tetrahedral
        geometry = assign_geometry(degree + implicit_h + max(0, -charge))

    elif number == N:
        if assign_charge:
            if not assign_h:
                charge = valence - 3
            elif conjugated and valence < 4:
                # amidine / guanidine double bonded N
                if degree - hydrogen_count == 1 and valence - hydrogen_count == 2:
                    charge = 1
                else:
                    charge = 0
            else:
                # sulfonamide N and N bound to metals stay neutral
                bound_to_s_or_metal = any(s.number(b) == S or s.is_metal(b) for b in s.neighbors(a))
                charge = 0 if bound_to_s_or_metal else 1
        if assign_h:
            implicit_h = max(0, 3 - valence + charge)
        if conjugated and not multi_bond:
            # amide / anilinic N: lone pair is in the pi system, trigonal
            geometry = assign_geometry(degree + implicit_h - charge)
        else:
            geometry = assign_geometry(degree + implicit_h + 1 - charge)

    elif number == O:
        if assign_charge:
            if not assign_h:
                charge = valence - 2
            if valence == 1:
                for b in s.neighbors(a):
                    for c, order in s.bond_orders(b).items():
                        if c != a and s.number(c) == O and order == 2:
                            charge = -1
        if assign_h:
            implicit_h = max(0, 2 - valence + charge)
        if conjugated and not multi_bond:
            # phenol / carboxylic OH
            geometry = assign_geometry(degree + implicit_h - charge + 1)
        else:
            geometry = assign_geometry(degree + implicit_h - charge + 2)

    elif number == S:
        # thiol, thiolate, thioether, sulfonium; higher oxidation states neutral
        if assign_charge and not assign_h:
            if valence <= 3 and s.bond_to_element_count(a, O) == 0:
                charge = valence - 2
            else:
                charge = 0
        if assign_h and valence < 2:
            implicit_h = max(0, 2 - valence + charge)
        if valence <= 3:
            geometry = assign_geometry(degree + implicit_h - charge + 2)

    elif number in HALOGENS:
        # halides are never protonated
        if assign_charge:
            charge = valence - 1

    elif number in ALKALI_METALS:
        if assign_charge:
            charge = 1 - valence

    elif number in ALKALINE_EARTH_METALS:
        if assign_charge:
            charge = 2 - valence

    else:
        logger.warning(
            "Charge/protonation requested for unhandled element %s (atom %d)", s.symbol(a), a
        )

    return charge, implicit_h, implicit_h + hydrogen_count, int(geometry)


def compute_valence_model(s: Structure, params: ValenceParams | None = None) -> ValenceModel:
    """Run :func:`calculate_hydrogens_charge` over every atom."""
    params = params or ValenceParams()
    n = s.atom_count
    charge = np.zeros(n, dtype=np.int8)
    implicit_h = np.zeros(n, dtype=np.int8)
    total_h = np.zeros(n, dtype=np.int8)
    ideal_geometry = np.zeros(n, dtype=np.int8)

    for a in s.atoms():
        charge[a], implicit_h[a], total_h[a], ideal_geometry[a] = calculate_hydrogens_charge(s, a, params)

    for arr in (charge, implicit_h, total_h, ideal_geometry):
        arr.setflags(write=False)

    logger.debug(
        "Valence model %s: %d charged atoms, %d implicit H",
        s.identifier,
        int(np.count_nonzero(charge)),
        int(implicit_h.sum()),
    )
    return ValenceModel(charge, implicit_h, total_h, ideal_geometry)


def valence_model(
    s: Structure, cache: StructureCache | None = None, params: ValenceParams | None = None
) -> ValenceModel:
    """Valence model for ``s``, memoized in ``cache`` when one is given."""
    if cache is None:
        return compute_valence_model(s, params)
    key = "valence_model" if params is None else f"valence_model:{params.assign_charge}:{params.assign_h}"
    return cache.compute_or_get(s, key, lambda st: compute_valence_model(st, params))
