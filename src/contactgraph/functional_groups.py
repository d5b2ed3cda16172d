"""Functional group predicates over an atom's element and bonded neighbours.

Every predicate takes the structure and an atom index and only looks at
connectivity, never at coordinates.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .structure import Structure

H, C, N, O, P, S = 1, 6, 7, 8, 15, 16


def _heavy_degree(s: Structure, a: int) -> int:
    return s.bond_count(a) - s.bond_to_element_count(a, H)


def is_quaternary_amine(s: Structure, a: int) -> bool:
    """Nitrogen with four bonds and no hydrogens."""
    return s.number(a) == N and s.bond_count(a) == 4 and s.bond_to_element_count(a, H) == 0


def is_tertiary_amine(s: Structure, a: int) -> bool:
    """Nitrogen with three heavy-atom neighbours."""
    return s.number(a) == N and _heavy_degree(s, a) == 3


def is_sulfonium(s: Structure, a: int) -> bool:
    return s.number(a) == S and s.bond_count(a) == 3 and s.bond_to_element_count(a, H) == 0


def is_sulfonic_acid(s: Structure, a: int) -> bool:
    """Sulfur of a sulfonic acid or sulfonate (three oxygens)."""
    return s.number(a) == S and s.bond_to_element_count(a, O) == 3


def is_sulfate(s: Structure, a: int) -> bool:
    return s.number(a) == S and s.bond_to_element_count(a, O) == 4


def is_phosphate(s: Structure, a: int) -> bool:
    """Phosphorus bonded to oxygens only."""
    return s.number(a) == P and s.bond_count(a) > 0 and s.bond_to_element_count(a, O) == s.bond_count(a)


def is_halocarbon(s: Structure, a: int) -> bool:
    """Halogen with exactly one bond, to carbon."""
    return s.is_halogen(a) and s.bond_count(a) == 1 and s.bond_to_element_count(a, C) == 1


def is_carboxylate(s: Structure, a: int) -> bool:
    """Carbon of a carboxylic acid / carboxylate (two terminal oxygens)."""
    if not (s.number(a) == C and s.bond_to_element_count(a, O) == 2 and s.bond_to_element_count(a, C) == 1):
        return False
    terminal = sum(1 for b in s.neighbors(a) if s.number(b) == O and _heavy_degree(s, b) == 1)
    return terminal == 2


def _terminal_nitrogen_count(s: Structure, a: int) -> int:
    return sum(1 for b in s.neighbors(a) if _heavy_degree(s, b) == 1)


def is_guanidine(s: Structure, a: int) -> bool:
    """Central carbon of a guanidine / guanidinium group."""
    return (
        s.number(a) == C
        and s.bond_count(a) == 3
        and s.bond_to_element_count(a, N) == 3
        and _terminal_nitrogen_count(s, a) == 2
    )


def is_acetamidine(s: Structure, a: int) -> bool:
    """Central carbon of an acetamidine / amidinium group."""
    return (
        s.number(a) == C
        and s.bond_count(a) == 3
        and s.bond_to_element_count(a, N) == 2
        and s.bond_to_element_count(a, C) == 1
        and _terminal_nitrogen_count(s, a) == 2
    )


def in_aromatic_ring_with_electronegative_element(s: Structure, a: int) -> bool:
    """Aromatic atom sitting in a ring that contains N or O."""
    if not s.is_aromatic(a):
        return False
    return any(any(s.number(r) in (N, O) for r in ring) for ring in s.rings_containing(a))
