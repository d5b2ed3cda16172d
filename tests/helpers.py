"""Small hand-built structures shared by the test modules.

Coordinates are chosen so every contact (or its absence) follows from
plain geometry; comments give the relevant distances and angles.
"""

from __future__ import annotations

import numpy as np

from contactgraph import build_structure

RING_RADIUS = 1.39


def atom(symbol, position, **attrs):
    rec = {"symbol": symbol, "position": tuple(float(c) for c in position)}
    rec.update(attrs)
    return rec


def polar(length, degrees, origin=(0.0, 0.0, 0.0)):
    """Point at ``length`` from ``origin`` in the xy plane."""
    t = np.radians(degrees)
    return (origin[0] + length * np.cos(t), origin[1] + length * np.sin(t), origin[2])


def benzene(center=(0.0, 0.0, 0.0), plane="xy", offset=0, **attrs):
    """Six carbons with alternating Kekule bonds; returns (atoms, bonds)."""
    cx, cy, cz = center
    atoms = []
    for k in range(6):
        t = np.radians(60.0 * k)
        u, v = RING_RADIUS * np.cos(t), RING_RADIUS * np.sin(t)
        if plane == "xy":
            pos = (cx + u, cy + v, cz)
        else:  # xz
            pos = (cx + u, cy, cz + v)
        atoms.append(atom("C", pos, **attrs))
    bonds = [(offset + k, offset + (k + 1) % 6, 2 if k % 2 == 0 else 1) for k in range(6)]
    return atoms, bonds


def point_charges(distance=3.0, identifier=None):
    """Ammonium N(+1) and chloride Cl(-1) on the x axis."""
    atoms = [
        atom("N", (0.0, 0.0, 0.0), formal_charge=1, resname="NH4", resno=1),
        atom("Cl", (distance, 0.0, 0.0), formal_charge=-1, resname="CL", resno=2),
    ]
    return build_structure(atoms, identifier=identifier)


# methylammonium (residue 1) facing an acetate (residue 2)
#   0 N+   1 C1          : C1-N-O2 = 110 deg, N...O2 = 2.80
#   2 C2   3 O1 (=C2)  4 O2 (-C2)  5 C3 : C2-O2...N = 120 deg, N...O1 = 3.54
SALT_BRIDGE_ATOMS = [
    atom("N", (0.0, 0.0, 0.0), formal_charge=1, resname="MAM", resno=1, atomname="N1"),
    atom("C", polar(1.47, 110.0), resname="MAM", resno=1, atomname="C1"),
    atom("C", (3.425, 1.0825, 0.0), resname="ACT", resno=2, atomname="C2"),
    atom("O", (2.8, 2.165, 0.0), resname="ACT", resno=2, atomname="O1"),
    atom("O", (2.8, 0.0, 0.0), resname="ACT", resno=2, atomname="O2"),
    atom("C", (4.925, 1.0825, 0.0), resname="ACT", resno=2, atomname="C3"),
]
SALT_BRIDGE_BONDS = [(0, 1, 1), (2, 3, 2), (2, 4, 1), (2, 5, 1)]


def salt_bridge(identifier=None):
    return build_structure(SALT_BRIDGE_ATOMS, SALT_BRIDGE_BONDS, identifier=identifier)


def salt_bridge_permuted():
    """Same molecule with the atom order reversed; returns (structure, new->old map)."""
    n = len(SALT_BRIDGE_ATOMS)
    old_of_new = list(reversed(range(n)))
    new_of_old = {old: new for new, old in enumerate(old_of_new)}
    atoms = [SALT_BRIDGE_ATOMS[old] for old in old_of_new]
    bonds = [(new_of_old[i], new_of_old[j], o) for i, j, o in SALT_BRIDGE_BONDS]
    return build_structure(atoms, bonds), old_of_new


def acetate(offset=0, resno=2):
    """Acetate atoms/bonds in the salt-bridge geometry (C2, O1, O2, C3)."""
    atoms = [
        atom("C", (3.425, 1.0825, 0.0), resname="ACT", resno=resno, atomname="C2"),
        atom("O", (2.8, 2.165, 0.0), resname="ACT", resno=resno, atomname="O1"),
        atom("O", (2.8, 0.0, 0.0), resname="ACT", resno=resno, atomname="O2"),
        atom("C", (4.925, 1.0825, 0.0), resname="ACT", resno=resno, atomname="C3"),
    ]
    bonds = [(offset, offset + 1, 2), (offset, offset + 2, 1), (offset, offset + 3, 1)]
    return atoms, bonds


def backbone_pair(ca_angle=110.0):
    """Two alanine fragments: N(H2)-CA of residue 1 donating to C=O of residue 2.

    N...O = 2.90; CA-N...O equals ``ca_angle``; C-O...N = 120 deg.
    """
    atoms = [
        atom("N", (0.0, 0.0, 0.0), resname="ALA", resno=1, atomname="N"),
        atom("H", (-0.3, -0.95, 0.0), resname="ALA", resno=1, atomname="H1"),
        atom("H", (-0.3, 0.0, -0.95), resname="ALA", resno=1, atomname="H2"),
        atom("C", polar(1.47, ca_angle), resname="ALA", resno=1, atomname="CA"),
        atom("O", (2.9, 0.0, 0.0), resname="ALA", resno=2, atomname="O"),
        atom("C", (3.515, 1.0652, 0.0), resname="ALA", resno=2, atomname="C"),
        atom("C", (5.035, 1.0652, 0.0), resname="ALA", resno=2, atomname="CA"),
    ]
    bonds = [(0, 1, 1), (0, 2, 1), (0, 3, 1), (4, 5, 2), (5, 6, 1)]
    return build_structure(atoms, bonds)


def water_dimer(distance=2.9):
    atoms = [
        atom("O", (0.0, 0.0, 0.0), resname="HOH", resno=1, atomname="O"),
        atom("H", (-0.24, 0.927, 0.0), resname="HOH", resno=1, atomname="H1"),
        atom("H", (-0.24, -0.927, 0.0), resname="HOH", resno=1, atomname="H2"),
        atom("O", (distance, 0.0, 0.0), resname="HOH", resno=2, atomname="O"),
        atom("H", (distance + 0.24, 0.0, 0.927), resname="HOH", resno=2, atomname="H1"),
        atom("H", (distance + 0.24, 0.0, -0.927), resname="HOH", resno=2, atomname="H2"),
    ]
    bonds = [(0, 1, 1), (0, 2, 1), (3, 4, 1), (3, 5, 1)]
    return build_structure(atoms, bonds)


def halogen_pair(c_cl_o_angle=180.0):
    """C-Cl pointing at a carbonyl O 3.1 A away; C=O...Cl = 120 deg."""
    atoms = [
        atom("C", polar(1.75, 180.0 - c_cl_o_angle + 180.0)),
        atom("Cl", (0.0, 0.0, 0.0)),
        atom("O", (3.1, 0.0, 0.0)),
        atom("C", (3.715, 1.0652, 0.0)),
    ]
    bonds = [(0, 1, 1), (2, 3, 2)]
    return build_structure(atoms, bonds)


def histidine():
    """Imidazole ring of HIS plus CB; indices 0 CG, 1 ND1, 2 CE1, 3 NE2, 4 CD2, 5 CB."""
    names = ["CG", "ND1", "CE1", "NE2", "CD2"]
    symbols = ["C", "N", "C", "N", "C"]
    atoms = [
        atom(sym, polar(1.19, 72.0 * k), resname="HIS", resno=1, atomname=name)
        for k, (sym, name) in enumerate(zip(symbols, names))
    ]
    atoms.append(atom("C", polar(2.7, 0.0), resname="HIS", resno=1, atomname="CB"))
    bonds = [(0, 1, 1), (1, 2, 1), (2, 3, 2), (3, 4, 1), (4, 0, 2), (0, 5, 1)]
    return build_structure(atoms, bonds)


def methyl_guanidinium():
    """C(=N1)(N2)N3-CH3, no hydrogens; 0 C, 1 N1, 2 N2, 3 N3, 4 CH3."""
    atoms = [
        atom("C", (0.0, 0.0, 0.0)),
        atom("N", polar(1.33, 90.0)),
        atom("N", polar(1.33, 210.0)),
        atom("N", polar(1.33, 330.0)),
        atom("C", polar(1.45, 330.0, origin=polar(1.33, 330.0))),
    ]
    bonds = [(0, 1, 2), (0, 2, 1), (0, 3, 1), (3, 4, 1)]
    return build_structure(atoms, bonds)
