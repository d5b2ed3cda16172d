"""Read-only molecular structure over a networkx graph.

Nodes are atom indices ``0..n-1`` carrying ``symbol``/``number`` and
``position``; edges carry an integer (Kekule) ``bond_order``. Residue,
model and alternate-location attributes are optional and derived when
missing, so graphs coming from small-molecule tools work unchanged: each
connected component then becomes its own residue.
"""

from __future__ import annotations

import logging
import uuid
from typing import TYPE_CHECKING, Any, Iterable, Iterator, Mapping, Sequence

import networkx as nx
import numpy as np

from . import geometry as geom
from .data_loader import (
    DATA,
    NUCLEIC_BACKBONE_NAMES,
    PROTEIN_BACKBONE_NAMES,
)

if TYPE_CHECKING:
    from rdkit import Chem

logger = logging.getLogger(__name__)

_PLANARITY_TOLERANCE = 0.15
_AROMATIC_ELEMENTS = (6, 7, 8, 16)


class Structure:
    """Queryable, immutable view of atoms, bonds and residues.

    Parameters
    ----------
    graph : nx.Graph
        Molecular graph. Node attributes: ``symbol`` or ``number``,
        ``position``; optional ``formal_charge``, ``atomname``,
        ``resname``, ``resno``, ``chain``, ``residue_index``,
        ``model_index``, ``altloc``, ``aromatic``, ``backbone``,
        ``sidechain``, ``water``. Edge attribute ``bond_order``
        (default 1). Graph attribute ``aromatic_rings`` is used verbatim
        when present.
    identifier : str, optional
        Stable key for per-structure caches. Random when omitted.
    """

    def __init__(self, graph: nx.Graph, identifier: str | None = None) -> None:
        n = graph.number_of_nodes()
        if n == 0:
            raise ValueError("Structure needs at least one atom")
        if set(graph.nodes()) != set(range(n)):
            raise ValueError("Structure nodes must be the atom indices 0..n-1")

        self._graph = graph
        self.identifier = identifier or graph.graph.get("name") or uuid.uuid4().hex

        nodes = [graph.nodes[i] for i in range(n)]
        self._numbers = np.array([_node_number(d) for d in nodes], dtype=np.int16)
        self._positions = np.array([d["position"] for d in nodes], dtype=np.float64).reshape(n, 3)
        self._positions.setflags(write=False)
        self._formal_charges = [int(d.get("formal_charge", 0) or 0) for d in nodes]
        self._atomnames = [str(d.get("atomname", "")).strip() for d in nodes]
        self._resnames = [str(d.get("resname", "")).strip().upper() for d in nodes]
        self._altlocs = [str(d.get("altloc", "") or "").strip() for d in nodes]
        self._model_index = np.array([int(d.get("model_index", 0)) for d in nodes], dtype=np.int32)

        self._neighbors: list[tuple[int, ...]] = [tuple(sorted(graph.neighbors(i))) for i in range(n)]
        self._bond_orders: list[dict[int, int]] = [
            {j: int(graph.edges[i, j].get("bond_order", 1)) for j in self._neighbors[i]} for i in range(n)
        ]

        self._residue_index = self._assign_residues(nodes)
        order = np.argsort(self._residue_index, kind="stable")
        bounds = np.flatnonzero(np.diff(self._residue_index[order])) + 1
        self._residues: list[tuple[int, ...]] = [tuple(int(a) for a in grp) for grp in np.split(order, bounds)]

        self._water = np.array(
            [bool(d["water"]) if "water" in d else r in DATA.water_names for d, r in zip(nodes, self._resnames)],
            dtype=bool,
        )
        self._backbone = np.array(
            [bool(d["backbone"]) if "backbone" in d else self._default_backbone(i) for i, d in enumerate(nodes)],
            dtype=bool,
        )
        self._sidechain = np.array(
            [
                bool(d["sidechain"]) if "sidechain" in d else self.is_polymer(i) and not self._backbone[i]
                for i, d in enumerate(nodes)
            ],
            dtype=bool,
        )

        self._rings = self._find_residue_rings()
        self._ring_membership: dict[int, list[tuple[int, ...]]] = {}
        for ring in self._rings:
            for a in ring:
                self._ring_membership.setdefault(a, []).append(ring)

        self._aromatic_rings = self._find_aromatic_rings(nodes)
        flagged = any("aromatic" in d for d in nodes)
        if flagged:
            self._aromatic = np.array([bool(d.get("aromatic", False)) for d in nodes], dtype=bool)
        else:
            self._aromatic = np.zeros(n, dtype=bool)
            for ring in self._aromatic_rings:
                self._aromatic[list(ring)] = True

        logger.debug(
            "Structure %s: %d atoms, %d bonds, %d residues, %d rings (%d aromatic)",
            self.identifier,
            n,
            graph.number_of_edges(),
            len(self._residues),
            len(self._rings),
            len(self._aromatic_rings),
        )

    # ------------------------------------------------------------------
    # Construction helpers
    # ------------------------------------------------------------------

    def _assign_residues(self, nodes: list[dict]) -> np.ndarray:
        n = len(nodes)
        if all("residue_index" in d for d in nodes):
            raw = [int(d["residue_index"]) for d in nodes]
        elif any("resno" in d or "resname" in d for d in nodes):
            raw = _first_seen_ids(
                (
                    int(d.get("model_index", 0)),
                    str(d.get("chain", "")),
                    int(d.get("resno", 0)),
                    str(d.get("icode", "")),
                    str(d.get("resname", "")).strip().upper(),
                )
                for d in nodes
            )
        else:
            raw = [0] * n
            for k, comp in enumerate(sorted(nx.connected_components(self._graph), key=min)):
                for a in comp:
                    raw[a] = k
        _, dense = np.unique(np.array(raw), return_inverse=True)
        return dense.astype(np.int32)

    def _default_backbone(self, i: int) -> bool:
        resname = self._resnames[i]
        name = self._atomnames[i]
        if resname in DATA.amino_acids:
            return name in PROTEIN_BACKBONE_NAMES
        if resname in DATA.nucleotides:
            return name in NUCLEIC_BACKBONE_NAMES
        return False

    def _find_residue_rings(self) -> list[tuple[int, ...]]:
        """Smallest set of smallest rings inside each residue."""
        rings: list[tuple[int, ...]] = []
        for atoms in self._residues:
            if len(atoms) < 3:
                continue
            sub = self._graph.subgraph(atoms)
            # cyclomatic number: no rings without spare edges
            if sub.number_of_edges() - len(atoms) + nx.number_connected_components(sub) == 0:
                continue
            for cyc in nx.minimum_cycle_basis(sub):
                rings.append(tuple(sorted(int(a) for a in cyc)))
        return sorted(rings)

    def _find_aromatic_rings(self, nodes: list[dict]) -> list[tuple[int, ...]]:
        given = self._graph.graph.get("aromatic_rings")
        if given:
            return sorted(tuple(int(a) for a in r) for r in given)

        if any("aromatic" in d for d in nodes):
            return [r for r in self._rings if all(nodes[a].get("aromatic", False) for a in r)]

        aromatic = []
        for ring in self._rings:
            if not 5 <= len(ring) <= 7:
                continue
            if any(int(self._numbers[a]) not in _AROMATIC_ELEMENTS for a in ring):
                continue
            # pyrrole N, furan O and thiophene S contribute a lone pair
            multi = sum(1 for a in ring if any(o > 1 for o in self._bond_orders[a].values()))
            if multi < len(ring) - 1:
                continue
            pts = self._positions[list(ring)]
            normal = geom.plane_normal(pts)
            centroid = pts.mean(axis=0)
            if max(geom.point_plane_distance(p, centroid, normal) for p in pts) < _PLANARITY_TOLERANCE:
                aromatic.append(ring)
        return aromatic

    # ------------------------------------------------------------------
    # Atoms
    # ------------------------------------------------------------------

    @property
    def graph(self) -> nx.Graph:
        return self._graph

    @property
    def atom_count(self) -> int:
        return len(self._numbers)

    @property
    def positions(self) -> np.ndarray:
        """(n, 3) coordinate array (read-only)."""
        return self._positions

    def atoms(self) -> range:
        return range(self.atom_count)

    def bonds(self) -> Iterator[tuple[int, int, int]]:
        """Yield ``(i, j, order)`` with ``i < j`` in ascending order."""
        for i in range(self.atom_count):
            for j in self._neighbors[i]:
                if j > i:
                    yield i, j, self._bond_orders[i][j]

    def number(self, i: int) -> int:
        return int(self._numbers[i])

    def symbol(self, i: int) -> str:
        return DATA.n2s.get(int(self._numbers[i]), "X")

    def position(self, i: int) -> np.ndarray:
        return self._positions[i]

    def formal_charge(self, i: int) -> int:
        return self._formal_charges[i]

    def atomname(self, i: int) -> str:
        return self._atomnames[i]

    def resname(self, i: int) -> str:
        return self._resnames[i]

    def altloc(self, i: int) -> str:
        return self._altlocs[i]

    def model_index(self, i: int) -> int:
        return int(self._model_index[i])

    def residue_index(self, i: int) -> int:
        return int(self._residue_index[i])

    def vdw_radius(self, i: int) -> float:
        return DATA.vdw_radius(int(self._numbers[i]))

    def qualified_name(self, i: int) -> str:
        name = self._atomnames[i] or self.symbol(i)
        res = self._resnames[i]
        return f"[{res}]{self.residue_index(i)}.{name}#{i}" if res else f"{name}#{i}"

    # ------------------------------------------------------------------
    # Bonds
    # ------------------------------------------------------------------

    def neighbors(self, i: int) -> tuple[int, ...]:
        return self._neighbors[i]

    def bond_count(self, i: int) -> int:
        return len(self._neighbors[i])

    def bond_order(self, i: int, j: int) -> int:
        return self._bond_orders[i].get(j, 0)

    def bond_orders(self, i: int) -> Mapping[int, int]:
        """Neighbour -> bond order for atom ``i``."""
        return self._bond_orders[i]

    def bond_to_element_count(self, i: int, number: int) -> int:
        return sum(1 for j in self._neighbors[i] if self._numbers[j] == number)

    def connected(self, i: int, j: int) -> bool:
        return j in self._bond_orders[i]

    # ------------------------------------------------------------------
    # Predicates
    # ------------------------------------------------------------------

    def is_metal(self, i: int) -> bool:
        return int(self._numbers[i]) in DATA.metals

    def is_transition_metal(self, i: int) -> bool:
        return int(self._numbers[i]) in DATA.transition_metals

    def is_halogen(self, i: int) -> bool:
        return int(self._numbers[i]) in DATA.halogens

    def is_aromatic(self, i: int) -> bool:
        return bool(self._aromatic[i])

    def is_backbone(self, i: int) -> bool:
        return bool(self._backbone[i])

    def is_sidechain(self, i: int) -> bool:
        return bool(self._sidechain[i])

    def is_water(self, i: int) -> bool:
        return bool(self._water[i])

    def is_ring(self, i: int) -> bool:
        return i in self._ring_membership

    def is_polymer(self, i: int) -> bool:
        r = self._resnames[i]
        return r in DATA.amino_acids or r in DATA.nucleotides

    def is_amino_acid(self, i: int) -> bool:
        return self._resnames[i] in DATA.amino_acids

    def is_nucleotide(self, i: int) -> bool:
        return self._resnames[i] in DATA.nucleotides

    # ------------------------------------------------------------------
    # Residues and rings
    # ------------------------------------------------------------------

    @property
    def residue_count(self) -> int:
        return len(self._residues)

    def residues(self) -> range:
        return range(len(self._residues))

    def residue_atoms(self, r: int) -> tuple[int, ...]:
        return self._residues[r]

    def residue_name(self, r: int) -> str:
        return self._resnames[self._residues[r][0]]

    def rings_containing(self, i: int) -> list[tuple[int, ...]]:
        return self._ring_membership.get(i, [])

    def aromatic_rings(self, r: int | None = None) -> list[tuple[int, ...]]:
        """Aromatic rings, optionally only those whose first atom lies in residue ``r``."""
        if r is None:
            return list(self._aromatic_rings)
        return [ring for ring in self._aromatic_rings if self._residue_index[ring[0]] == r]


def _node_number(d: Mapping[str, Any]) -> int:
    if "number" in d:
        return int(d["number"])
    n = DATA.number(str(d.get("symbol", "")))
    if n == 0:
        raise ValueError(f"Unknown element symbol {d.get('symbol')!r}")
    return n


def _first_seen_ids(keys: Iterable[tuple]) -> list[int]:
    seen: dict[tuple, int] = {}
    out = []
    for k in keys:
        if k not in seen:
            seen[k] = len(seen)
        out.append(seen[k])
    return out


def build_structure(
    atoms: Sequence[Any],
    bonds: Iterable[Sequence[int]] = (),
    identifier: str | None = None,
    aromatic_rings: Sequence[Sequence[int]] | None = None,
) -> Structure:
    """Build a :class:`Structure` from plain atom and bond records.

    Parameters
    ----------
    atoms : sequence
        Either ``(symbol, (x, y, z))`` tuples or mappings with at least
        ``symbol`` (or ``number``) and ``position``; any other node
        attribute documented on :class:`Structure` is copied through.
    bonds : iterable of (i, j) or (i, j, order)
        Covalent bonds; order defaults to 1.
    identifier : str, optional
        Cache key for the structure.
    aromatic_rings : sequence of atom-index sequences, optional
        Explicit aromatic rings; inferred when omitted.
    """
    G = nx.Graph()
    for i, atom in enumerate(atoms):
        if isinstance(atom, Mapping):
            attrs = dict(atom)
        else:
            symbol, position = atom
            attrs = {"symbol": symbol, "position": position}
        attrs["position"] = tuple(float(c) for c in attrs["position"])
        G.add_node(i, **attrs)

    for bond in bonds:
        i, j = int(bond[0]), int(bond[1])
        order = int(bond[2]) if len(bond) > 2 else 1
        G.add_edge(i, j, bond_order=order)

    if aromatic_rings:
        G.graph["aromatic_rings"] = [tuple(r) for r in aromatic_rings]
    return Structure(G, identifier=identifier)


def structure_from_rdkit(mol: Chem.Mol, conf_id: int = -1, identifier: str | None = None) -> Structure:
    """Convert an RDKit molecule (with a 3D conformer) into a :class:`Structure`.

    PDB residue information is used when present. Bond orders are taken
    from the Kekule form; aromaticity from RDKit's perception.
    """
    from rdkit import Chem  # lazy import, RDKit is only needed here

    if mol.GetNumConformers() == 0:
        raise ValueError("RDKit molecule has no conformer")

    kek = Chem.Mol(mol)
    try:
        Chem.Kekulize(kek, clearAromaticFlags=False)
    except Chem.KekulizeException:
        logger.warning("Kekulization failed, aromatic bonds treated as single bonds")

    conf = kek.GetConformer(conf_id)
    atoms = []
    for atom in kek.GetAtoms():
        p = conf.GetAtomPosition(atom.GetIdx())
        rec = {
            "number": atom.GetAtomicNum(),
            "position": (p.x, p.y, p.z),
            "formal_charge": atom.GetFormalCharge(),
            "aromatic": atom.GetIsAromatic(),
        }
        info = atom.GetPDBResidueInfo()
        if info is not None:
            rec.update(
                atomname=info.GetName().strip(),
                resname=info.GetResidueName().strip(),
                resno=info.GetResidueNumber(),
                chain=info.GetChainId(),
                icode=info.GetInsertionCode().strip(),
                altloc=info.GetAltLoc().strip(),
            )
        atoms.append(rec)

    bonds = []
    for b in kek.GetBonds():
        order = b.GetBondTypeAsDouble()
        bonds.append((b.GetBeginAtomIdx(), b.GetEndAtomIdx(), int(order) if order in (1.0, 2.0, 3.0) else 1))

    aromatic_rings = [
        tuple(sorted(r))
        for r in kek.GetRingInfo().AtomRings()
        if all(kek.GetAtomWithIdx(a).GetIsAromatic() for a in r)
    ]
    return build_structure(atoms, bonds, identifier=identifier, aromatic_rings=aromatic_rings or None)
