"""Reference element and residue data.

Element tables come from ``ase.data``; residue name lists follow the PDB
chemical component conventions.
"""

import math
from typing import ClassVar, Dict, FrozenSet, Optional

from ase.data import atomic_numbers, chemical_symbols, vdw_radii

DEFAULT_VDW_RADIUS = 2.0

ALKALI_METALS = frozenset({3, 11, 19, 37, 55, 87})
ALKALINE_EARTH_METALS = frozenset({4, 12, 20, 38, 56, 88})
HALOGENS = frozenset({9, 17, 35, 53, 85})
POST_TRANSITION_METALS = frozenset({13, 30, 31, 48, 49, 50, 80, 81, 82, 83, 84})
LANTHANIDES = frozenset(range(58, 72))
ACTINIDES = frozenset(range(90, 104))
# Groups 3-11; zinc and cadmium are handled separately by the metal features
TRANSITION_METALS = frozenset(
    list(range(21, 30)) + list(range(39, 48)) + [57] + list(range(72, 80)) + [89] + list(range(104, 112))
)

AMINO_ACIDS = frozenset({
    "ALA", "ARG", "ASN", "ASP", "CYS", "GLN", "GLU", "GLY", "HIS", "ILE",
    "LEU", "LYS", "MET", "PHE", "PRO", "SER", "THR", "TRP", "TYR", "VAL",
    "SEC", "PYL", "ASX", "GLX", "UNK",
})
NUCLEOTIDES = frozenset({
    "A", "C", "T", "G", "U", "I",
    "DA", "DC", "DT", "DG", "DU", "DI",
    "+A", "+C", "+T", "+G", "+U", "+I",
})
WATER_NAMES = frozenset({"SOL", "WAT", "HOH", "H2O", "W", "DOD", "D3O", "TIP3", "TIP4", "SPC"})

PROTEIN_BACKBONE_NAMES = frozenset({"N", "CA", "C", "O", "OXT", "H", "H1", "H2", "H3", "HA", "HA2", "HA3"})
NUCLEIC_BACKBONE_NAMES = frozenset({
    "P", "OP1", "OP2", "OP3", "O1P", "O2P", "O3P",
    "O5'", "C5'", "C4'", "O4'", "C3'", "O3'", "C2'", "O2'", "C1'",
    "O5*", "C5*", "C4*", "O4*", "C3*", "O3*", "C2*", "O2*", "C1*",
})


class MolecularData:
    """Element and residue lookups shared by the whole package.

    Loaded once; use the module-level ``DATA`` instance.
    """

    _instance: ClassVar[Optional["MolecularData"]] = None

    def __init__(self) -> None:
        self.s2n: Dict[str, int] = {s: n for s, n in atomic_numbers.items() if n > 0}
        self.n2s: Dict[int, str] = {n: s for n, s in enumerate(chemical_symbols) if n > 0}
        self.vdw: Dict[int, float] = {}
        for n in self.n2s:
            r = float(vdw_radii[n]) if n < len(vdw_radii) else math.nan
            self.vdw[n] = DEFAULT_VDW_RADIUS if math.isnan(r) else r

        self.halogens: FrozenSet[int] = HALOGENS
        self.transition_metals: FrozenSet[int] = TRANSITION_METALS
        self.metals: FrozenSet[int] = (
            ALKALI_METALS
            | ALKALINE_EARTH_METALS
            | TRANSITION_METALS
            | POST_TRANSITION_METALS
            | LANTHANIDES
            | ACTINIDES
        )
        self.amino_acids = AMINO_ACIDS
        self.nucleotides = NUCLEOTIDES
        self.water_names = WATER_NAMES

    @classmethod
    def get_instance(cls) -> "MolecularData":
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    def vdw_radius(self, number: int) -> float:
        return self.vdw.get(number, DEFAULT_VDW_RADIUS)

    def number(self, symbol: str) -> int:
        """Atomic number for an element symbol (case-insensitive), 0 if unknown."""
        sym = symbol.strip()
        if not sym:
            return 0
        return self.s2n.get(sym[0].upper() + sym[1:].lower(), 0)


DATA = MolecularData.get_instance()
