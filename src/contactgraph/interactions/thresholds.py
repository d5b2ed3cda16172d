"""Tunable geometric thresholds for contact detection and refinement."""

from __future__ import annotations

import re
from dataclasses import dataclass, fields
from typing import Any, Mapping


@dataclass
class ContactThresholds:
    """Distance and angle cut-offs for every contact family.

    All distances in Angstroms, all angles in degrees. Values are not
    validated: a negative distance simply means that family never forms.
    """

    # Hydrophobic
    max_hydrophobic_dist: float = 4.0

    # Hydrogen bonds
    max_hbond_dist: float = 3.5
    max_hbond_sulfur_dist: float = 4.1  # either partner is sulfur
    max_hbond_acc_angle: float = 45.0  # deviation from ideal angle at the acceptor
    max_hbond_don_angle: float = 45.0  # deviation from ideal angle at the donor
    max_hbond_acc_plane_angle: float = 90.0  # out of plane at trigonal acceptors
    max_hbond_don_plane_angle: float = 30.0  # out of plane at trigonal donors

    # Pi-stacking
    max_pi_stacking_dist: float = 5.5
    max_pi_stacking_offset: float = 2.0
    max_pi_stacking_angle: float = 30.0

    # Cation-pi
    max_cation_pi_dist: float = 6.0
    max_cation_pi_offset: float = 2.0

    # Ionic
    max_ionic_dist: float = 5.0

    # Halogen bonds
    max_halogen_bond_dist: float = 4.0
    max_halogen_bond_angle: float = 30.0

    # Metal coordination
    max_metal_dist: float = 3.0

    # Refinement
    refine_salt_bridges: bool = True
    refine_weak_hydrogen_bonds: bool = False
    line_of_sight_dist_factor: float = 1.0

    # Model handling (-1: no master model)
    master_model_index: int = -1

    @classmethod
    def from_params(cls, params: Mapping[str, Any]) -> ContactThresholds:
        """Build thresholds from a flat options mapping.

        Keys may be snake_case field names or their camelCase forms
        (``maxHbondDist``); unknown keys raise ``ValueError``.
        """
        names = {f.name for f in fields(cls)}
        kwargs = {}
        for key, value in params.items():
            name = key if key in names else _snake_case(key)
            if name not in names:
                raise ValueError(f"Unknown contact parameter {key!r}")
            kwargs[name] = value
        return cls(**kwargs)

    def to_params(self) -> dict[str, Any]:
        """camelCase options mapping, the inverse of :meth:`from_params`."""
        return {_camel_case(f.name): getattr(self, f.name) for f in fields(self)}


def _snake_case(name: str) -> str:
    return re.sub(r"(?<!^)(?=[A-Z])", "_", name).lower()


def _camel_case(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(p.capitalize() for p in rest)
