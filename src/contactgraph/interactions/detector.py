"""Generic feature-pair scan shared by every contact family."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Optional

import numpy as np

from .contact_store import ContactType

if TYPE_CHECKING:
    from ..structure import Structure
    from .contact_store import Contacts
    from .features import FeatureType

logger = logging.getLogger(__name__)

# classify(i, j, d_sq) -> (feature1, feature2, type) or None; i < j
Classifier = Callable[[int, int, float], Optional[tuple[int, int, ContactType]]]


def is_master_contact(s: Structure, a1: int, a2: int, master_index: int) -> bool:
    """Exactly one of the two atoms lies in the master model."""
    m1 = s.model_index(a1) == master_index
    m2 = s.model_index(a2) == master_index
    return m1 != m2


def _altlocs_differ(s: Structure, a1: int, a2: int) -> bool:
    l1, l2 = s.altloc(a1), s.altloc(a2)
    return bool(l1 and l2 and l1 != l2)


def invalid_atom_contact(s: Structure, a1: int, a2: int, master_index: int) -> bool:
    """Pair excluded from detection: other model, same residue or conflicting altlocs."""
    if is_master_contact(s, a1, a2, master_index):
        return False
    return (
        s.model_index(a1) != s.model_index(a2)
        or s.residue_index(a1) == s.residue_index(a2)
        or _altlocs_differ(s, a1, a2)
    )


def invalid_blocker_contact(s: Structure, a1: int, a2: int, master_index: int) -> bool:
    """As :func:`invalid_atom_contact` but allowing atoms of the same residue."""
    if is_master_contact(s, a1, a2, master_index):
        return False
    return s.model_index(a1) != s.model_index(a2) or _altlocs_differ(s, a1, a2)


@dataclass(frozen=True)
class ContactFamily:
    """One interaction family for :func:`scan_contacts`.

    Parameters
    ----------
    name : str
        Used in log messages.
    radius : float
        Search radius around each feature centre.
    pairs : frozenset of (FeatureType, FeatureType)
        Feature type combinations worth classifying, in either order.
    classify : callable
        ``classify(i, j, d_sq)`` for features ``i < j`` whose centres are
        ``sqrt(d_sq)`` apart. Returns the endpoints and type of the
        contact to store, or ``None``.
    """

    name: str
    radius: float
    pairs: frozenset
    classify: Classifier

    def partner_types(self) -> dict[int, np.ndarray]:
        """Feature type -> array of the types it pairs with."""
        partners: dict[int, set[int]] = {}
        for a, b in self.pairs:
            partners.setdefault(a, set()).add(b)
            partners.setdefault(b, set()).add(a)
        return {t: np.array(sorted(p)) for t, p in partners.items()}


def type_pairs(*pairs: tuple[FeatureType, FeatureType]) -> frozenset:
    return frozenset((int(a), int(b)) for a, b in pairs)


def scan_contacts(structure: Structure, contacts: Contacts, family: ContactFamily, master_index: int = -1) -> int:
    """Run ``family`` over every feature pair within its radius; returns contacts added.

    Each unordered pair is visited once (``j > i``). Pairs whose
    representative atoms fail :func:`invalid_atom_contact` are skipped
    before classification.
    """
    features = contacts.features
    types = features.types
    centers = features.centers
    atom_sets = features.atom_sets
    partners = family.partner_types()
    added = 0

    for i in range(len(features)):
        allowed = partners.get(int(types[i]))
        if allowed is None:
            continue
        rep_i = atom_sets[i][0]
        x, y, z = (float(c) for c in centers[i])
        idx, d_sq = contacts.spatial_hash.within((x, y, z), family.radius)
        mask = (idx > i) & np.isin(types[idx], allowed)
        for j, dsq in zip(idx[mask].tolist(), d_sq[mask].tolist()):
            if invalid_atom_contact(structure, rep_i, atom_sets[j][0], master_index):
                continue
            result = family.classify(i, j, dsq)
            if result is None:
                continue
            f1, f2, contact_type = result
            contacts.add(f1, f2, contact_type)
            added += 1
            logger.debug(
                "  %s: %s ... %s (%.2f A)",
                contact_type.name,
                structure.qualified_name(atom_sets[f1][0]),
                structure.qualified_name(atom_sets[f2][0]),
                dsq**0.5,
            )

    logger.debug("%s: %d contacts", family.name, added)
    return added
