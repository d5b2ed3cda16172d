"""Refinement passes that clear contacts after detection.

Passes only ever clear bits of the contact set. They run in a fixed
order (:data:`REFINEMENT_ORDER`): the priority passes assume that
line-of-sight has already removed occluded long-range contacts.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import TYPE_CHECKING, Callable, Iterable

import numpy as np

from .contact_store import HYDROGEN_BOND_TYPES, ContactType
from .detector import invalid_blocker_contact
from .features import FeatureType

if TYPE_CHECKING:
    from ..spatial_hash import SpatialHash
    from ..structure import Structure
    from .contact_store import FrozenContacts
    from .thresholds import ContactThresholds

logger = logging.getLogger(__name__)

H = 1
LINE_OF_SIGHT_RADIUS = 3.0
# blockers this close to a feature centre sit inside the functional group
GROUP_CENTER_EXCLUSION_SQ = 1.0


def refine_line_of_sight(
    s: Structure, contacts: FrozenContacts, thr: ContactThresholds, atom_hash: SpatialHash
) -> int:
    """Clear contacts whose midpoint region is occupied by a third heavy atom."""
    factor = thr.line_of_sight_dist_factor
    factor_sq = factor * factor
    radius = LINE_OF_SIGHT_RADIUS * factor
    centers = contacts.features.centers.astype(np.float64)
    atom_sets = contacts.features.atom_sets
    positions = s.positions
    store = contacts.store
    cleared = 0

    for k in contacts.contact_set:
        f1, f2, _ = store.contact(k)
        c1, c2 = centers[f1], centers[f2]
        as1, as2 = atom_sets[f1], atom_sets[f2]
        rep1, rep2 = as1[0], as2[0]
        idx, d_sq = atom_hash.within((c1 + c2) / 2.0, radius)
        for w, dsq in zip(idx.tolist(), d_sq.tolist()):
            if s.number(w) == H:
                continue
            vdw = s.vdw_radius(w)
            if vdw * vdw * factor_sq <= dsq:
                continue
            if invalid_blocker_contact(s, rep1, w, thr.master_model_index):
                continue
            if invalid_blocker_contact(s, rep2, w, thr.master_model_index):
                continue
            if w in as1 or w in as2:
                continue
            p = positions[w]
            if np.sum((c1 - p) ** 2) <= GROUP_CENTER_EXCLUSION_SQ or np.sum((c2 - p) ** 2) <= GROUP_CENTER_EXCLUSION_SQ:
                continue
            contacts.contact_set.clear(k)
            cleared += 1
            logger.debug(
                "  line of sight: removing %s ... %s, blocked by %s",
                s.qualified_name(rep1),
                s.qualified_name(rep2),
                s.qualified_name(w),
            )
            break
    return cleared


def refine_hydrophobic_contacts(s: Structure, contacts: FrozenContacts) -> int:
    """Keep only the closest hydrophobic contact between an atom and another residue.

    Two keys are tracked per contact, ``atom1|residue2`` and
    ``atom2|residue1``, each keeping its own closest contact.
    """
    store = contacts.store
    atom_sets = contacts.features.atom_sets
    positions = s.positions
    contact_set = contacts.contact_set
    closest: dict[tuple[int, int], tuple[float, int]] = {}
    before = contact_set.count()

    def handle(dist: float, k: int, key: tuple[int, int]) -> None:
        min_dist, min_index = closest.get(key, (np.inf, -1))
        if dist < min_dist:
            if min_index != -1:
                contact_set.clear(min_index)
            closest[key] = (dist, k)
        else:
            contact_set.clear(k)

    for k in contact_set:
        f1, f2, contact_type = store.contact(k)
        if contact_type != ContactType.Hydrophobic:
            continue
        a1, a2 = atom_sets[f1][0], atom_sets[f2][0]
        dist = float(np.linalg.norm(positions[a1] - positions[a2]))
        handle(dist, k, (a1, s.residue_index(a2)))
        handle(dist, k, (a2, s.residue_index(a1)))
    return before - contact_set.count()


def suppress_if_overlaps(
    contacts: FrozenContacts,
    priority: Iterable[ContactType],
    subordinate: Iterable[ContactType],
    index_subordinate: bool = False,
) -> int:
    """Clear subordinate contacts between features that share a priority contact.

    One family is indexed by every member atom of both its features; the
    other is scanned and looked up by the representative atoms of its two
    features. Both endpoints sharing an indexed contact is an overlap.

    With ``index_subordinate=False`` the priority family is indexed and
    the scanned subordinate contact is cleared. With ``True`` the roles
    swap: subordinate contacts are indexed and every overlapping one is
    cleared when a priority contact is scanned.
    """
    priority = {int(t) for t in priority}
    subordinate = {int(t) for t in subordinate}
    indexed, scanned = (subordinate, priority) if index_subordinate else (priority, subordinate)

    store = contacts.store
    atom_sets = contacts.features.atom_sets
    contact_set = contacts.contact_set
    types = store.type
    by_atom: dict[int, list[int]] = defaultdict(list)

    for k in contact_set:
        if int(types[k]) not in indexed:
            continue
        f1, f2, _ = store.contact(k)
        for a in atom_sets[f1]:
            by_atom[a].append(k)
        for a in atom_sets[f2]:
            by_atom[a].append(k)

    cleared = 0
    for k in contact_set:
        if int(types[k]) not in scanned:
            continue
        f1, f2, _ = store.contact(k)
        list1 = by_atom.get(atom_sets[f1][0])
        list2 = by_atom.get(atom_sets[f2][0])
        if not list1 or not list2:
            continue
        shared = [c for c in list1 if c in list2]
        if not shared:
            continue
        if index_subordinate:
            for c in shared:
                if contact_set.is_set(c):
                    contact_set.clear(c)
                    cleared += 1
        else:
            contact_set.clear(k)
            cleared += 1
    return cleared


def refine_salt_bridges(s: Structure, contacts: FrozenContacts) -> int:
    """Ionic interactions win over hydrogen bonds between the same groups."""
    return suppress_if_overlaps(contacts, [ContactType.IonicInteraction], HYDROGEN_BOND_TYPES)


def refine_pi_stacking(s: Structure, contacts: FrozenContacts) -> int:
    """Pi-stacking wins over hydrophobic and cation-pi contacts between the same groups."""
    return suppress_if_overlaps(
        contacts, [ContactType.PiStacking], [ContactType.Hydrophobic, ContactType.CationPi]
    )


def refine_metal_coordination(s: Structure, contacts: FrozenContacts) -> int:
    """Metal coordination wins over ionic interactions between the same groups."""
    return suppress_if_overlaps(
        contacts, [ContactType.MetalCoordination], [ContactType.IonicInteraction], index_subordinate=True
    )


def refine_weak_hydrogen_bonds(s: Structure, contacts: FrozenContacts) -> int:
    """Clear weak hydrogen bonds whose acceptor already has a regular hydrogen bond."""
    store = contacts.store
    feature_types = contacts.features.types
    contact_set = contacts.contact_set
    cleared = 0
    for k in contact_set:
        f1, f2, contact_type = store.contact(k)
        if contact_type != ContactType.WeakHydrogenBond:
            continue
        acceptor = f2 if feature_types[f1] == FeatureType.WeakHydrogenDonor else f1
        if contacts.adjacency.has_contact_of_type(acceptor, HYDROGEN_BOND_TYPES, contact_set):
            contact_set.clear(k)
            cleared += 1
    return cleared


RefinementPass = Callable[["Structure", "FrozenContacts"], int]

REFINEMENT_ORDER = (
    "line_of_sight",
    "hydrophobic",
    "salt_bridges",
    "pi_stacking",
    "metal_coordination",
    "weak_hydrogen_bonds",
)


def refine_contacts(
    s: Structure, contacts: FrozenContacts, thr: ContactThresholds, atom_hash: SpatialHash
) -> list[tuple[str, int]]:
    """Run every enabled pass in order; returns ``(pass, surviving count)`` after each."""
    passes: list[tuple[str, RefinementPass]] = [
        ("line_of_sight", lambda st, c: refine_line_of_sight(st, c, thr, atom_hash)),
        ("hydrophobic", refine_hydrophobic_contacts),
    ]
    if thr.refine_salt_bridges:
        passes.append(("salt_bridges", refine_salt_bridges))
    passes.append(("pi_stacking", refine_pi_stacking))
    passes.append(("metal_coordination", refine_metal_coordination))
    if thr.refine_weak_hydrogen_bonds:
        passes.append(("weak_hydrogen_bonds", refine_weak_hydrogen_bonds))

    history = []
    for name, refine in passes:
        cleared = refine(s, contacts)
        remaining = contacts.contact_set.count()
        logger.debug("Refinement %s: cleared %d, %d remaining", name, cleared, remaining)
        history.append((name, remaining))
    return history
