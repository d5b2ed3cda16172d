"""Contact output: labels, colours, per-contact arrays and a text table."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Collection, Sequence

import numpy as np

from .contact_store import ContactType

if TYPE_CHECKING:
    from ..structure import Structure
    from .contact_store import FrozenContacts

CONTACT_TYPE_NAMES = {
    ContactType.HydrogenBond: "hydrogen bond",
    ContactType.WaterHydrogenBond: "hydrogen bond",
    ContactType.BackboneHydrogenBond: "hydrogen bond",
    ContactType.Hydrophobic: "hydrophobic contact",
    ContactType.HalogenBond: "halogen bond",
    ContactType.IonicInteraction: "ionic interaction",
    ContactType.MetalCoordination: "metal coordination",
    ContactType.CationPi: "cation-pi interaction",
    ContactType.PiStacking: "pi-pi stacking",
    ContactType.WeakHydrogenBond: "weak hydrogen bond",
}

CONTACT_COLORS = {
    ContactType.HydrogenBond: 0x2B83BA,
    ContactType.WaterHydrogenBond: 0x2B83BA,
    ContactType.BackboneHydrogenBond: 0x2B83BA,
    ContactType.Hydrophobic: 0x808080,
    ContactType.HalogenBond: 0x40FFBF,
    ContactType.IonicInteraction: 0xF0C814,
    ContactType.MetalCoordination: 0x8C4099,
    ContactType.CationPi: 0xFF8000,
    ContactType.PiStacking: 0x8CB366,
    ContactType.WeakHydrogenBond: 0xC5DDEC,
}
DEFAULT_CONTACT_COLOR = 0xCCCCCC

ALL_CONTACT_TYPES = tuple(t for t in ContactType if t != ContactType.Unknown)


def contact_type_name(contact_type: int) -> str:
    try:
        return CONTACT_TYPE_NAMES.get(ContactType(contact_type), "unknown contact")
    except ValueError:
        return "unknown contact"


def contact_color(contact_type: int) -> tuple[float, float, float]:
    """RGB in 0..1 for a contact type."""
    try:
        hex_color = CONTACT_COLORS.get(ContactType(contact_type), DEFAULT_CONTACT_COLOR)
    except ValueError:
        hex_color = DEFAULT_CONTACT_COLOR
    return (
        ((hex_color >> 16) & 0xFF) / 255.0,
        ((hex_color >> 8) & 0xFF) / 255.0,
        (hex_color & 0xFF) / 255.0,
    )


class ContactPicker:
    """Maps a picking id (position in the output arrays) back to its contact."""

    def __init__(self, contact_indices: Sequence[int], contacts: FrozenContacts, structure: Structure) -> None:
        self.array = np.asarray(contact_indices, dtype=np.int64)
        self.contacts = contacts
        self.structure = structure

    @property
    def type(self) -> str:
        return "contact"

    def __len__(self) -> int:
        return len(self.array)

    def get_index(self, pid: int) -> int:
        return int(self.array[pid])

    def get_object(self, pid: int) -> dict[str, Any]:
        k = self.get_index(pid)
        f1, f2, contact_type = self.contacts.store.contact(k)
        features = self.contacts.features
        return {
            "center1": features.centers[f1].astype(np.float64),
            "center2": features.centers[f2].astype(np.float64),
            "atom1": features.representative(f1),
            "atom2": features.representative(f2),
            "type": contact_type_name(contact_type),
        }

    def get_position(self, pid: int) -> np.ndarray:
        obj = self.get_object(pid)
        return (obj["center1"] + obj["center2"]) / 2.0


@dataclass
class ContactData:
    """Parallel per-contact arrays (float32) plus a picker."""

    position1: np.ndarray
    position2: np.ndarray
    color: np.ndarray
    radius: np.ndarray
    picking: ContactPicker

    @property
    def color2(self) -> np.ndarray:
        return self.color

    def __len__(self) -> int:
        return len(self.radius)


def _matches(filter_sets, idx1: int, idx2: int) -> bool:
    if isinstance(filter_sets, tuple):
        set1, set2 = filter_sets
        return (idx1 in set1 and idx2 in set2) or (idx1 in set2 and idx2 in set1)
    return idx1 in filter_sets or idx2 in filter_sets


def get_contact_data(
    contacts: FrozenContacts,
    structure: Structure,
    types: Collection[ContactType] | None = None,
    filter_sets: Collection[int] | Sequence[Collection[int]] | None = None,
    radius: float = 1.0,
) -> ContactData:
    """Endpoint positions, colours, radii and picking handle of surviving contacts.

    Parameters
    ----------
    types : collection of ContactType, optional
        Types to keep; all types by default.
    filter_sets : atom-index set, or a pair of sets, optional
        A single set keeps contacts with either representative atom
        inside; a pair ``(set1, set2)`` keeps contacts joining set1 to
        set2 in either orientation.
    radius : float
        Cylinder radius reported for every contact.
    """
    wanted = {int(t) for t in (types if types is not None else ALL_CONTACT_TYPES)}

    filt = None
    if filter_sets is not None:
        if (
            isinstance(filter_sets, (list, tuple))
            and len(filter_sets) == 2
            and all(isinstance(f, (set, frozenset, list, tuple, range)) for f in filter_sets)
        ):
            filt = (set(filter_sets[0]), set(filter_sets[1]))
        else:
            filt = set(filter_sets)

    features = contacts.features
    centers = features.centers
    position1, position2, color, radii, picking = [], [], [], [], []

    for k, f1, f2, contact_type in contacts.surviving():
        if int(contact_type) not in wanted:
            continue
        if filt is not None and not _matches(filt, features.representative(f1), features.representative(f2)):
            continue
        position1.append(centers[f1])
        position2.append(centers[f2])
        color.append(contact_color(contact_type))
        radii.append(radius)
        picking.append(k)

    return ContactData(
        position1=np.array(position1, dtype=np.float32).reshape(-1, 3),
        position2=np.array(position2, dtype=np.float32).reshape(-1, 3),
        color=np.array(color, dtype=np.float32).reshape(-1, 3),
        radius=np.array(radii, dtype=np.float32),
        picking=ContactPicker(picking, contacts, structure),
    )


@dataclass
class LabelData:
    position: np.ndarray
    size: np.ndarray
    color: np.ndarray
    text: list[str]


def format_distance(d: float, unit: str = "") -> str:
    if unit == "angstrom":
        return f"{d:.2f} Å"
    if unit == "nm":
        return f"{d / 10:.2f} nm"
    return f"{d:.2f}"


def get_label_data(contact_data: ContactData, unit: str = "", size: float = 2.0) -> LabelData:
    """Midpoints and distance labels for every contact in ``contact_data``."""
    p1 = contact_data.position1.astype(np.float64)
    p2 = contact_data.position2.astype(np.float64)
    dist = np.linalg.norm(p2 - p1, axis=1)
    return LabelData(
        position=((p1 + p2) / 2.0).astype(np.float32),
        size=np.full(len(dist), size, dtype=np.float32),
        color=contact_data.color,
        text=[format_distance(float(d), unit) for d in dist],
    )


def _format_feature(s: Structure, atoms: tuple[int, ...]) -> str:
    if len(atoms) == 1:
        return f"{s.symbol(atoms[0])}{atoms[0]}"
    return "[" + ",".join(f"{s.symbol(a)}{a}" for a in atoms) + "]"


def format_contact_table(s: Structure, contacts: FrozenContacts, debug: bool = False) -> str:
    """Summary table of surviving contacts."""
    lines: list[str] = []
    lines.append(f"\n{'=' * 80}")
    lines.append("# Non-Covalent Contacts")
    lines.append("=" * 80)

    rows = list(contacts.surviving())
    if not rows:
        lines.append("\n  No contacts detected.\n")
        return "\n".join(lines)

    features = contacts.features
    centers = features.centers.astype(np.float64)
    lines.append(f"\n  {len(rows)} contact(s) detected:\n")
    for k, f1, f2, contact_type in rows:
        a = _format_feature(s, features.atom_set(f1))
        b = _format_feature(s, features.atom_set(f2))
        d = float(np.linalg.norm(centers[f1] - centers[f2]))
        line = f"  {contact_type_name(contact_type):<22s}  {a} ... {b}  {d:5.2f}"
        if debug:
            line += f"  ({contact_type.name}, contact {k}, features {f1}/{f2})"
        lines.append(line)

    dropped = len(contacts.store) - len(rows)
    if dropped:
        lines.append(f"\n  {dropped} contact(s) removed by refinement.")
    lines.append("")
    return "\n".join(lines)
