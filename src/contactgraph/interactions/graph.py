"""Export surviving contacts as a networkx graph over features."""

from __future__ import annotations

from typing import TYPE_CHECKING

import networkx as nx
import numpy as np

from .display import contact_type_name
from .features import FeatureGroup, FeatureType

if TYPE_CHECKING:
    from .contact_store import FrozenContacts


def build_contact_graph(contacts: FrozenContacts, include_isolated: bool = False) -> nx.MultiGraph:
    """Return a MultiGraph with one node per feature and one edge per surviving contact.

    Nodes carry ``feature_type``, ``group``, ``atoms`` and ``center``;
    edges carry ``contact_type`` (the enum name), ``label``,
    ``contact_index`` and ``distance`` between the feature centres.

    Parameters
    ----------
    contacts : FrozenContacts
        Refined engine output.
    include_isolated : bool
        Also add features that take part in no surviving contact.
    """
    features = contacts.features
    centers = features.centers.astype(np.float64)
    G = nx.MultiGraph()

    def add_node(f: int) -> None:
        if f in G:
            return
        G.add_node(
            f,
            feature_type=FeatureType(int(features.types[f])).name,
            group=FeatureGroup(int(features.groups[f])).name,
            atoms=features.atom_set(f),
            center=tuple(centers[f].tolist()),
        )

    if include_isolated:
        for f in range(len(features)):
            add_node(f)

    for k, f1, f2, contact_type in contacts.surviving():
        add_node(f1)
        add_node(f2)
        G.add_edge(
            f1,
            f2,
            key=k,
            contact_type=contact_type.name,
            label=contact_type_name(contact_type),
            contact_index=k,
            distance=float(np.linalg.norm(centers[f1] - centers[f2])),
        )
    return G
