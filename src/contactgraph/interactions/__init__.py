"""Non-covalent contact detection over a Structure."""

from .analyzer import ContactAnalyzer, calculate_contacts, calculate_features
from .contact_store import AdjacencyList, Contacts, ContactSet, ContactStore, ContactType, FrozenContacts
from .detector import ContactFamily, invalid_atom_contact, scan_contacts
from .display import (
    ContactData,
    ContactPicker,
    contact_type_name,
    format_contact_table,
    get_contact_data,
    get_label_data,
)
from .features import Feature, FeatureBuilder, FeatureGroup, FeatureSet, FeatureType
from .graph import build_contact_graph
from .refine import suppress_if_overlaps
from .thresholds import ContactThresholds

__all__ = [
    "AdjacencyList",
    "ContactAnalyzer",
    "ContactData",
    "ContactFamily",
    "ContactPicker",
    "ContactSet",
    "ContactStore",
    "ContactThresholds",
    "ContactType",
    "Contacts",
    "Feature",
    "FeatureBuilder",
    "FeatureGroup",
    "FeatureSet",
    "FeatureType",
    "FrozenContacts",
    "build_contact_graph",
    "calculate_contacts",
    "calculate_features",
    "contact_type_name",
    "format_contact_table",
    "get_contact_data",
    "get_label_data",
    "invalid_atom_contact",
    "scan_contacts",
    "suppress_if_overlaps",
]
