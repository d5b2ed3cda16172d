from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("contactgraph")
except PackageNotFoundError:
    __version__ = "0.0.0"

# Eagerly load data
from .data_loader import DATA

# Configuration
from .config_classes import ValenceParams
from .interactions.thresholds import ContactThresholds

# Structure input and per-structure cache
from .cache import StructureCache
from .structure import Structure, build_structure, structure_from_rdkit

# Chemical perception
from .valence_model import ValenceModel, valence_model
from .spatial_hash import SpatialHash

# Main interfaces
from .interactions import (
    ContactAnalyzer,
    ContactType,
    FeatureType,
    build_contact_graph,
    calculate_contacts,
    contact_type_name,
    format_contact_table,
    get_contact_data,
    get_label_data,
)
from .utils import configure_debug_logging

__all__ = [
    # Main interfaces
    'calculate_contacts',
    'ContactAnalyzer',
    'ContactType',
    'FeatureType',

    # Structure input
    'Structure',
    'build_structure',
    'structure_from_rdkit',
    'StructureCache',

    # Chemical perception
    'ValenceModel',
    'valence_model',
    'SpatialHash',

    # Output
    'get_contact_data',
    'get_label_data',
    'contact_type_name',
    'format_contact_table',
    'build_contact_graph',

    # Configuration
    'ContactThresholds',
    'ValenceParams',
    'configure_debug_logging',

    # Data access
    'DATA',                 # Access as DATA.vdw, DATA.metals, etc.
]
