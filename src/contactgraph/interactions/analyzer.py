"""ContactAnalyzer and the calculate_contacts convenience function."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import numpy as np

from ..spatial_hash import SpatialHash, spatial_lookup, suggested_cell_size
from ..valence_model import valence_model
from .charged import add_aromatic_rings, add_negative_charges, add_positive_charges, charged_family
from .contact_store import Contacts, ContactStore, FrozenContacts
from .detector import scan_contacts
from .features import FeatureSet
from .halogen_bonds import add_halogen_acceptors, add_halogen_donors, halogen_bond_family
from .hydrogen_bonds import (
    add_hydrogen_acceptors,
    add_hydrogen_donors,
    add_weak_hydrogen_donors,
    hydrogen_bond_family,
)
from .hydrophobic import add_hydrophobic, hydrophobic_family
from .metal_binding import add_metal_binding, add_metals, metal_coordination_family
from .refine import refine_contacts
from .thresholds import ContactThresholds

if TYPE_CHECKING:
    from ..cache import StructureCache
    from ..config_classes import ValenceParams
    from ..structure import Structure
    from ..valence_model import ValenceModel

logger = logging.getLogger(__name__)


def calculate_features(s: Structure, vm: ValenceModel) -> FeatureSet:
    """Extract every feature family, in a fixed order, into a frozen FeatureSet."""
    features = FeatureSet()
    add_positive_charges(s, features, vm)
    add_negative_charges(s, features, vm)
    add_aromatic_rings(s, features)
    add_hydrogen_acceptors(s, features, vm)
    add_hydrogen_donors(s, features, vm)
    add_weak_hydrogen_donors(s, features, vm)
    add_metal_binding(s, features)
    add_metals(s, features)
    add_hydrophobic(s, features)
    add_halogen_acceptors(s, features)
    add_halogen_donors(s, features)
    features.freeze()
    logger.debug("Features %s: %d", s.identifier, len(features))
    return features


def create_contacts(features: FeatureSet, thr: ContactThresholds) -> Contacts | None:
    """Empty detection state over ``features``; None when there are no features."""
    if len(features) == 0:
        return None
    radius = max(
        thr.max_ionic_dist + 2.0,
        thr.max_pi_stacking_dist,
        thr.max_cation_pi_dist,
        thr.max_hbond_dist,
        thr.max_hbond_sulfur_dist,
    )
    return Contacts(
        features=features,
        spatial_hash=SpatialHash(features.centers, cell_size=suggested_cell_size(radius / 2.0)),
        store=ContactStore(),
        feature_flags=np.zeros(len(features), dtype=bool),
    )


class ContactAnalyzer:
    """Detection then refinement for one structure.

    Parameters
    ----------
    structure : Structure
        Read-only input.
    thresholds : ContactThresholds, optional
        Custom detection thresholds.
    cache : StructureCache, optional
        Shared cache for the valence model and atom spatial hash.
    valence_params : ValenceParams, optional
        Charge / hydrogen assignment policy.
    """

    def __init__(
        self,
        structure: Structure,
        thresholds: ContactThresholds | None = None,
        cache: StructureCache | None = None,
        valence_params: ValenceParams | None = None,
    ) -> None:
        self.structure = structure
        self.thresholds = thresholds or ContactThresholds()
        self._cache = cache
        self._valence_params = valence_params
        self._contacts: Contacts | None = None
        self._frozen: FrozenContacts | None = None
        self.refinement_history: list[tuple[str, int]] = []

    @property
    def valence_model(self) -> ValenceModel:
        return valence_model(self.structure, self._cache, self._valence_params)

    def detect(self) -> Contacts:
        """Extract features and run every detector family."""
        s = self.structure
        thr = self.thresholds
        vm = self.valence_model
        self._frozen = None

        logger.debug("\n" + "=" * 80)
        logger.debug("CONTACT DETECTION %s", s.identifier)
        logger.debug("=" * 80)

        features = calculate_features(s, vm)
        contacts = create_contacts(features, thr)
        if contacts is None:
            # no features: an empty run, still refinable
            contacts = Contacts(
                features=features,
                spatial_hash=spatial_lookup(s, self._cache),
                store=ContactStore(),
                feature_flags=np.zeros(0, dtype=bool),
            )
            self._contacts = contacts
            return contacts

        master = thr.master_model_index
        for family in (
            charged_family(s, contacts, thr),
            hydrogen_bond_family(s, contacts, thr, vm),
            metal_coordination_family(s, contacts, thr),
            hydrophobic_family(s, contacts, thr),
            halogen_bond_family(s, contacts, thr),
        ):
            scan_contacts(s, contacts, family, master)

        logger.debug("Detected %d contacts", len(contacts.store))
        self._contacts = contacts
        return contacts

    def refine(self) -> FrozenContacts:
        """Freeze the detected contacts and run the refinement passes."""
        if self._contacts is None:
            raise RuntimeError("refine() called before detect()")
        if self._frozen is not None:
            return self._frozen
        frozen = FrozenContacts.freeze(self._contacts)
        self.refinement_history = refine_contacts(
            self.structure, frozen, self.thresholds, spatial_lookup(self.structure, self._cache)
        )
        logger.debug("Refined: %d of %d contacts remain", frozen.contact_set.count(), len(frozen.store))
        self._frozen = frozen
        return frozen

    def run(self) -> FrozenContacts:
        self.detect()
        return self.refine()


def calculate_contacts(
    structure: Structure,
    thresholds: ContactThresholds | None = None,
    cache: StructureCache | None = None,
) -> FrozenContacts:
    """Detect and refine all contacts of ``structure``."""
    return ContactAnalyzer(structure, thresholds=thresholds, cache=cache).run()
