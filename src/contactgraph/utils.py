import logging
from typing import List, Optional, Sequence, Set

_PACKAGE_LOGGER = "contactgraph"


def configure_debug_logging(level: int = logging.DEBUG, stream=None) -> logging.Logger:
    """
    Send package log records to a stream (stderr by default).
    Safe to call repeatedly: only one handler is attached.
    """
    logger = logging.getLogger(_PACKAGE_LOGGER)
    logger.setLevel(level)
    for h in logger.handlers:
        if getattr(h, "_contactgraph_debug", False):
            h.setLevel(level)
            return logger
    handler = logging.StreamHandler(stream)
    handler.setFormatter(logging.Formatter("%(message)s"))
    handler.setLevel(level)
    handler._contactgraph_debug = True
    logger.addHandler(handler)
    return logger


def parse_index_set(text: Optional[str]) -> Optional[Set[int]]:
    """
    Parse atom indices such as "0,3,5-9" into a set.
    Returns None for empty input.
    """
    if not text:
        return None
    out: Set[int] = set()
    for part in text.split(","):
        part = part.strip()
        if not part:
            continue
        if "-" in part:
            lo, hi = part.split("-", 1)
            out.update(range(int(lo), int(hi) + 1))
        else:
            out.add(int(part))
    return out


def parse_contact_types(names: Sequence[str]) -> List[int]:
    """Map ContactType names (case-insensitive, '-'/'_' ignored) to values."""
    from .interactions.contact_store import ContactType

    lookup = {t.name.lower(): t for t in ContactType}
    types = []
    for name in names:
        key = name.replace("-", "").replace("_", "").lower()
        if key not in lookup:
            raise ValueError(f"Unknown contact type {name!r}; choose from {', '.join(t.name for t in ContactType)}")
        types.append(lookup[key])
    return types
