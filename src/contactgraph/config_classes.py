"""Configuration dataclasses for chemical perception."""

from dataclasses import dataclass

ASSIGN_POLICIES = ("always", "auto", "never")


@dataclass(frozen=True)
class ValenceParams:
    """What the valence model is allowed to assign.

    ``"always"`` overrides the input, ``"auto"`` only fills in when the
    input carries nothing (zero formal charge / no bonded hydrogens),
    ``"never"`` trusts the input.
    """

    assign_charge: str = "auto"
    """Formal charge policy. Auto: only atoms with zero input charge."""

    assign_h: str = "auto"
    """Implicit hydrogen policy. Auto: only atoms with no explicit H."""

    def __post_init__(self) -> None:
        for name in ("assign_charge", "assign_h"):
            value = getattr(self, name)
            if value not in ASSIGN_POLICIES:
                raise ValueError(f"{name} must be one of {ASSIGN_POLICIES}, got {value!r}")

    @classmethod
    def explicit(cls) -> "ValenceParams":
        """Trust charges and hydrogens exactly as given."""
        return cls(assign_charge="never", assign_h="never")
