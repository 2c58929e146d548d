"""Mask policy: per-call overrides and the disable switch."""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Optional

from .strategies import NO_MASK


@dataclass(frozen=True)
class MaskPolicy:
    """
    Policy governing a single masking call.

    Attributes:
        overrides: Exact field name -> ``"none"`` or a strategy name. An
            override wins over the field's declaration.
        disable_masking: When set the whole call is a no-op.

    Examples:
        >>> policy = MaskPolicy(overrides={"Email": "none"})
        >>> policy.override_for("Email")
        'none'
        >>> MaskPolicy().is_empty
        True
    """

    overrides: Mapping[str, str] = field(default_factory=dict)
    disable_masking: bool = False

    def __post_init__(self) -> None:
        self._validate_overrides()
        # Freeze a private copy so later changes to the caller's dict don't leak in
        object.__setattr__(self, "overrides", MappingProxyType(dict(self.overrides)))

    def _validate_overrides(self) -> None:
        if not isinstance(self.overrides, Mapping):
            raise TypeError(
                f"overrides must be a mapping, got {type(self.overrides).__name__}"
            )
        for name, strategy in self.overrides.items():
            if not isinstance(name, str) or not isinstance(strategy, str):
                raise TypeError(
                    f"Override entries must map str to str, got {name!r}: {strategy!r}"
                )

    def override_for(self, field_name: str) -> Optional[str]:
        """Return the override for ``field_name`` or None."""
        return self.overrides.get(field_name)

    def is_suppressed(self, field_name: str) -> bool:
        """True if the field is explicitly exempted with ``"none"``."""
        return self.overrides.get(field_name) == NO_MASK

    @property
    def is_empty(self) -> bool:
        return not self.overrides and not self.disable_masking

    def to_dict(self) -> dict:
        return {
            "overrides": dict(self.overrides),
            "disable_masking": self.disable_masking,
        }

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, MaskPolicy):
            return NotImplemented
        return (
            dict(self.overrides) == dict(other.overrides)
            and self.disable_masking == other.disable_masking
        )

    def __hash__(self) -> int:
        return hash((frozenset(self.overrides.items()), self.disable_masking))


DEFAULT_POLICY = MaskPolicy()
DISABLED_POLICY = MaskPolicy(disable_masking=True)
