"""Decide, field by field, which strategy (if any) applies."""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..core.catalog import StrategyCatalog
from ..core.policies import MaskPolicy
from ..core.strategies import Strategy
from .traverser import FieldSlot

logger = logging.getLogger(__name__)


class Action(Enum):
    """What the engine does with a field."""

    APPLY = "apply"
    KEEP = "keep"
    RECURSE = "recurse"


class Reason(Enum):
    """Which rule of the priority chain produced a decision."""

    DISABLED = "disabled"
    OVERRIDE = "override"
    OVERRIDE_NONE = "override_none"
    OVERRIDE_UNKNOWN = "override_unknown"
    DECLARATION = "declaration"
    UNDECLARED = "undeclared"


@dataclass(frozen=True)
class Decision:
    action: Action
    reason: Reason
    strategy: Optional[Strategy] = None


_KEEP_DISABLED = Decision(Action.KEEP, Reason.DISABLED)
_KEEP_NONE = Decision(Action.KEEP, Reason.OVERRIDE_NONE)
_KEEP_UNKNOWN = Decision(Action.KEEP, Reason.OVERRIDE_UNKNOWN)
_RECURSE_UNDECLARED = Decision(Action.RECURSE, Reason.UNDECLARED)


class OverrideResolver:
    """
    Applies the priority chain to one field:

    1. disabled policy: keep everything;
    2. override for a top-level field name: ``none`` keeps, a registered
       strategy is applied to string values, an unregistered one keeps;
    3. declaration naming a registered strategy on a string value: apply;
    4. anything else: recurse into the value.

    Overrides are only consulted for fields at depth 0, so ``{"street":
    "none"}`` exempts ``Customer.street`` but not ``Customer.home.street``.
    An override naming a registered strategy on a non-string value falls
    through to recursion, so nested records are still masked.
    """

    def __init__(self, catalog: StrategyCatalog) -> None:
        self.catalog = catalog

    def resolve(self, slot: FieldSlot, policy: MaskPolicy) -> Decision:
        if policy.disable_masking:
            return _KEEP_DISABLED

        if slot.depth == 0:
            decision = self._resolve_override(slot, policy)
            if decision is not None:
                return decision

        declaration = slot.declaration
        if declaration and slot.is_string:
            strategy = self.catalog.resolve(declaration.strategy)
            if strategy is not None:
                return Decision(Action.APPLY, Reason.DECLARATION, strategy)
            logger.debug(
                f"Field '{slot.name}' declares unknown strategy "
                f"'{declaration.strategy}', leaving it unmasked"
            )

        return _RECURSE_UNDECLARED

    def _resolve_override(self, slot: FieldSlot, policy: MaskPolicy) -> Optional[Decision]:
        if policy.is_suppressed(slot.name):
            return _KEEP_NONE

        override = policy.override_for(slot.name)
        if override is None:
            return None

        strategy = self.catalog.resolve(override)
        if strategy is None:
            logger.debug(
                f"Override for field '{slot.name}' names unknown strategy "
                f"'{override}', leaving it unmasked"
            )
            return _KEEP_UNKNOWN

        if slot.is_string:
            return Decision(Action.APPLY, Reason.OVERRIDE, strategy)

        return None
