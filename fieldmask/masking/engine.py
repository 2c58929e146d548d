"""MaskEngine: traverser + resolver + catalog behind the public masking API."""

import copy
import logging
from collections.abc import Mapping, MutableMapping, MutableSequence, Sequence, Set
from typing import Any, Optional, TypeVar

from ..core.catalog import StrategyCatalog
from ..core.config import MaskingConfig
from ..core.exceptions import UnknownStrategyError
from ..core.policies import DEFAULT_POLICY, DISABLED_POLICY, MaskPolicy
from ..core.strategies import Transform
from .context import current_policy
from .resolver import Action, OverrideResolver
from .traverser import FieldSlot, ValueTraverser, declared_fields, is_leaf, is_record

logger = logging.getLogger(__name__)

T = TypeVar("T")


class MaskEngine:
    """
    Masks declared string fields inside nested values.

    The engine owns a :class:`StrategyCatalog`. Masking operations never
    raise for unknown strategies, misplaced declarations or unsupported
    inputs; those cases leave the value untouched.

    Examples:
        >>> from dataclasses import dataclass
        >>> from fieldmask.core.declarations import masked
        >>> @dataclass
        ... class Customer:
        ...     name: str = masked("partial")
        ...     email: str = masked("email")
        >>> engine = MaskEngine()
        >>> engine.mask(Customer("John Doe", "john.doe@example.com"))
        Customer(name='Jo****oe', email='j*******@example.com')
        >>> engine.mask_with_overrides(Customer("John Doe", "j@x.io"), {"email": "none"})
        Customer(name='Jo****oe', email='j@x.io')
    """

    def __init__(
        self,
        catalog: Optional[StrategyCatalog] = None,
        default_policy: Optional[MaskPolicy] = None,
        strict_declarations: bool = False,
    ) -> None:
        """
        Initialize the engine.

        Args:
            catalog: Strategy catalog to use; a fresh built-in catalog if None
            default_policy: Policy used by :meth:`mask` when none is given
            strict_declarations: Make :meth:`validate_declarations` raise on
                unknown strategy names instead of returning them
        """
        self.catalog = catalog if catalog is not None else StrategyCatalog.with_builtins()
        self.default_policy = default_policy or DEFAULT_POLICY
        self.strict_declarations = strict_declarations
        self._resolver = OverrideResolver(self.catalog)
        self._traverser = ValueTraverser()

    @classmethod
    def from_config(cls, config: MaskingConfig) -> "MaskEngine":
        """Build an engine from a :class:`MaskingConfig`."""
        return cls(
            catalog=config.build_catalog(),
            default_policy=config.default_policy.to_policy(),
            strict_declarations=config.strict_declarations,
        )

    def register(self, name: str, transform: Transform) -> None:
        """Install or overwrite a strategy in the engine's catalog."""
        self.catalog.register(name, transform)
        logger.info(f"Registered masking strategy '{name}'")

    def register_alias(self, alias: str, target: str) -> None:
        """Bind ``alias`` to the current transform of ``target``."""
        self.catalog.register_alias(alias, target)
        logger.info(f"Registered masking alias '{alias}' -> '{target}'")

    def mask(self, value: T) -> T:
        """Mask ``value`` in place with the engine's default policy."""
        return self.mask_with_policy(value, self.default_policy)

    def mask_with_overrides(self, value: T, overrides: Optional[Mapping[str, str]]) -> T:
        """Mask ``value`` in place; ``overrides`` win over top-level field declarations."""
        return self.mask_with_policy(value, self._override_policy(overrides))

    def mask_with_context(self, value: T) -> T:
        """Mask ``value`` in place with the ambient policy (see ``masking.context``)."""
        return self.mask_with_policy(value, current_policy())

    def mask_with_policy(self, value: T, policy: MaskPolicy) -> T:
        """
        Mask ``value`` in place under an explicit policy.

        Returns:
            The same object, for inline use
        """
        if policy.disable_masking:
            logger.debug("Masking disabled by policy, leaving value untouched")
            return value
        if is_leaf(value):
            return value
        self._mask_fields(value, policy)
        return value

    def mask_copy(
        self, value: T, overrides: Optional[Mapping[str, str]] = None
    ) -> T:
        """
        Return a masked copy of a record, leaving the original untouched.

        The record is copied shallowly. Nested records, and the lists, tuples,
        sets and dicts that hold them, are copied one level at a time as the
        masking pass reaches them; every other field value is shared with the
        original. Values that are not records (including None) are returned
        unchanged and no copy is made.
        """
        if not is_record(value):
            logger.debug(
                f"mask_copy expects a record, got {type(value).__name__}; returning it unchanged"
            )
            return value
        duplicate = copy.copy(value)
        policy = self._override_policy(overrides)
        if policy.disable_masking:
            logger.debug("Masking disabled by policy, returning an unmasked copy")
            return duplicate
        self._mask_fields(duplicate, policy, detach=True)
        return duplicate

    def _override_policy(self, overrides: Optional[Mapping[str, str]]) -> MaskPolicy:
        # the engine's disable switch survives per-call overrides
        if self.default_policy.disable_masking:
            return DISABLED_POLICY
        return MaskPolicy(overrides=overrides or {})

    def _mask_fields(self, value: Any, policy: MaskPolicy, detach: bool = False) -> None:
        """
        Walk ``value`` and apply ``policy`` field by field.

        With ``detach`` set, every record or container the walk descends into
        is first replaced in its owner by a shallow copy, so the objects
        reachable from the caller's original are never written to.
        """
        applied = []

        def visit(slot: FieldSlot) -> bool:
            decision = self._resolver.resolve(slot, policy)
            if decision.action is Action.APPLY:
                slot.assign(decision.strategy(slot.value))
                applied.append(slot.name)
            if decision.action is not Action.RECURSE:
                logger.debug(
                    f"{type(slot.owner).__name__}.{slot.name}: "
                    f"{decision.action.value} ({decision.reason.value})"
                )
                return True
            if not detach or is_leaf(slot.value):
                return False

            child = _detached(slot.value)
            if child is _UNCOPYABLE:
                logger.debug(
                    f"Cannot copy {type(slot.value).__name__} held in '{slot.name}', "
                    f"leaving it unmasked"
                )
                return True
            if child is not slot.value:
                slot.assign(child)
            self._traverser.walk(child, visit, slot.depth + 1)
            return True

        self._traverser.walk(value, visit)
        if applied:
            logger.debug(f"Masked {len(applied)} field(s) of {type(value).__name__}: {applied}")

    def validate_declarations(self, record_type: type, strict: Optional[bool] = None) -> list[str]:
        """
        Check a record type's declarations against the catalog.

        Args:
            record_type: Dataclass, pydantic model or ``__mask_tags__`` class
            strict: Raise instead of returning; defaults to the engine setting

        Returns:
            Names of fields whose declared strategy is not registered

        Raises:
            UnknownStrategyError: In strict mode, for the first unknown name
            DeclarationError: If a field carries a malformed declaration
        """
        strict = self.strict_declarations if strict is None else strict
        unknown = []
        for field_name, declaration in declared_fields(record_type).items():
            if declaration.strategy in self.catalog:
                continue
            if strict:
                raise UnknownStrategyError(
                    declaration.strategy,
                    available=self.catalog.names(),
                    field_name=field_name,
                )
            logger.warning(
                f"{record_type.__name__}.{field_name} declares unknown strategy "
                f"'{declaration.strategy}'"
            )
            unknown.append(field_name)
        return unknown


_UNCOPYABLE = object()


def _detached(value: Any) -> Any:
    """
    Shallow copy of a record, or of a container whose items need copying.

    Containers holding only leaves come back as the same object. Returns
    ``_UNCOPYABLE`` when records sit in a container type that cannot be
    rebuilt.
    """
    if is_record(value):
        return copy.copy(value)
    if is_leaf(value) or not isinstance(value, (Mapping, Sequence, Set)):
        return value

    originals = list(value.values()) if isinstance(value, Mapping) else list(value)
    items = [_detached(item) for item in originals]
    if any(item is _UNCOPYABLE for item in items):
        return _UNCOPYABLE
    if all(item is original for item, original in zip(items, originals)):
        return value
    return _rebuilt(value, items)


def _rebuilt(container: Any, items: list) -> Any:
    if isinstance(container, MutableMapping):
        duplicate = copy.copy(container)
        for key, item in zip(list(duplicate.keys()), items):
            duplicate[key] = item
        return duplicate
    if isinstance(container, MutableSequence):
        duplicate = copy.copy(container)
        for index, item in enumerate(items):
            duplicate[index] = item
        return duplicate
    if isinstance(container, tuple):
        make = getattr(type(container), "_make", None)
        return make(items) if make is not None else tuple(items)
    if isinstance(container, (set, frozenset)):
        return type(container)(items)
    return _UNCOPYABLE
