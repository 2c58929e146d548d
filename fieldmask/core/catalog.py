"""Catalog of named masking strategies."""

import logging
from typing import Dict, Iterator, Mapping, Optional

from .exceptions import StrategyRegistrationError, UnknownStrategyError
from .strategies import BUILTIN_TRANSFORMS, GROUP_ALIASES, Strategy, Transform

logger = logging.getLogger(__name__)


class StrategyCatalog:
    """
    Registry mapping strategy names to transforms.

    Registration is append/overwrite only: re-registering a name replaces its
    transform, and names are never removed. The catalog has no internal
    locking, so all registrations must happen before masking calls that may
    run concurrently.

    Examples:
        >>> catalog = StrategyCatalog.with_builtins()
        >>> catalog.resolve("partial")("John Doe")
        'Jo****oe'
        >>> catalog.register("upper", str.upper)
        >>> catalog.resolve("upper")("abc")
        'ABC'
        >>> catalog.resolve("missing") is None
        True
    """

    def __init__(self, strategies: Optional[Mapping[str, Transform]] = None) -> None:
        self._strategies: Dict[str, Strategy] = {}
        for name, transform in (strategies or {}).items():
            self.register(name, transform)

    @classmethod
    def with_builtins(
        cls, aliases: Optional[Mapping[str, str]] = None
    ) -> "StrategyCatalog":
        """
        Build a catalog holding the built-in strategies and group aliases.

        Args:
            aliases: Extra alias -> target bindings applied after the
                built-in group aliases

        Returns:
            A new, independent catalog
        """
        catalog = cls(BUILTIN_TRANSFORMS)
        for alias, target in GROUP_ALIASES.items():
            catalog.register_alias(alias, target)
        for alias, target in (aliases or {}).items():
            catalog.register_alias(alias, target)
        return catalog

    def register(self, name: str, transform: Transform) -> None:
        """
        Install or overwrite the strategy registered under ``name``.

        Raises:
            StrategyRegistrationError: If ``transform`` is not callable
        """
        if not callable(transform):
            raise StrategyRegistrationError(
                f"Transform for strategy '{name}' must be callable, "
                f"got {type(transform).__name__}",
                strategy_name=name,
            )
        if name in self._strategies:
            logger.debug(f"Overwriting masking strategy '{name}'")
        self._strategies[name] = Strategy(name=name, transform=transform)

    def register_alias(self, alias: str, target: str) -> None:
        """
        Bind ``alias`` to the current transform of ``target``.

        The binding is by value: re-registering ``target`` afterwards does not
        change what ``alias`` does.

        Raises:
            UnknownStrategyError: If ``target`` is not registered
        """
        strategy = self.get(target)
        self._strategies[alias] = strategy.renamed(alias)

    def resolve(self, name: str) -> Optional[Strategy]:
        """Return the strategy registered under ``name`` or None."""
        return self._strategies.get(name)

    def get(self, name: str) -> Strategy:
        """
        Return the strategy registered under ``name``.

        Raises:
            UnknownStrategyError: If the name is not registered
        """
        strategy = self._strategies.get(name)
        if strategy is None:
            raise UnknownStrategyError(name, available=self.names())
        return strategy

    def names(self) -> list[str]:
        """Registered names in registration order."""
        return list(self._strategies)

    def copy(self) -> "StrategyCatalog":
        """Return an independent catalog with the same registrations."""
        clone = type(self)()
        clone._strategies = dict(self._strategies)
        return clone

    def __contains__(self, name: object) -> bool:
        return name in self._strategies

    def __len__(self) -> int:
        return len(self._strategies)

    def __iter__(self) -> Iterator[str]:
        return iter(self._strategies)

    def __repr__(self) -> str:
        return f"StrategyCatalog(strategies={len(self._strategies)})"
