"""Process-wide default engine and module-level masking functions.

Applications that do not want to pass an engine around register their
strategies once at startup and call the module functions::

    import fieldmask

    fieldmask.register("ssn", lambda s: "***-**-" + s[-4:])
    fieldmask.mask(customer)

All registrations must happen before masking calls that may run
concurrently; the catalog has no internal locking.
"""

import logging
from typing import Any, Mapping, Optional, TypeVar

from fieldmask.core.config import get_config
from fieldmask.core.strategies import Transform
from fieldmask.masking.engine import MaskEngine

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Global engine instance, created lazily from the global configuration
_default_engine: MaskEngine | None = None


def get_default_engine() -> MaskEngine:
    """Return the process-wide engine, creating it from configuration if needed."""
    global _default_engine
    if _default_engine is None:
        _default_engine = MaskEngine.from_config(get_config())
        logger.debug("Created default MaskEngine from configuration")
    return _default_engine


def set_default_engine(engine: MaskEngine) -> None:
    """Replace the process-wide engine."""
    global _default_engine
    _default_engine = engine


def reset_default_engine() -> None:
    """Drop the process-wide engine; the next call rebuilds it.

    This is useful for testing, where registrations must not leak between
    tests.
    """
    global _default_engine
    _default_engine = None


def register(name: str, transform: Transform) -> None:
    """Install or overwrite a strategy in the default engine's catalog."""
    get_default_engine().register(name, transform)


def register_alias(alias: str, target: str) -> None:
    """Bind ``alias`` to the current transform of ``target`` in the default catalog."""
    get_default_engine().register_alias(alias, target)


def mask(value: T) -> T:
    """Mask ``value`` in place with the default engine."""
    return get_default_engine().mask(value)


def mask_with_overrides(value: T, overrides: Optional[Mapping[str, str]]) -> T:
    """Mask ``value`` in place with per-field overrides."""
    return get_default_engine().mask_with_overrides(value, overrides)


def mask_copy(value: T, overrides: Optional[Mapping[str, str]] = None) -> T:
    """Return a masked copy of a record; non-records are returned unchanged."""
    return get_default_engine().mask_copy(value, overrides)


def mask_with_context(value: T) -> T:
    """Mask ``value`` in place with the ambient policy."""
    return get_default_engine().mask_with_context(value)


def registered_strategies() -> list[str]:
    """Names registered in the default engine's catalog."""
    return get_default_engine().catalog.names()


def is_registered(name: Any) -> bool:
    """True if ``name`` is registered in the default catalog."""
    return name in get_default_engine().catalog
