"""Mask records on their way into log output.

Both hooks hand masked *copies* to the log pipeline, so the objects the
application keeps using are never modified.

stdlib logging::

    handler.addFilter(MaskingLogFilter())
    logger.info("created %s", customer)      # customer is logged masked

structlog::

    structlog.configure(processors=[MaskingProcessor(), ..., JSONRenderer()])
"""

import logging
from typing import Any, Callable, Optional

from ..masking.engine import MaskEngine
from ..masking.traverser import is_record

EngineFactory = Callable[[], MaskEngine]


def _default_engine() -> MaskEngine:
    from ..registration import get_default_engine

    return get_default_engine()


class _MaskingHook:
    def __init__(self, engine: Optional[MaskEngine] = None) -> None:
        self._engine = engine

    @property
    def engine(self) -> MaskEngine:
        # resolved lazily so late registrations on the default engine are seen
        return self._engine if self._engine is not None else _default_engine()

    def _masked(self, value: Any) -> Any:
        if is_record(value):
            return self.engine.mask_copy(value)
        if isinstance(value, (list, tuple)) and any(is_record(item) for item in value):
            return type(value)(self._masked(item) for item in value)
        if isinstance(value, dict) and any(is_record(item) for item in value.values()):
            return {key: self._masked(item) for key, item in value.items()}
        return value


class MaskingLogFilter(_MaskingHook, logging.Filter):
    """logging.Filter that replaces record arguments with masked copies."""

    def __init__(self, engine: Optional[MaskEngine] = None, name: str = "") -> None:
        _MaskingHook.__init__(self, engine)
        logging.Filter.__init__(self, name)

    def filter(self, record: logging.LogRecord) -> bool:
        if not super().filter(record):
            return False
        if isinstance(record.args, dict):
            record.args = {key: self._masked(arg) for key, arg in record.args.items()}
        elif isinstance(record.args, tuple):
            record.args = tuple(self._masked(arg) for arg in record.args)
        if is_record(record.msg):
            record.msg = self._masked(record.msg)
        return True


class MaskingProcessor(_MaskingHook):
    """structlog processor that masks record values in the event dict."""

    def __call__(
        self, _logger: Any, _method_name: str, event_dict: dict[str, Any]
    ) -> dict[str, Any]:
        for key, value in list(event_dict.items()):
            event_dict[key] = self._masked(value)
        return event_dict
