"""Shared fixtures for fieldmask tests."""

from collections.abc import Generator

import pytest

from fieldmask.core.catalog import StrategyCatalog
from fieldmask.core.config import reset_config
from fieldmask.masking.engine import MaskEngine
from fieldmask.registration import reset_default_engine
from tests.utils.records import Customer, make_customer


@pytest.fixture(autouse=True)
def isolated_globals(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Keep the process-wide engine and configuration from leaking between tests."""
    for key in (
        "FIELDMASK_LOG_LEVEL",
        "FIELDMASK_LOG_FORMAT",
        "FIELDMASK_DISABLE_MASKING",
        "FIELDMASK_STRICT_DECLARATIONS",
    ):
        monkeypatch.delenv(key, raising=False)
    reset_config()
    reset_default_engine()
    yield
    reset_config()
    reset_default_engine()


@pytest.fixture
def catalog() -> StrategyCatalog:
    """A fresh catalog with the built-in strategies."""
    return StrategyCatalog.with_builtins()


@pytest.fixture
def engine(catalog: StrategyCatalog) -> MaskEngine:
    """An engine owning its own catalog."""
    return MaskEngine(catalog=catalog)


@pytest.fixture
def customer() -> Customer:
    """A customer with nested addresses, lists and maps."""
    return make_customer()
