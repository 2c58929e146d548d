"""Core types for fieldmask: strategies, catalog, declarations and policies."""

from .catalog import StrategyCatalog
from .declarations import MASK_METADATA_KEY, FieldMask, masked, parse_tag
from .exceptions import (
    ConfigurationError,
    DeclarationError,
    FieldMaskError,
    PolicyError,
    StrategyError,
    StrategyRegistrationError,
    TraversalError,
    UnknownStrategyError,
)
from .policies import DEFAULT_POLICY, DISABLED_POLICY, MaskPolicy
from .strategies import (
    BUILTIN_TRANSFORMS,
    GROUP_ALIASES,
    NO_MASK,
    BuiltinStrategy,
    Strategy,
    StrategyGroup,
)

__all__ = [
    # Strategies
    "Strategy",
    "BuiltinStrategy",
    "StrategyGroup",
    "BUILTIN_TRANSFORMS",
    "GROUP_ALIASES",
    "NO_MASK",
    "StrategyCatalog",
    # Declarations
    "FieldMask",
    "MASK_METADATA_KEY",
    "masked",
    "parse_tag",
    # Policies
    "MaskPolicy",
    "DEFAULT_POLICY",
    "DISABLED_POLICY",
    # Errors
    "FieldMaskError",
    "StrategyError",
    "UnknownStrategyError",
    "StrategyRegistrationError",
    "DeclarationError",
    "PolicyError",
    "ConfigurationError",
    "TraversalError",
]
