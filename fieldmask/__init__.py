"""fieldmask: declarative masking of sensitive string fields.

fieldmask walks nested records (dataclasses, pydantic models and objects
that describe their own fields), sequences and maps, and replaces declared
string fields with redacted values before they are logged, serialized or
returned to a caller. Masking is always declared, per field or per call,
and never inferred from content.
"""

__version__ = "0.1.0"
__author__ = "fieldmask Team"
__email__ = "contact@example.com"

# Core API exports
from .core import (
    DEFAULT_POLICY,
    DISABLED_POLICY,
    NO_MASK,
    BuiltinStrategy,
    ConfigurationError,
    DeclarationError,
    FieldMask,
    FieldMaskError,
    MaskPolicy,
    PolicyError,
    Strategy,
    StrategyCatalog,
    StrategyError,
    StrategyGroup,
    StrategyRegistrationError,
    TraversalError,
    UnknownStrategyError,
    masked,
    parse_tag,
)
from .core.config import MaskingConfig, get_config, load_config
from .core.policy_loader import PolicyLoader

# Masking system
from .masking import (
    MaskableRecord,
    MaskEngine,
    current_policy,
    mask_policy,
    use_policy,
)

# Process-wide convenience API
from .registration import (
    get_default_engine,
    mask,
    mask_copy,
    mask_with_context,
    mask_with_overrides,
    register,
    register_alias,
    reset_default_engine,
    set_default_engine,
)

__all__ = [
    "__version__",
    "__author__",
    "__email__",
    # Process-wide API
    "register",
    "register_alias",
    "mask",
    "mask_with_overrides",
    "mask_copy",
    "mask_with_context",
    "get_default_engine",
    "set_default_engine",
    "reset_default_engine",
    # Engine and context
    "MaskEngine",
    "MaskableRecord",
    "mask_policy",
    "use_policy",
    "current_policy",
    # Strategy system
    "Strategy",
    "StrategyCatalog",
    "BuiltinStrategy",
    "StrategyGroup",
    "NO_MASK",
    # Declarations
    "FieldMask",
    "masked",
    "parse_tag",
    # Policy system
    "MaskPolicy",
    "DEFAULT_POLICY",
    "DISABLED_POLICY",
    "PolicyLoader",
    # Configuration
    "MaskingConfig",
    "get_config",
    "load_config",
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
