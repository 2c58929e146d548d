"""fieldmask exception hierarchy.

Masking itself never raises: unknown strategies, misplaced or malformed
declarations and unsupported inputs all degrade to no-ops. The exceptions
below are raised at configuration time (registration, declaration
validation, config and policy loading) and for the single fatal traversal
condition.
"""

from typing import Any, Dict, List, Optional


class FieldMaskError(Exception):
    """Base exception for all fieldmask errors.

    Subclasses set ``code`` and ``origin``; both can be overridden per
    instance through ``error_code`` and ``component``.

    Attributes:
        message: What went wrong, for humans
        error_code: Stable identifier for programmatic handling
        context: Structured details (file names, strategy and field names)
        recovery_suggestions: Hints shown to whoever has to fix the problem
        component: Part of the library that raised the error
    """

    code = "FIELDMASK_ERROR"
    origin = "core"

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        recovery_suggestions: Optional[List[str]] = None,
        component: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code if error_code is not None else self.code
        self.component = component if component is not None else self.origin
        self.context: Dict[str, Any] = dict(context) if context else {}
        self.recovery_suggestions: List[str] = list(recovery_suggestions or ())

    def add_context(self, key: str, value: Any) -> None:
        self.context[key] = value

    def _note(self, **details: Any) -> None:
        """Record the details that were actually given."""
        for key, value in details.items():
            if value:
                self.context[key] = value

    def add_recovery_suggestion(self, suggestion: str) -> None:
        """Append ``suggestion`` unless it is already listed."""
        if suggestion not in self.recovery_suggestions:
            self.recovery_suggestions.append(suggestion)

    def to_dict(self) -> Dict[str, Any]:
        """Serializable form for structured logs and CLI reports."""
        return {
            "error_type": type(self).__name__,
            "message": self.message,
            "error_code": self.error_code,
            "component": self.component,
            "context": self.context,
            "recovery_suggestions": self.recovery_suggestions,
        }


class StrategyError(FieldMaskError):
    """Raised for strategy catalog misuse."""

    code = "STRATEGY_ERROR"
    origin = "catalog"

    def __init__(self, message: str, strategy_name: Optional[str] = None, **kwargs: Any):
        super().__init__(message, **kwargs)
        self.strategy_name = strategy_name
        self._note(strategy_name=strategy_name)


class UnknownStrategyError(StrategyError):
    """Raised by strict lookups when a strategy name is not registered."""

    code = "UNKNOWN_STRATEGY"

    def __init__(
        self,
        strategy_name: str,
        available: Optional[List[str]] = None,
        field_name: Optional[str] = None,
        **kwargs: Any,
    ):
        message = f"Unknown masking strategy '{strategy_name}'"
        if field_name:
            message += f" (declared on field '{field_name}')"
        super().__init__(message, strategy_name=strategy_name, **kwargs)
        self._note(field_name=field_name)
        if available is not None:
            self.add_context("available", sorted(available))
            self.add_recovery_suggestion(
                "Register the strategy before masking or use one of the available names"
            )


class StrategyRegistrationError(StrategyError):
    """Raised when a strategy cannot be registered."""

    code = "STRATEGY_REGISTRATION_FAILED"


class DeclarationError(FieldMaskError):
    """Raised when a field declaration object is malformed."""

    code = "INVALID_DECLARATION"
    origin = "declarations"

    def __init__(self, message: str, field_name: Optional[str] = None, **kwargs: Any):
        super().__init__(message, **kwargs)
        self._note(field_name=field_name)


class PolicyError(FieldMaskError):
    """Raised when a mask policy cannot be loaded or validated."""

    code = "POLICY_ERROR"
    origin = "policy"

    def __init__(self, message: str, policy_file: Optional[str] = None, **kwargs: Any):
        super().__init__(message, **kwargs)
        self._note(policy_file=policy_file)


class ConfigurationError(FieldMaskError):
    """Raised when configuration is invalid or incomplete."""

    code = "CONFIGURATION_ERROR"
    origin = "config"

    def __init__(
        self,
        message: str,
        config_file: Optional[str] = None,
        config_section: Optional[str] = None,
        **kwargs: Any,
    ):
        super().__init__(message, **kwargs)
        self._note(config_file=config_file, config_section=config_section)


class TraversalError(FieldMaskError):
    """Raised when a value's shape cannot be enumerated at all.

    This is outside the masking contract and is not meant to be caught by
    callers; it signals a broken ``__mask_fields__`` implementation.
    """

    code = "TRAVERSAL_ERROR"
    origin = "traverser"

    def __init__(self, message: str, value_type: Optional[str] = None, **kwargs: Any):
        super().__init__(message, **kwargs)
        self._note(value_type=value_type)
