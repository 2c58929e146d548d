"""Load mask policies from YAML files or plain dictionaries."""

import logging
from pathlib import Path
from typing import Any, Optional, Union

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from .catalog import StrategyCatalog
from .exceptions import PolicyError
from .policies import MaskPolicy
from .strategies import NO_MASK

logger = logging.getLogger(__name__)


class PolicyFileSchema(BaseModel):
    """Pydantic model for policy file schema validation."""

    version: Optional[str] = Field("1.0", description="Policy schema version")
    name: Optional[str] = Field(None, description="Policy name")
    description: Optional[str] = Field(None, description="Policy description")
    overrides: dict[str, str] = Field(
        default_factory=dict, description="Field name -> strategy name or 'none'"
    )
    disable_masking: bool = Field(False, description="Turn masking off entirely")

    @field_validator("overrides")
    @classmethod
    def validate_overrides(cls, v: dict[str, str]) -> dict[str, str]:
        """Reject blank field or strategy names."""
        for field_name, strategy in v.items():
            if not field_name.strip():
                raise ValueError("Override field names must not be blank")
            if not strategy.strip():
                raise ValueError(f"Override for '{field_name}' names no strategy")
        return v

    def to_policy(self) -> MaskPolicy:
        return MaskPolicy(overrides=self.overrides, disable_masking=self.disable_masking)


class PolicyLoader:
    """
    Loads MaskPolicy objects from YAML.

    A policy file looks like::

        name: support-dashboard
        overrides:
          Email: none
          Phone: full
        disable_masking: false

    When a catalog is given, override values that are neither ``none`` nor
    registered are reported by :meth:`find_unknown_strategies` and rejected
    by :meth:`load_policy` with ``strict=True``.
    """

    def __init__(self, catalog: Optional[StrategyCatalog] = None) -> None:
        self.catalog = catalog

    def load_policy(
        self, policy_path: Union[str, Path], strict: bool = False
    ) -> MaskPolicy:
        """
        Load a policy from a YAML file.

        Raises:
            PolicyError: If the file is missing, not valid YAML, fails schema
                validation, or (with ``strict``) names unknown strategies
        """
        path = Path(policy_path)
        if not path.exists():
            raise PolicyError(f"Policy file not found: {path}", policy_file=str(path))

        try:
            with path.open(encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise PolicyError(
                f"Invalid YAML in policy file {path}: {e}", policy_file=str(path)
            ) from e

        policy = self._build(data or {}, source=str(path))
        if strict:
            self._check_strategies(policy, source=str(path))
        logger.info(f"Loaded mask policy from {path} ({len(policy.overrides)} overrides)")
        return policy

    def load_policy_from_dict(self, data: dict[str, Any], strict: bool = False) -> MaskPolicy:
        """Build a policy from an already-parsed mapping."""
        policy = self._build(data, source=None)
        if strict:
            self._check_strategies(policy, source=None)
        return policy

    def find_unknown_strategies(self, policy: MaskPolicy) -> dict[str, str]:
        """Return overrides whose strategy is neither ``none`` nor registered."""
        if self.catalog is None:
            return {}
        return {
            field_name: strategy
            for field_name, strategy in policy.overrides.items()
            if strategy != NO_MASK and strategy not in self.catalog
        }

    def _build(self, data: Any, source: Optional[str]) -> MaskPolicy:
        if not isinstance(data, dict):
            raise PolicyError(
                f"Policy must be a mapping, got {type(data).__name__}",
                policy_file=source,
            )
        try:
            schema = PolicyFileSchema(**data)
        except ValidationError as e:
            error = PolicyError(f"Policy validation failed: {e}", policy_file=source)
            error.add_context("errors", e.errors())
            raise error from e
        return schema.to_policy()

    def _check_strategies(self, policy: MaskPolicy, source: Optional[str]) -> None:
        unknown = self.find_unknown_strategies(policy)
        if unknown:
            error = PolicyError(
                f"Policy overrides name unknown strategies: {sorted(set(unknown.values()))}",
                policy_file=source,
            )
            error.add_context("unknown_overrides", unknown)
            error.add_recovery_suggestion(
                "Register the strategies before loading the policy or fix the names"
            )
            raise error
