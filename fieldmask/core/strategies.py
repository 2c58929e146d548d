"""Strategy system: named string transforms used to redact field values."""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict

MASK_CHAR = "*"

Transform = Callable[[str], str]


class BuiltinStrategy(str, Enum):
    """Names of the strategies installed in every built-in catalog."""

    FULL = "full"
    PASSWORD = "password"
    TOKEN = "token"
    PARTIAL = "partial"
    EMAIL = "email"
    PHONE = "phone"
    CREDITCARD = "creditcard"
    DOB = "dob"
    NONE = "none"


class StrategyGroup(str, Enum):
    """Compliance group aliases bound to a built-in strategy."""

    PII = "PII"
    PHI = "PHI"
    PCI = "PCI"
    CREDENTIALS = "CREDENTIALS"
    FINANCIAL = "FINANCIAL"
    GDPR = "GDPR"


@dataclass(frozen=True)
class Strategy:
    """
    A named masking strategy.

    Attributes:
        name: Name the strategy is registered under
        transform: Pure ``str -> str`` function producing the masked value

    Examples:
        >>> shout = Strategy("shout", str.upper)
        >>> shout("secret")
        'SECRET'
    """

    name: str
    transform: Transform

    def __post_init__(self) -> None:
        if not callable(self.transform):
            raise TypeError(f"Transform for strategy '{self.name}' must be callable")

    def __call__(self, value: str) -> str:
        return self.transform(value)

    def renamed(self, name: str) -> "Strategy":
        """Return a strategy with the same transform under another name."""
        return Strategy(name=name, transform=self.transform)


def mask_full(value: str) -> str:
    """Replace every character with the mask character."""
    return MASK_CHAR * len(value)


def mask_partial(value: str) -> str:
    """Keep the first two and last two characters of values longer than 4."""
    n = len(value)
    if n > 4:
        return value[:2] + MASK_CHAR * (n - 4) + value[-2:]
    return MASK_CHAR * n


def mask_email(value: str) -> str:
    """Keep the first local-part character and the whole domain."""
    parts = value.split("@")
    if len(parts) != 2:
        return MASK_CHAR * len(value)
    local, domain = parts
    return local[:1] + MASK_CHAR * max(len(local) - 1, 0) + "@" + domain


def mask_last_four(value: str) -> str:
    """Keep the last four characters of values longer than 4."""
    n = len(value)
    if n > 4:
        return MASK_CHAR * (n - 4) + value[-4:]
    return MASK_CHAR * n


def mask_dob(value: str) -> str:
    """Keep only the day of an ISO ``YYYY-MM-DD`` date."""
    if len(value) == 10:
        return "****-**-" + value[-2:]
    return MASK_CHAR * len(value)


def keep(value: str) -> str:
    """Identity transform."""
    return value


BUILTIN_TRANSFORMS: Dict[str, Transform] = {
    BuiltinStrategy.FULL.value: mask_full,
    BuiltinStrategy.PASSWORD.value: mask_full,
    BuiltinStrategy.TOKEN.value: mask_full,
    BuiltinStrategy.PARTIAL.value: mask_partial,
    BuiltinStrategy.EMAIL.value: mask_email,
    BuiltinStrategy.PHONE.value: mask_last_four,
    BuiltinStrategy.CREDITCARD.value: mask_last_four,
    BuiltinStrategy.DOB.value: mask_dob,
    BuiltinStrategy.NONE.value: keep,
}

# Applied in order after the built-ins, so each alias captures the built-in
# transform as it was at catalog construction.
GROUP_ALIASES: Dict[str, str] = {
    StrategyGroup.PII.value: BuiltinStrategy.PARTIAL.value,
    StrategyGroup.PHI.value: BuiltinStrategy.DOB.value,
    StrategyGroup.PCI.value: BuiltinStrategy.CREDITCARD.value,
    StrategyGroup.CREDENTIALS.value: BuiltinStrategy.FULL.value,
    StrategyGroup.FINANCIAL.value: BuiltinStrategy.PARTIAL.value,
    StrategyGroup.GDPR.value: BuiltinStrategy.FULL.value,
}

# Override value meaning "leave this field as it is".
NO_MASK = BuiltinStrategy.NONE.value
