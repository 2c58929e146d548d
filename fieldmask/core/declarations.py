"""Per-field masking declarations.

A declaration names the strategy applied to a string field when no override
says otherwise. It can be attached structurally::

    @dataclass
    class Customer:
        name: str = masked("partial")
        email: Annotated[str, FieldMask("email")] = ""

or with the tag mini-language, where only the ``strategy:<name>`` segment
is load-bearing and any other segment is kept but ignored::

    card: str = field(default="", metadata={"mask": "group:PCI;strategy:creditcard"})
"""

import dataclasses
from dataclasses import dataclass
from typing import Any, Optional, Union

from .exceptions import DeclarationError

MASK_METADATA_KEY = "mask"

_SEGMENT_SEPARATOR = ";"
_STRATEGY_PREFIX = "strategy:"
_GROUP_PREFIX = "group:"


@dataclass(frozen=True)
class FieldMask:
    """
    Structured field declaration.

    Attributes:
        strategy: Name of the strategy to apply (may be empty when a tag
            carries no ``strategy:`` segment)
        group: Informational group marker from a ``group:<name>`` segment
        extras: Any other tag segments, preserved verbatim
    """

    strategy: str
    group: Optional[str] = None
    extras: tuple = ()

    def __bool__(self) -> bool:
        return bool(self.strategy)

    def to_tag(self) -> str:
        """Render the declaration back to the tag mini-language."""
        segments = []
        if self.group:
            segments.append(f"{_GROUP_PREFIX}{self.group}")
        if self.strategy:
            segments.append(f"{_STRATEGY_PREFIX}{self.strategy}")
        segments.extend(self.extras)
        return _SEGMENT_SEPARATOR.join(segments)


def parse_tag(tag: str) -> FieldMask:
    """
    Parse a ``;``-separated tag into a FieldMask.

    Examples:
        >>> parse_tag("group:PII;strategy:partial")
        FieldMask(strategy='partial', group='PII', extras=())
        >>> parse_tag("strategy:full; audit").extras
        ('audit',)
    """
    strategy = ""
    group = None
    extras = []
    for raw in tag.split(_SEGMENT_SEPARATOR):
        segment = raw.strip()
        if not segment:
            continue
        if segment.startswith(_STRATEGY_PREFIX):
            # last strategy segment wins
            strategy = segment[len(_STRATEGY_PREFIX):].strip()
        elif segment.startswith(_GROUP_PREFIX):
            group = segment[len(_GROUP_PREFIX):].strip() or None
        else:
            extras.append(segment)
    return FieldMask(strategy=strategy, group=group, extras=tuple(extras))


def coerce_declaration(
    declaration: Union[FieldMask, str, None], field_name: Optional[str] = None
) -> Optional[FieldMask]:
    """
    Normalize a declaration found on a field.

    Returns:
        A FieldMask with a strategy, or None when nothing is declared

    Raises:
        DeclarationError: If the declaration is neither a FieldMask nor a tag
    """
    if declaration is None:
        return None
    if isinstance(declaration, FieldMask):
        return declaration or None
    if isinstance(declaration, str):
        return parse_tag(declaration) or None
    raise DeclarationError(
        f"Mask declaration must be a FieldMask or tag string, "
        f"got {type(declaration).__name__}",
        field_name=field_name,
    )


def find_declaration(metadata: Any, field_name: Optional[str] = None) -> Optional[FieldMask]:
    """
    Extract a declaration from field metadata.

    ``metadata`` may be a mapping (dataclass metadata, pydantic
    ``json_schema_extra``) holding the ``"mask"`` key, or an iterable of
    annotation objects (``Annotated`` extras, pydantic ``FieldInfo.metadata``)
    where the first FieldMask is used.
    """
    if not metadata:
        return None
    if hasattr(metadata, "get"):
        return coerce_declaration(metadata.get(MASK_METADATA_KEY), field_name)
    for item in metadata:
        if isinstance(item, FieldMask):
            return coerce_declaration(item, field_name)
    return None


def masked(strategy: str, group: Optional[str] = None, **field_kwargs: Any) -> Any:
    """
    Declare a dataclass field masked with ``strategy``.

    Keyword arguments are passed to :func:`dataclasses.field`; the default
    is the empty string when neither ``default`` nor ``default_factory`` is
    given.

    Examples:
        >>> @dataclasses.dataclass
        ... class Login:
        ...     user: str
        ...     password: str = masked("password")
    """
    metadata = dict(field_kwargs.pop("metadata", None) or {})
    metadata[MASK_METADATA_KEY] = FieldMask(strategy=strategy, group=group)
    if "default" not in field_kwargs and "default_factory" not in field_kwargs:
        field_kwargs["default"] = ""
    return dataclasses.field(metadata=metadata, **field_kwargs)
