"""Generic, policy-free walk over records, sequences, maps and scalars.

A value is a *record* when its fields can be enumerated without unrestricted
reflection:

- it implements :class:`MaskableRecord` (``__mask_fields__``),
- it is a dataclass instance,
- it is a pydantic model instance,
- its class declares a ``__mask_tags__`` mapping (field name -> tag).

Anything else that is not a container is a leaf and is left alone.
"""

import dataclasses
import logging
from collections.abc import Mapping, Sequence, Set
from dataclasses import dataclass
from functools import lru_cache
from typing import (
    Annotated,
    Any,
    Callable,
    Iterable,
    Iterator,
    Optional,
    Protocol,
    get_args,
    get_origin,
    get_type_hints,
    runtime_checkable,
)

from pydantic import BaseModel

from ..core.declarations import FieldMask, coerce_declaration, find_declaration
from ..core.exceptions import DeclarationError, TraversalError

logger = logging.getLogger(__name__)

_LEAF_SEQUENCES = (str, bytes, bytearray, memoryview)

FieldVisitor = Callable[["FieldSlot"], bool]


@runtime_checkable
class MaskableRecord(Protocol):
    """
    Protocol for objects that enumerate their own maskable fields.

    ``__mask_fields__`` returns ``(name, declaration)`` pairs in declaration
    order, where the declaration is a FieldMask, a tag string or None.
    Values are read and written with ``getattr``/``setattr``.
    """

    def __mask_fields__(self) -> Iterable[tuple]: ...


@dataclass(frozen=True)
class FieldSlot:
    """
    A writable field of a record, as seen during traversal.

    ``depth`` is 0 for fields of the value handed to the walk (or of records
    sitting directly in a top-level list or dict) and grows by one each time
    the walk descends through a record field.
    """

    owner: Any
    name: str
    value: Any
    declaration: Optional[FieldMask] = None
    depth: int = 0

    @property
    def is_string(self) -> bool:
        return isinstance(self.value, str)

    def assign(self, new_value: Any) -> None:
        """Write ``new_value`` back to the owning record."""
        setattr(self.owner, self.name, new_value)


def is_record(value: Any) -> bool:
    """True if ``value`` is an instance whose fields the traverser can enumerate."""
    if value is None or isinstance(value, type):
        return False
    if isinstance(value, MaskableRecord):
        return True
    if dataclasses.is_dataclass(value) or isinstance(value, BaseModel):
        return True
    return isinstance(getattr(type(value), "__mask_tags__", None), Mapping)


def iter_fields(value: Any, depth: int = 0) -> Iterator[FieldSlot]:
    """
    Yield the writable fields of a record in declaration order.

    Read-only fields (private names, frozen dataclasses and models, frozen
    pydantic fields, properties without a setter) are skipped silently. A
    malformed declaration is logged at debug and the field is yielded as
    undeclared; ``declared_fields`` reports it instead.

    Raises:
        TraversalError: If ``__mask_fields__`` returns malformed entries
    """
    if isinstance(value, MaskableRecord):
        yield from _iter_protocol_fields(value, depth)
    elif dataclasses.is_dataclass(value) and not isinstance(value, type):
        yield from _iter_dataclass_fields(value, depth)
    elif isinstance(value, BaseModel):
        yield from _iter_model_fields(value, depth)
    elif is_record(value):
        yield from _iter_tagged_attributes(value, depth)


class ValueTraverser:
    """
    Depth-first walker over a value graph.

    The visitor is called for every writable record field. It returns True
    when it has dealt with the field; otherwise the traverser recurses into
    the field's value. Sequence elements and map values are walked directly
    (they are not fields, so the visitor never sees them).

    Only record fields add to a slot's depth; list items and map values
    keep the depth of the container holding them.

    The graph must be acyclic; cycles recurse until the interpreter's
    recursion limit is hit.
    """

    def walk(self, value: Any, visit: FieldVisitor, depth: int = 0) -> None:
        if is_leaf(value):
            return
        if is_record(value):
            for slot in iter_fields(value, depth):
                if not visit(slot):
                    self.walk(slot.value, visit, depth + 1)
        elif isinstance(value, Mapping):
            for item in value.values():
                self.walk(item, visit, depth)
        elif isinstance(value, (Sequence, Set)):
            for item in value:
                self.walk(item, visit, depth)


def is_leaf(value: Any) -> bool:
    """True for values the walk never enters (None, text and bytes)."""
    return value is None or isinstance(value, _LEAF_SEQUENCES)


def _is_writable(owner: Any, name: str) -> bool:
    if name.startswith("_"):
        return False
    attr = getattr(type(owner), name, None)
    if isinstance(attr, property) and attr.fset is None:
        return False
    return True


def _class_tags(cls: type) -> Mapping:
    tags = getattr(cls, "__mask_tags__", None)
    return tags if isinstance(tags, Mapping) else {}


@lru_cache(maxsize=512)
def _annotated_declarations(cls: type) -> dict:
    """Declarations carried in ``Annotated[...]`` type hints, keyed by field name."""
    try:
        hints = get_type_hints(cls, include_extras=True)
    except (NameError, TypeError) as e:
        logger.debug(f"Cannot resolve type hints of {cls.__qualname__}: {e}")
        return {}

    declarations = {}
    for name, hint in hints.items():
        if get_origin(hint) is Annotated:
            declaration = find_declaration(get_args(hint)[1:], field_name=name)
            if declaration:
                declarations[name] = declaration
    return declarations


def _dataclass_declaration(f: dataclasses.Field, annotated: dict, tags: Mapping) -> Optional[FieldMask]:
    return (
        find_declaration(f.metadata, field_name=f.name)
        or annotated.get(f.name)
        or coerce_declaration(tags.get(f.name), field_name=f.name)
    )


def _model_declaration(name: str, info: Any, tags: Mapping) -> Optional[FieldMask]:
    extra = info.json_schema_extra if isinstance(info.json_schema_extra, dict) else None
    return (
        find_declaration(info.metadata, field_name=name)
        or find_declaration(extra, field_name=name)
        or coerce_declaration(tags.get(name), field_name=name)
    )


def _lenient(
    owner: Any, name: str, lookup: Callable[..., Optional[FieldMask]], *args: Any
) -> Optional[FieldMask]:
    """Run a declaration lookup, treating a malformed declaration as none."""
    try:
        return lookup(*args)
    except DeclarationError as e:
        logger.debug(
            f"Ignoring malformed declaration on {type(owner).__name__}.{name}: {e.message}"
        )
        return None


def _iter_protocol_fields(value: MaskableRecord, depth: int) -> Iterator[FieldSlot]:
    entries = value.__mask_fields__()
    try:
        pairs = list(entries)
    except TypeError as e:
        raise TraversalError(
            f"__mask_fields__ of {type(value).__name__} did not return an iterable",
            value_type=type(value).__name__,
        ) from e

    for entry in pairs:
        if not (isinstance(entry, tuple) and len(entry) == 2 and isinstance(entry[0], str)):
            raise TraversalError(
                f"__mask_fields__ of {type(value).__name__} must yield "
                f"(name, declaration) pairs, got {entry!r}",
                value_type=type(value).__name__,
            )
        name, declaration = entry
        if not _is_writable(value, name):
            continue
        yield FieldSlot(
            owner=value,
            name=name,
            value=getattr(value, name),
            declaration=_lenient(value, name, coerce_declaration, declaration, name),
            depth=depth,
        )


def _iter_dataclass_fields(value: Any, depth: int) -> Iterator[FieldSlot]:
    cls = type(value)
    if cls.__dataclass_params__.frozen:
        return
    annotated = _annotated_declarations(cls)
    tags = _class_tags(cls)
    for f in dataclasses.fields(value):
        if not _is_writable(value, f.name):
            continue
        yield FieldSlot(
            owner=value,
            name=f.name,
            value=getattr(value, f.name),
            declaration=_lenient(value, f.name, _dataclass_declaration, f, annotated, tags),
            depth=depth,
        )


def _iter_model_fields(value: BaseModel, depth: int) -> Iterator[FieldSlot]:
    cls = type(value)
    if cls.model_config.get("frozen"):
        return
    tags = _class_tags(cls)
    for name, info in cls.model_fields.items():
        if info.frozen or not _is_writable(value, name):
            continue
        yield FieldSlot(
            owner=value,
            name=name,
            value=getattr(value, name),
            declaration=_lenient(value, name, _model_declaration, name, info, tags),
            depth=depth,
        )


def _iter_tagged_attributes(value: Any, depth: int) -> Iterator[FieldSlot]:
    tags = _class_tags(type(value))
    attributes = getattr(value, "__dict__", None)
    if attributes is None:
        raise TraversalError(
            f"{type(value).__name__} declares __mask_tags__ but has no instance attributes",
            value_type=type(value).__name__,
        )
    for name, attr_value in list(attributes.items()):
        if not _is_writable(value, name):
            continue
        yield FieldSlot(
            owner=value,
            name=name,
            value=attr_value,
            declaration=_lenient(value, name, coerce_declaration, tags.get(name), name),
            depth=depth,
        )


def declared_fields(cls: type) -> dict:
    """
    Declarations a record type carries, keyed by field name.

    Works on the type, so it can run at configuration time before any
    instance exists. ``__mask_fields__`` records are instance-level and
    report nothing here.

    Raises:
        DeclarationError: If a field carries a malformed declaration
    """
    tags = _class_tags(cls)
    declarations = {}
    if dataclasses.is_dataclass(cls):
        annotated = _annotated_declarations(cls)
        for f in dataclasses.fields(cls):
            declaration = _dataclass_declaration(f, annotated, tags)
            if declaration:
                declarations[f.name] = declaration
    elif isinstance(cls, type) and issubclass(cls, BaseModel):
        for name, info in cls.model_fields.items():
            declaration = _model_declaration(name, info, tags)
            if declaration:
                declarations[name] = declaration
    else:
        for name, tag in tags.items():
            declaration = coerce_declaration(tag, field_name=name)
            if declaration:
                declarations[name] = declaration
    return declarations
