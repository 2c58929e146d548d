"""Masking module: traversal, override resolution and the mask engine."""

from .context import current_policy, mask_policy, use_policy
from .engine import MaskEngine
from .resolver import Action, Decision, OverrideResolver, Reason
from .traverser import FieldSlot, MaskableRecord, ValueTraverser, is_record, iter_fields

__all__ = [
    "MaskEngine",
    "OverrideResolver",
    "Decision",
    "Action",
    "Reason",
    "ValueTraverser",
    "FieldSlot",
    "MaskableRecord",
    "is_record",
    "iter_fields",
    "current_policy",
    "mask_policy",
    "use_policy",
]
