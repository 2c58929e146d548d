"""Ambient mask policy for call sites that cannot pass one explicitly.

Typical use is a web middleware that decides the policy for a request while
the masking call happens several layers below::

    with mask_policy(overrides={"Email": "none"}):
        handle_request()          # eventually calls engine.mask_with_context()

The policy lives in a :class:`contextvars.ContextVar`, so it is isolated per
thread and per asyncio task.
"""

import contextvars
from contextlib import contextmanager
from typing import Generator, Mapping, Optional

from ..core.policies import DEFAULT_POLICY, MaskPolicy

_current_policy: contextvars.ContextVar[MaskPolicy] = contextvars.ContextVar(
    "fieldmask_policy", default=DEFAULT_POLICY
)


def current_policy() -> MaskPolicy:
    """Return the policy active in the current context."""
    return _current_policy.get()


@contextmanager
def use_policy(policy: MaskPolicy) -> Generator[MaskPolicy, None, None]:
    """Make ``policy`` the ambient policy for the duration of the block."""
    token = _current_policy.set(policy)
    try:
        yield policy
    finally:
        _current_policy.reset(token)


@contextmanager
def mask_policy(
    overrides: Optional[Mapping[str, str]] = None, disable_masking: bool = False
) -> Generator[MaskPolicy, None, None]:
    """Build a policy from its parts and make it ambient for the block."""
    with use_policy(MaskPolicy(overrides=overrides or {}, disable_masking=disable_masking)) as policy:
        yield policy


def set_policy(policy: MaskPolicy) -> contextvars.Token:
    """Set the ambient policy without a block; undo with :func:`reset_policy`."""
    return _current_policy.set(policy)


def reset_policy(token: contextvars.Token) -> None:
    _current_policy.reset(token)
