"""
arraysync Exceptions
====================

Error kinds raised by the synchronization layer.

Precondition violations are programming errors in the calling code (wrong
value at a dependent key, wrong type assigned to a derived view). They are
raised immediately, at the call site that broke the contract, and are never
coerced away.
"""

from typing import Any


class InvariantViolation(AssertionError):
    """A precondition of the synchronization layer was broken."""

    pass


class ReentrantMutationError(RuntimeError):
    """An array was mutated while dispatching its own change notifications."""

    pass


def invariant(condition: Any, message: str) -> None:
    """Raise InvariantViolation with ``message`` unless ``condition`` holds."""
    if not condition:
        raise InvariantViolation(message)
