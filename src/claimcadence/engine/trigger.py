"""Shared-secret check for scheduled trigger invocations."""
from __future__ import annotations

import secrets
from typing import Optional

from ..exceptions import UnauthorizedTriggerError


def authorize_trigger(provided: Optional[str], expected: Optional[str]) -> None:
    """
    Raise UnauthorizedTriggerError unless `provided` equals `expected`.

    An unset expected secret rejects every call.
    """
    if not expected or not provided:
        raise UnauthorizedTriggerError(message="unauthorized")
    if not secrets.compare_digest(provided.encode(), expected.encode()):
        raise UnauthorizedTriggerError(message="unauthorized")
