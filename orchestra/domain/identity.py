from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class CurrentUser:
    """Authenticated caller resolved by the transport layer.

    The core trusts this value and never re-validates it.
    """

    id: int
    email: str
