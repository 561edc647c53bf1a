"""Tokens that let a newer recommendation query supersede an older one."""

from __future__ import annotations

import itertools
from dataclasses import dataclass
from typing import Dict


@dataclass(frozen=True)
class RequestToken:
    scope: str
    sequence: int


class QueryTracker:
    """Issues increasing tokens per scope and remembers the newest one.

    A result is only worth delivering while its token is still the latest for
    its scope; anything older was superseded by a query the user started
    afterwards.
    """

    def __init__(self) -> None:
        self._counter = itertools.count(1)
        self._latest: Dict[str, int] = {}

    def issue(self, scope: str) -> RequestToken:
        token = RequestToken(scope=scope, sequence=next(self._counter))
        self._latest[scope] = token.sequence
        return token

    def is_current(self, token: RequestToken) -> bool:
        return self._latest.get(token.scope) == token.sequence


__all__ = ["QueryTracker", "RequestToken"]
