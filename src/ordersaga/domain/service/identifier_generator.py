"""Identifier generation for orders and order lines."""

from __future__ import annotations

import uuid
from abc import ABC, abstractmethod


class IdentifierGenerator(ABC):

    @abstractmethod
    def next(self) -> str:
        """Return a new identifier, never returned before."""


class UuidIdentifierGenerator(IdentifierGenerator):
    """Random UUID4 identifiers.

    Needs no coordination with a database or other processes and is
    safe to call from many threads at once.
    """

    def next(self) -> str:
        return uuid.uuid4().hex
