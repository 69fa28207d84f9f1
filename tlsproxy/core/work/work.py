# -*- coding: utf-8 -*-
"""
    tlsproxy
    ~~~~~~~~
    TLS terminating reverse proxy.  Exposes a plaintext TCP backend
    over TLS without modifying it.

    :copyright: (c) 2013-present by Abhinav Singh and contributors.
    :license: BSD, see LICENSE for more details.
"""
import argparse

from abc import ABC, abstractmethod
from uuid import uuid4
from typing import Any, Optional, TypeVar, Generic

from ...common.types import Readables, Writables, SelectableEvents

T = TypeVar('T')


class Work(ABC, Generic[T]):
    """Implement Work to handle one accepted connection within its own thread."""

    def __init__(
            self,
            work: T,
            flags: argparse.Namespace,
            uid: Optional[str] = None,
    ) -> None:
        # Work uuid
        self.uid: str = uid if uid is not None else uuid4().hex
        self.flags = flags
        # Accept work
        self.work = work

    @staticmethod
    @abstractmethod
    def create(**kwargs: Any) -> T:
        """Implementations are responsible for creation of work objects
        from incoming args.  This helps keep work core agnostic to
        creation of externally defined work class objects."""
        raise NotImplementedError()

    @abstractmethod
    async def get_events(self) -> SelectableEvents:
        """Return sockets and events (read or write) that we are interested in."""
        return {}   # pragma: no cover

    @abstractmethod
    async def handle_events(
            self,
            readables: Readables,
            writables: Writables,
    ) -> bool:
        """Handle readable and writable sockets.

        Return True to shutdown work."""
        return False    # pragma: no cover

    def initialize(self) -> None:
        """Perform any resource initialization."""
        pass    # pragma: no cover

    def is_inactive(self) -> bool:
        """Return True if connection should be considered inactive."""
        return False    # pragma: no cover

    def shutdown(self) -> None:
        """Implementation must close any opened resources here."""
        pass    # pragma: no cover

    def run(self) -> None:
        """Drives the work to completion.  Invoked from a dedicated thread."""
        pass    # pragma: no cover
