# -*- coding: utf-8 -*-
"""
    tlsproxy
    ~~~~~~~~
    TLS terminating reverse proxy.  Exposes a plaintext TCP backend
    over TLS without modifying it.

    :copyright: (c) 2013-present by Abhinav Singh and contributors.
    :license: BSD, see LICENSE for more details.

    .. spelling::

       acceptor
"""
import ssl
import socket
import logging
import argparse
import selectors
import threading

from typing import Any, List, Optional, Tuple, Type

from ..work import Work, start_threaded_work
from ..base import TlsRelayHandler
from ...common.types import HostPort
from ...common.constants import DEFAULT_ACCEPTOR_SELECT_TIMEOUT

logger = logging.getLogger(__name__)


class Acceptor(threading.Thread):
    """Work acceptor thread.

    `Acceptor` listens for new connections over the given server socket
    and spawns a new thread to handle each of them.  Accepting never
    blocks on, nor fails because of, an individual connection.

    The TLS ``context`` is built once at start-up and handed by
    reference to every work, it is never mutated afterwards.  Works
    accepted without a context speak plaintext.
    """

    def __init__(
            self,
            sock: socket.socket,
            flags: argparse.Namespace,
            context: Optional[ssl.SSLContext],
            work_klass: Type[Work[Any]] = TlsRelayHandler,
    ) -> None:
        super().__init__(name='acceptor')
        self.daemon = True
        self.flags = flags
        self.context = context
        self.work_klass = work_klass
        # Server socket used to accept new work
        self.sock = sock
        self.running = threading.Event()
        self.selector: Optional[selectors.DefaultSelector] = None
        self._total = 0

    @property
    def total(self) -> int:
        """Number of connections accepted so far."""
        return self._total

    def accept(
            self,
            events: List[Tuple[selectors.SelectorKey, int]],
    ) -> List[Tuple[socket.socket, Optional[HostPort]]]:
        works = []
        for _, mask in events:
            if mask & selectors.EVENT_READ:
                try:
                    conn, addr = self.sock.accept()
                    logger.debug(
                        'Accepting new work#{0}'.format(conn.fileno()),
                    )
                    works.append((conn, addr or None))
                except BlockingIOError:
                    pass
                except OSError as e:
                    # e.g. EMFILE, retry on next select
                    logger.warning('Unable to accept connection: %s', e)
        return works

    def run_once(self) -> None:
        if self.selector is None:
            return
        events = self.selector.select(timeout=DEFAULT_ACCEPTOR_SELECT_TIMEOUT)
        if len(events) == 0:
            return
        for work in self.accept(events):
            self._work(*work)

    def run(self) -> None:
        self.selector = selectors.DefaultSelector()
        try:
            self.selector.register(self.sock, selectors.EVENT_READ)
            while not self.running.is_set():
                self.run_once()
        finally:
            self.selector.unregister(self.sock)
            self.selector.close()
            logger.debug('Acceptor shutdown')

    def shutdown(self, timeout: Optional[float] = None) -> None:
        self.running.set()
        if self.is_alive():
            self.join(timeout)

    def _work(self, conn: socket.socket, addr: Optional[HostPort]) -> None:
        try:
            _, thread = start_threaded_work(
                self.flags,
                self.work_klass,
                conn,
                addr,
                context=self.context,
            )
        except Exception as e:
            logger.exception('Unable to start work for %s', addr, exc_info=e)
            conn.close()
            return
        logger.debug(
            'Started work#{0}.{1} in thread#{2}'.format(
                conn.fileno(), self._total, thread.ident,
            ),
        )
        self._total += 1
