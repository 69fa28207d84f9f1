# -*- coding: utf-8 -*-
"""
    tlsproxy
    ~~~~~~~~
    TLS terminating reverse proxy.  Exposes a plaintext TCP backend
    over TLS without modifying it.

    :copyright: (c) 2013-present by Abhinav Singh and contributors.
    :license: BSD, see LICENSE for more details.

    .. spelling::

       tcp
"""
import ssl
import asyncio
import logging
import argparse
import selectors
from abc import abstractmethod
from typing import Any, Optional, Tuple

from ..work import Work
from ...common.flag import flags
from ...common.types import Readables, Writables, SelectableEvents
from ..connection import TcpClientConnection, connectionStates
from ...common.constants import (
    DEFAULT_TIMEOUT, DEFAULT_MAX_SEND_SIZE, DEFAULT_CLIENT_RECVBUF_SIZE,
    DEFAULT_SELECTOR_SELECT_TIMEOUT,
)
from ...exception import ConnectionException, TlsHandshakeFailed, RelayIoError


logger = logging.getLogger(__name__)


flags.add_argument(
    '--client-recvbuf-size',
    type=int,
    default=DEFAULT_CLIENT_RECVBUF_SIZE,
    help='Default: ' + str(int(DEFAULT_CLIENT_RECVBUF_SIZE / 1024)) +
    ' KB. Maximum amount of data received from the '
    'client in a single recv() operation.',
)

flags.add_argument(
    '--max-sendbuf-size',
    type=int,
    default=DEFAULT_MAX_SEND_SIZE,
    help='Default: ' + str(int(DEFAULT_MAX_SEND_SIZE / 1024)) +
    ' KB. Maximum amount of data to dispatch in a single send() operation.',
)

flags.add_argument(
    '--timeout',
    type=float,
    default=DEFAULT_TIMEOUT,
    help='Default: ' + str(DEFAULT_TIMEOUT) +
    '.  Number of seconds allowed for the TLS handshake with a client and '
    'for connecting to the backend.  Use 0 to wait forever.',
)


class BaseTcpServerHandler(Work[TcpClientConnection]):
    """BaseTcpServerHandler implements Work interface.

    An instance of BaseTcpServerHandler is created for each accepted
    client connection and driven to completion by :meth:`run` within
    its own thread.  :meth:`initialize` upgrades the connection to TLS
    using the shared server context.

    BaseTcpServerHandler ensures that server is always ready to accept
    new data from the client.  It also ensures, client is ready to
    accept new data before flushing data to it.

    Implementations must provide::

       a. handle_data(data: memoryview) implementation
       b. Optionally, also implement other Work method
          e.g. initialize, is_inactive, shutdown
    """

    def __init__(
            self,
            work: TcpClientConnection,
            flags: argparse.Namespace,
            context: Optional[ssl.SSLContext] = None,
            **kwargs: Any,
    ) -> None:
        super().__init__(work, flags, **kwargs)
        self.context = context
        self.state = connectionStates.ACCEPTED
        # Set once client has closed its side, no more reads from client
        self.client_eof = False
        self.selector: Optional[selectors.DefaultSelector] = None
        logger.debug(
            'Work#%d accepted from %s',
            self.work.connection.fileno(),
            self.work.address,
        )

    @staticmethod
    def create(**kwargs: Any) -> TcpClientConnection:
        return TcpClientConnection(**kwargs)

    def initialize(self) -> None:
        """Performs TLS handshake with the client.

        Raises :exc:`TlsHandshakeFailed` upon error."""
        self.state = connectionStates.HANDSHAKING
        if self.context is not None:
            try:
                self.work.wrap(self.context, timeout=self.flags.timeout)
            except (ssl.SSLError, OSError) as e:
                raise TlsHandshakeFailed(self.work.address, str(e)) from e
            logger.debug('TLS handshake completed with %s' % self.work.address)
        else:
            self.work.connection.setblocking(False)

    @abstractmethod
    def handle_data(self, data: memoryview) -> Optional[bool]:
        """Optionally return True to close client connection."""
        pass    # pragma: no cover

    def shutdown(self) -> None:
        self.work.close()
        self.state = connectionStates.CLOSED
        logger.debug('Connection closed with client %s' % self.work.address)

    async def get_events(self) -> SelectableEvents:
        events = {}
        # Read from client until it closes its side
        if self.client_eof is False:
            events[self.work.connection.fileno()] = selectors.EVENT_READ
        # If there is pending buffer for client
        # also register for EVENT_WRITE events
        if self.work.has_buffer():
            if self.work.connection.fileno() in events:
                events[self.work.connection.fileno()] |= selectors.EVENT_WRITE
            else:
                events[self.work.connection.fileno()] = selectors.EVENT_WRITE
        return events

    async def handle_events(
            self,
            readables: Readables,
            writables: Writables,
    ) -> bool:
        """Return True to shutdown work."""
        teardown = await self.handle_writables(
            writables,
        ) or await self.handle_readables(readables)
        if teardown:
            logger.debug(
                'Shutting down client {0} connection'.format(
                    self.work.address,
                ),
            )
        return teardown

    async def handle_writables(self, writables: Writables) -> bool:
        if self.work.connection.fileno() in writables and self.work.has_buffer():
            try:
                self.work.flush(self.flags.max_sendbuf_size)
            except OSError as e:
                raise RelayIoError(self.work.tag, str(e)) from e
        return False

    async def handle_readables(self, readables: Readables) -> bool:
        teardown = False
        if self.work.connection.fileno() in readables:
            try:
                data = self.work.recv(self.flags.client_recvbuf_size)
            except (ssl.SSLWantReadError, ssl.SSLWantWriteError, BlockingIOError):
                # Partial TLS record, wait for the rest
                return False
            except OSError as e:
                raise RelayIoError(self.work.tag, str(e)) from e
            if data is None:
                logger.debug(
                    'Connection closed by client {0}'.format(
                        self.work.address,
                    ),
                )
                self.client_eof = True
            else:
                r = self.handle_data(data)
                if isinstance(r, bool) and r is True:
                    logger.debug(
                        'Implementation signaled shutdown for client {0}'.format(
                            self.work.address,
                        ),
                    )
                    teardown = True
        return teardown

    def run(self) -> None:
        """Handles the connection until either side closes or fails.

        Every failure is logged and contained within this connection."""
        loop = asyncio.new_event_loop()
        self.selector = selectors.DefaultSelector()
        try:
            self.initialize()
            while True:
                if self.is_inactive():
                    logger.debug(
                        'Connection with %s is inactive, tearing down...',
                        self.work.address,
                    )
                    break
                if loop.run_until_complete(self._run_once()):
                    break
        except KeyboardInterrupt:  # pragma: no cover
            pass
        except ConnectionException as e:
            logger.warning(str(e))
        except Exception as e:
            logger.exception(
                'Exception while handling connection %s' %
                self.work.address, exc_info=e,
            )
        finally:
            self.shutdown()
            self.selector.close()
            loop.close()

    async def _run_once(self) -> bool:
        events, readables, writables = await self._selected_events()
        try:
            return await self.handle_events(readables, writables)
        finally:
            assert self.selector
            for fd in events:
                self.selector.unregister(fd)

    async def _selected_events(self) -> Tuple[SelectableEvents, Readables, Writables]:
        assert self.selector
        events = await self.get_events()
        for fd in events:
            self.selector.register(fd, events[fd])
        ev = self.selector.select(timeout=DEFAULT_SELECTOR_SELECT_TIMEOUT)
        readables = []
        writables = []
        for key, mask in ev:
            if mask & selectors.EVENT_READ:
                readables.append(key.fd)
            if mask & selectors.EVENT_WRITE:
                writables.append(key.fd)
        return (events, readables, writables)
