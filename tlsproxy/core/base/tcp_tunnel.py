# -*- coding: utf-8 -*-
"""
    tlsproxy
    ~~~~~~~~
    TLS terminating reverse proxy.  Exposes a plaintext TCP backend
    over TLS without modifying it.

    :copyright: (c) 2013-present by Abhinav Singh and contributors.
    :license: BSD, see LICENSE for more details.
"""
import logging
import selectors

from typing import Any, Optional

from ...common.flag import flags
from ...common.types import Readables, SelectableEvents, Writables
from ...common.constants import DEFAULT_BACKEND, DEFAULT_SERVER_RECVBUF_SIZE
from ...exception import BackendConnectionFailed, RelayIoError

from ..connection import TcpServerConnection, connectionStates
from .tcp_server import BaseTcpServerHandler

logger = logging.getLogger(__name__)


flags.add_argument(
    '--backend',
    type=str,
    default=DEFAULT_BACKEND,
    help='Required.  ip:port of the plaintext backend server to relay '
    'decrypted traffic to.',
)

flags.add_argument(
    '--server-recvbuf-size',
    type=int,
    default=DEFAULT_SERVER_RECVBUF_SIZE,
    help='Default: ' + str(int(DEFAULT_SERVER_RECVBUF_SIZE / 1024)) +
    ' KB. Maximum amount of data received from the '
    'backend in a single recv() operation.',
)


class TlsRelayHandler(BaseTcpServerHandler):
    """TlsRelayHandler build on-top of BaseTcpServerHandler work class.

    After the client handshake, TlsRelayHandler dials the backend
    configured by ``--backend`` and copies bytes verbatim in both
    directions.  Once either side reaches end of stream, bytes already
    read for the other side are flushed and both connections are closed.
    """

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.upstream: Optional[TcpServerConnection] = None
        # Set once backend has closed its side
        self.upstream_eof = False

    def initialize(self) -> None:
        super().initialize()
        self.connect_upstream()
        self.state = connectionStates.RELAYING

    def handle_data(self, data: memoryview) -> Optional[bool]:
        assert self.upstream
        self.upstream.queue(data)
        return None

    def shutdown(self) -> None:
        if self.upstream and not self.upstream.closed:
            logger.debug(
                'Connection closed with upstream {0}'.format(
                    self.upstream.address,
                ),
            )
            self.upstream.close()
        super().shutdown()

    async def get_events(self) -> SelectableEvents:
        # Get default client events
        ev: SelectableEvents = await super().get_events()
        if self.upstream is None or self.upstream.closed:
            return ev
        fileno = self.upstream.connection.fileno()
        # Read from server until it closes its side
        if self.upstream_eof is False:
            ev[fileno] = selectors.EVENT_READ
        # If there is pending buffer for server
        # also register for EVENT_WRITE events
        if self.upstream.has_buffer():
            if fileno in ev:
                ev[fileno] |= selectors.EVENT_WRITE
            else:
                ev[fileno] = selectors.EVENT_WRITE
        return ev

    async def handle_events(
            self,
            readables: Readables,
            writables: Writables,
    ) -> bool:
        # Handle client events
        do_shutdown: bool = await super().handle_events(readables, writables)
        if do_shutdown:
            return do_shutdown
        assert self.upstream
        # Handle server events
        fileno = self.upstream.connection.fileno()
        if fileno in writables and self.upstream.has_buffer():
            try:
                self.upstream.flush(self.flags.max_sendbuf_size)
            except OSError as e:
                raise RelayIoError(self.upstream.tag, str(e)) from e
        if fileno in readables:
            try:
                data = self.upstream.recv(self.flags.server_recvbuf_size)
            except BlockingIOError:
                data = memoryview(b'')
            except OSError as e:
                raise RelayIoError(self.upstream.tag, str(e)) from e
            if data is None:
                logger.debug('Connection closed by server')
                self.upstream_eof = True
            elif len(data) > 0:
                # tunnel data to client
                self.work.queue(data)
        return self.is_drained()

    def is_drained(self) -> bool:
        """True once a side has closed and the other side has
        received every byte already read for it."""
        assert self.upstream
        if self.client_eof and not self.upstream.has_buffer():
            return True
        if self.upstream_eof and not self.work.has_buffer():
            return True
        return False

    def connect_upstream(self) -> None:
        self.state = connectionStates.DIALING
        host, port = self.flags.backend
        self.upstream = TcpServerConnection(host, port)
        try:
            self.upstream.connect(timeout=self.flags.timeout)
        except OSError as e:
            raise BackendConnectionFailed(host, port, str(e)) from e
        self.upstream.connection.setblocking(False)
        logger.debug(
            'Connection established with upstream {0} for client {1}'.format(
                self.upstream.address, self.work.address,
            ),
        )

