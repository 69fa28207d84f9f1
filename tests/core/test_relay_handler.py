# -*- coding: utf-8 -*-
"""
    tlsproxy
    ~~~~~~~~
    TLS terminating reverse proxy.  Exposes a plaintext TCP backend
    over TLS without modifying it.

    :copyright: (c) 2013-present by Abhinav Singh and contributors.
    :license: BSD, see LICENSE for more details.
"""
import ssl
import socket
import selectors
from typing import Generator, Optional
from unittest import mock

import pytest
from pytest_mock import MockerFixture

from tlsproxy.common.flag import FlagParser
from tlsproxy.certificate import PfxSource
from tlsproxy.core.base import TlsRelayHandler
from tlsproxy.core.connection import TcpClientConnection, connectionStates
from tlsproxy.exception import BackendConnectionFailed, RelayIoError, TlsHandshakeFailed


class TestTlsRelayHandler:

    @pytest.fixture(autouse=True)   # type: ignore[misc]
    def _setUp(self, mocker: MockerFixture) -> Generator[None, None, None]:
        self.client, self.client_peer = socket.socketpair()
        self.backend, self.backend_peer = socket.socketpair()
        self.mock_connect = mocker.patch(
            'tlsproxy.core.connection.server.new_socket_connection',
            return_value=self.backend,
        )
        self.flags = FlagParser.initialize(
            backend=('127.0.0.1', 9000),
            certificate_source=PfxSource('server.pfx'),
        )
        self.handler = TlsRelayHandler(
            TcpClientConnection(self.client, ('127.0.0.1', 54321)),
            flags=self.flags,
        )
        self.handler.initialize()
        yield
        self.handler.shutdown()
        self.client_peer.close()
        self.backend_peer.close()

    def test_initialize(self) -> None:
        self.mock_connect.assert_called_once_with(
            ('127.0.0.1', 9000), timeout=self.flags.timeout, source_address=None,
        )
        assert self.handler.state == connectionStates.RELAYING
        assert self.handler.upstream is not None
        assert self.handler.upstream.connection is self.backend

    @pytest.mark.asyncio    # type: ignore[misc]
    async def test_get_events(self) -> None:
        assert await self.handler.get_events() == {
            self.client.fileno(): selectors.EVENT_READ,
            self.backend.fileno(): selectors.EVENT_READ,
        }
        assert self.handler.upstream
        self.handler.upstream.queue(memoryview(b'pending'))
        assert await self.handler.get_events() == {
            self.client.fileno(): selectors.EVENT_READ,
            self.backend.fileno(): selectors.EVENT_READ | selectors.EVENT_WRITE,
        }

    @pytest.mark.asyncio    # type: ignore[misc]
    async def test_client_to_backend(self) -> None:
        self.client_peer.sendall(b'ping')
        teardown = await self.handler.handle_events([self.client.fileno()], [])
        assert teardown is False
        teardown = await self.handler.handle_events([], [self.backend.fileno()])
        assert teardown is False
        assert self.backend_peer.recv(1024) == b'ping'

    @pytest.mark.asyncio    # type: ignore[misc]
    async def test_backend_to_client(self) -> None:
        self.backend_peer.sendall(b'pong')
        teardown = await self.handler.handle_events([self.backend.fileno()], [])
        assert teardown is False
        assert self.handler.work.has_buffer()
        teardown = await self.handler.handle_events([], [self.client.fileno()])
        assert teardown is False
        assert self.client_peer.recv(1024) == b'pong'

    @pytest.mark.asyncio    # type: ignore[misc]
    async def test_client_eof_flushes_before_teardown(self) -> None:
        self.client_peer.sendall(b'last words')
        self.client_peer.shutdown(socket.SHUT_WR)
        assert await self.handler.handle_events([self.client.fileno()], []) is False
        assert await self.handler.handle_events([self.client.fileno()], []) is False
        assert self.handler.client_eof is True
        # No more reads from client once it has closed its side
        events = await self.handler.get_events()
        assert self.client.fileno() not in events
        assert events[self.backend.fileno()] & selectors.EVENT_WRITE
        assert await self.handler.handle_events([], [self.backend.fileno()]) is True
        assert self.backend_peer.recv(1024) == b'last words'

    @pytest.mark.asyncio    # type: ignore[misc]
    async def test_backend_eof_flushes_before_teardown(self) -> None:
        self.backend_peer.sendall(b'bye')
        self.backend_peer.shutdown(socket.SHUT_WR)
        assert await self.handler.handle_events([self.backend.fileno()], []) is False
        assert await self.handler.handle_events([self.backend.fileno()], []) is False
        assert self.handler.upstream_eof is True
        assert await self.handler.handle_events([], [self.client.fileno()]) is True
        assert self.client_peer.recv(1024) == b'bye'

    @pytest.mark.asyncio    # type: ignore[misc]
    async def test_relay_io_error(self) -> None:
        self.backend_peer.close()
        self.client_peer.sendall(b'ping')
        await self.handler.handle_events([self.client.fileno()], [])
        with pytest.raises(RelayIoError):
            await self.handler.handle_events([], [self.backend.fileno()])

    def test_shutdown_closes_both_sides(self) -> None:
        self.handler.shutdown()
        assert self.handler.state == connectionStates.CLOSED
        assert self.handler.work.closed
        assert self.handler.upstream and self.handler.upstream.closed
        assert self.client_peer.recv(1024) == b''
        assert self.backend_peer.recv(1024) == b''


class TestTlsRelayHandlerFailures:

    @pytest.fixture(autouse=True)   # type: ignore[misc]
    def _setUp(self, mocker: MockerFixture) -> Generator[None, None, None]:
        self.client, self.client_peer = socket.socketpair()
        self.mock_connect = mocker.patch(
            'tlsproxy.core.connection.server.new_socket_connection',
        )
        self.flags = FlagParser.initialize(
            backend=('127.0.0.1', 9000),
            certificate_source=PfxSource('server.pfx'),
        )
        yield
        self.client.close()
        self.client_peer.close()

    def _handler(self, context: Optional[mock.Mock] = None) -> TlsRelayHandler:
        return TlsRelayHandler(
            TcpClientConnection(self.client, ('127.0.0.1', 54321)),
            flags=self.flags,
            context=context,
        )

    def test_backend_unreachable(self) -> None:
        self.mock_connect.side_effect = ConnectionRefusedError(111, 'Connection refused')
        handler = self._handler()
        with pytest.raises(BackendConnectionFailed) as e:
            handler.initialize()
        assert e.value.host == '127.0.0.1'
        assert e.value.port == 9000
        assert handler.state == connectionStates.DIALING

    def test_run_contains_backend_failure(self) -> None:
        self.mock_connect.side_effect = ConnectionRefusedError(111, 'Connection refused')
        handler = self._handler()
        with mock.patch('tlsproxy.core.base.tcp_server.logger') as mock_logger:
            handler.run()
        mock_logger.warning.assert_called_once()
        assert handler.state == connectionStates.CLOSED
        assert handler.work.closed
        assert self.client_peer.recv(1024) == b''

    def test_handshake_failure(self) -> None:
        context = mock.Mock()
        context.wrap_socket.side_effect = ssl.SSLError(1, 'wrong version number')
        handler = self._handler(context)
        with pytest.raises(TlsHandshakeFailed):
            handler.initialize()
        context.wrap_socket.assert_called_once_with(self.client, server_side=True)
        self.mock_connect.assert_not_called()

    def test_run_contains_handshake_failure(self) -> None:
        context = mock.Mock()
        context.wrap_socket.side_effect = ssl.SSLError(1, 'wrong version number')
        handler = self._handler(context)
        with mock.patch('tlsproxy.core.base.tcp_server.logger') as mock_logger:
            handler.run()
        mock_logger.warning.assert_called_once()
        mock_logger.exception.assert_not_called()
        assert handler.state == connectionStates.CLOSED
        self.mock_connect.assert_not_called()
