# -*- coding: utf-8 -*-
"""
    tlsproxy
    ~~~~~~~~
    TLS terminating reverse proxy.  Exposes a plaintext TCP backend
    over TLS without modifying it.

    :copyright: (c) 2013-present by Abhinav Singh and contributors.
    :license: BSD, see LICENSE for more details.
"""
import os
import ssl
import time
import socket
import threading
from typing import Any, Callable, List

import pytest

from tlsproxy import TestCase
from tlsproxy.common.utils import get_available_port


def recv_exactly(conn: socket.socket, size: int) -> bytes:
    data = b''
    while len(data) < size:
        chunk = conn.recv(size - len(data))
        if not chunk:
            break
        data += chunk
    return data


def wait_closed(conn: socket.socket) -> bool:
    """True once peer has closed the connection."""
    try:
        return conn.recv(1024) == b''
    except (ConnectionResetError, ssl.SSLEOFError):
        return True


def wait_until(predicate: Callable[[], Any], timeout: float = 5.0) -> bool:
    start_time = time.time()
    while time.time() - start_time < timeout:
        if predicate():
            return True
        time.sleep(0.05)
    return predicate()


class TestTlsRelay(TestCase):
    """Relays TLS clients to a plaintext echo backend."""

    def test_ping(self) -> None:
        with self.tls_connection() as conn:
            conn.sendall(b'ping')
            self.assertEqual(recv_exactly(conn, 4), b'ping')

    def test_tls_version(self) -> None:
        with self.tls_connection() as conn:
            self.assertIn(conn.version(), ('TLSv1.2', 'TLSv1.3'))

    def test_large_payload(self) -> None:
        payload = os.urandom(1024 * 1024)
        chunk_size = 64 * 1024
        received = b''
        with self.tls_connection() as conn:
            for offset in range(0, len(payload), chunk_size):
                chunk = payload[offset:offset + chunk_size]
                conn.sendall(chunk)
                received += recv_exactly(conn, len(chunk))
        self.assertEqual(received, payload)

    def test_concurrent_connections(self) -> None:
        conns = [self.tls_connection() for _ in range(5)]
        try:
            for i, conn in enumerate(conns):
                conn.sendall(b'hello %d' % i)
            for i, conn in enumerate(conns):
                expected = b'hello %d' % i
                self.assertEqual(recv_exactly(conn, len(expected)), expected)
        finally:
            for conn in conns:
                conn.close()

    def test_handshake_failure_is_isolated(self) -> None:
        assert self.PROXY
        with self.tls_connection() as healthy:
            with socket.create_connection(('127.0.0.1', self.PROXY.flags.port), timeout=5) as plain:
                plain.sendall(b'GET / HTTP/1.1\r\nHost: localhost\r\n\r\n')
                self.assertTrue(wait_closed(plain))
            healthy.sendall(b'still here')
            self.assertEqual(recv_exactly(healthy, 10), b'still here')
        with self.tls_connection() as conn:
            conn.sendall(b'ping')
            self.assertEqual(recv_exactly(conn, 4), b'ping')

    def test_repeated_cycles_release_resources(self) -> None:
        baseline = threading.active_count()
        for i in range(20):
            with self.tls_connection() as conn:
                message = b'cycle %d' % i
                conn.sendall(message)
                self.assertEqual(recv_exactly(conn, len(message)), message)
        self.assertTrue(
            wait_until(lambda: threading.active_count() <= baseline),
            'Work threads did not exit',
        )


class TestTlsRelayBackendDown(TestCase):
    """Clients are disconnected when the backend refuses connections."""

    TLSPROXY_STARTUP_FLAGS = [
        '--backend', '127.0.0.1:%d' % get_available_port(),
        '--timeout', '2',
    ]

    def test_client_disconnected(self) -> None:
        try:
            conn = self.tls_connection()
        except (ConnectionResetError, ssl.SSLError):
            # Proxy may close before the client observes handshake completion
            return
        with conn:
            self.assertTrue(wait_closed(conn))

    def test_proxy_keeps_accepting(self) -> None:
        assert self.PROXY
        for _ in range(3):
            with socket.create_connection(('127.0.0.1', self.PROXY.flags.port), timeout=5):
                pass
        assert self.PROXY.acceptor is not None
        self.assertTrue(self.PROXY.acceptor.is_alive())


@pytest.mark.parametrize('flags', [['--timeout', '0'], ['--max-sendbuf-size', '512']])
def test_relay_with_flags(flags: List[str]) -> None:
    class _RelayCase(TestCase):
        TLSPROXY_STARTUP_FLAGS = flags

    _RelayCase.setUpClass()
    try:
        with _RelayCase.tls_connection() as conn:
            payload = b'x' * 4096
            conn.sendall(payload)
            assert recv_exactly(conn, len(payload)) == payload
    finally:
        _RelayCase.tearDownClass()
