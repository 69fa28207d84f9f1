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
import shutil
import tempfile
import unittest
from typing import Optional, List, Any

from cryptography.hazmat.primitives.serialization import PrivateFormat

from . import pki
from .echo import EchoServer
from ..proxy import TlsProxy
from ..common.constants import DEFAULT_TIMEOUT
from ..common.utils import new_socket_connection


class TestCase(unittest.TestCase):
    """Base TestCase class that automatically setup and tear down tlsproxy.

    A self-signed certificate for ``localhost`` is generated into a
    temporary directory and a plaintext echo server is started as
    the backend, unless ``TLSPROXY_STARTUP_FLAGS`` names one."""

    DEFAULT_TLSPROXY_STARTUP_FLAGS: List[str] = []

    PROXY: Optional[TlsProxy] = None
    BACKEND: Optional[EchoServer] = None
    INPUT_ARGS: Optional[List[str]] = None
    CERT_DIR: Optional[str] = None
    CA_FILE: Optional[str] = None

    @classmethod
    def setUpClass(cls) -> None:
        cls.CERT_DIR = tempfile.mkdtemp(prefix='tlsproxy-test-')
        key, chain = pki.gen_chain(depth=2)
        cls.CA_FILE = pki.write_file(
            os.path.join(cls.CERT_DIR, 'ca.pem'),
            pki.certificates_to_pem(chain[-1:]),
        )
        cert_path = pki.write_file(
            os.path.join(cls.CERT_DIR, 'server.pem'),
            pki.certificates_to_pem(chain) +
            pki.private_key_to_pem(key, PrivateFormat.PKCS8),
        )

        cls.INPUT_ARGS = list(
            getattr(cls, 'TLSPROXY_STARTUP_FLAGS')
            if hasattr(cls, 'TLSPROXY_STARTUP_FLAGS')
            else cls.DEFAULT_TLSPROXY_STARTUP_FLAGS,
        )
        if '--backend' not in cls.INPUT_ARGS:
            cls.BACKEND = EchoServer()
            cls.BACKEND.__enter__()
            cls.INPUT_ARGS += ['--backend', '127.0.0.1:%d' % cls.BACKEND.port]
        cls.INPUT_ARGS += ['--listen', '127.0.0.1:0', cert_path]

        cls.PROXY = TlsProxy(cls.INPUT_ARGS)
        cls.PROXY.__enter__()
        cls.wait_for_server(cls.PROXY.flags.port)

    @staticmethod
    def wait_for_server(
        proxy_port: int,
        wait_for_seconds: float = DEFAULT_TIMEOUT,
    ) -> None:
        """Wait for tlsproxy server to come up."""
        start_time = time.time()
        while True:
            try:
                new_socket_connection(
                    ('127.0.0.1', proxy_port),
                ).close()
                break
            except ConnectionRefusedError:
                time.sleep(0.1)

            if time.time() - start_time > wait_for_seconds:
                raise TimeoutError(
                    'Timed out while waiting for tlsproxy to start...',
                )

    @classmethod
    def client_context(cls) -> ssl.SSLContext:
        """Client side context trusting the generated certificate."""
        ctx = ssl.create_default_context(ssl.Purpose.SERVER_AUTH, cafile=cls.CA_FILE)
        return ctx

    @classmethod
    def tls_connection(cls, timeout: float = DEFAULT_TIMEOUT) -> ssl.SSLSocket:
        """Returns a TLS connection to the running proxy, handshake completed."""
        assert cls.PROXY
        sock = socket.create_connection(('127.0.0.1', cls.PROXY.flags.port), timeout=timeout)
        try:
            return cls.client_context().wrap_socket(sock, server_hostname='localhost')
        except Exception:
            sock.close()
            raise

    @classmethod
    def tearDownClass(cls) -> None:
        assert cls.PROXY
        cls.PROXY.__exit__(None, None, None)
        cls.PROXY = None
        if cls.BACKEND:
            cls.BACKEND.__exit__(None, None, None)
            cls.BACKEND = None
        if cls.CERT_DIR:
            shutil.rmtree(cls.CERT_DIR, ignore_errors=True)
            cls.CERT_DIR = None
        cls.INPUT_ARGS = None

    def run(self, result: Optional[unittest.TestResult] = None) -> Any:
        super().run(result)
