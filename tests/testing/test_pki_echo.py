# -*- coding: utf-8 -*-
"""
    tlsproxy
    ~~~~~~~~
    TLS terminating reverse proxy.  Exposes a plaintext TCP backend
    over TLS without modifying it.

    :copyright: (c) 2013-present by Abhinav Singh and contributors.
    :license: BSD, see LICENSE for more details.

    .. spelling::

       pki
"""
import socket
import unittest

from cryptography import x509
from cryptography.hazmat.primitives.serialization import Encoding, PublicFormat

from tlsproxy.testing import pki
from tlsproxy.testing.echo import EchoServer


class TestPki(unittest.TestCase):

    def test_chain_is_linked(self) -> None:
        _, chain = pki.gen_chain(depth=3)
        self.assertEqual(len(chain), 3)
        for child, parent in zip(chain, chain[1:]):
            self.assertEqual(child.issuer, parent.subject)
            child.verify_directly_issued_by(parent)
        self.assertEqual(chain[-1].issuer, chain[-1].subject)

    def test_leaf_names(self) -> None:
        _, chain = pki.gen_chain(depth=1)
        san = chain[0].extensions.get_extension_for_class(x509.SubjectAlternativeName)
        self.assertIn('localhost', san.value.get_values_for_type(x509.DNSName))

    def test_leaf_key_matches(self) -> None:
        key, chain = pki.gen_chain(depth=2)
        self.assertEqual(
            chain[0].public_key().public_bytes(Encoding.DER, PublicFormat.SubjectPublicKeyInfo),
            key.public_key().public_bytes(Encoding.DER, PublicFormat.SubjectPublicKeyInfo),
        )


class TestEchoServer(unittest.TestCase):

    def test_echo(self) -> None:
        with EchoServer() as server:
            with socket.create_connection(('127.0.0.1', server.port), timeout=5) as conn:
                conn.sendall(b'hello')
                self.assertEqual(conn.recv(1024), b'hello')

    def test_closes_after_client_eof(self) -> None:
        with EchoServer() as server:
            with socket.create_connection(('127.0.0.1', server.port), timeout=5) as conn:
                conn.sendall(b'bye')
                conn.shutdown(socket.SHUT_WR)
                data = b''
                while True:
                    chunk = conn.recv(1024)
                    if not chunk:
                        break
                    data += chunk
                self.assertEqual(data, b'bye')
