# -*- coding: utf-8 -*-
"""
    tlsproxy
    ~~~~~~~~
    TLS terminating reverse proxy.  Exposes a plaintext TCP backend
    over TLS without modifying it.

    :copyright: (c) 2013-present by Abhinav Singh and contributors.
    :license: BSD, see LICENSE for more details.
"""
import unittest

from tlsproxy.certificate import CertificateBundle, keyEncodings
from tlsproxy.exception import (
    NoCertificatesFound, MissingPrivateKey, MalformedCertificateBundle,
)


class TestCertificateBundle(unittest.TestCase):

    def test_create(self) -> None:
        bundle = CertificateBundle.create([b'leaf', b'ca'], b'key')
        self.assertEqual(bundle.chain, (b'leaf', b'ca'))
        self.assertEqual(bundle.leaf, b'leaf')
        self.assertEqual(bundle.key_encoding, keyEncodings.PKCS8)

    def test_empty_chain(self) -> None:
        with self.assertRaises(NoCertificatesFound):
            CertificateBundle.create([], b'key')

    def test_empty_certificate(self) -> None:
        with self.assertRaises(MalformedCertificateBundle):
            CertificateBundle.create([b'leaf', b''], b'key')

    def test_missing_key(self) -> None:
        with self.assertRaises(MissingPrivateKey):
            CertificateBundle.create([b'leaf'], b'')
        with self.assertRaises(MissingPrivateKey):
            CertificateBundle.create([b'leaf'], None)

    def test_unknown_key_encoding(self) -> None:
        with self.assertRaises(MalformedCertificateBundle):
            CertificateBundle.create([b'leaf'], b'key', 'pkcs12')
