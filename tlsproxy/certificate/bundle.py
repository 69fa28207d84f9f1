# -*- coding: utf-8 -*-
"""
    tlsproxy
    ~~~~~~~~
    TLS terminating reverse proxy.  Exposes a plaintext TCP backend
    over TLS without modifying it.

    :copyright: (c) 2013-present by Abhinav Singh and contributors.
    :license: BSD, see LICENSE for more details.

    .. spelling::

       pkcs
       pfx
"""
from typing import Iterable, NamedTuple, Optional, Tuple, Union

from ..exception import MalformedCertificateBundle, MissingPrivateKey, NoCertificatesFound


CertTypes = NamedTuple(
    'CertTypes', [
        ('PFX', int),
        ('PEM', int),
    ],
)
certTypes = CertTypes(1, 2)

KeyEncodings = NamedTuple(
    'KeyEncodings', [
        ('PKCS8', str),
        ('PKCS1', str),
        ('SEC1', str),
    ],
)
keyEncodings = KeyEncodings('pkcs8', 'pkcs1', 'sec1')


class PfxSource(NamedTuple):
    """Password protected PKCS#12 bundle on disk."""
    path: str
    password: Optional[str] = None


class PemSource(NamedTuple):
    """Certificate chain and private key PEM files.

    Both paths may point to the same file.  ``password`` is only
    used for an ``ENCRYPTED PRIVATE KEY`` block."""
    cert_path: str
    key_path: str
    password: Optional[str] = None


CertificateSource = Union[PfxSource, PemSource]


class CertificateBundle(NamedTuple):
    """Normalized server identity.

    ``chain`` holds DER encoded certificates, leaf first.  ``private_key``
    is DER encoded in the layout named by ``key_encoding``.

    Use :meth:`create` to build one, it enforces that neither
    chain nor key is empty.
    """
    chain: Tuple[bytes, ...]
    private_key: bytes
    key_encoding: str = keyEncodings.PKCS8

    @classmethod
    def create(
            cls,
            chain: Iterable[bytes],
            private_key: Optional[bytes],
            key_encoding: str = keyEncodings.PKCS8,
    ) -> 'CertificateBundle':
        chain = tuple(chain)
        if len(chain) == 0:
            raise NoCertificatesFound('No certificates found in bundle')
        if any(len(cert) == 0 for cert in chain):
            raise MalformedCertificateBundle('Empty certificate in chain')
        if not private_key:
            raise MissingPrivateKey('No private key found in bundle')
        if key_encoding not in keyEncodings:
            raise MalformedCertificateBundle(
                'Unknown private key encoding %r' % key_encoding,
            )
        return cls(chain, private_key, key_encoding)

    @property
    def leaf(self) -> bytes:
        return self.chain[0]
