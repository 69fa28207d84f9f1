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
import logging
from typing import Any, List, Optional, Tuple

from cryptography.hazmat.primitives.serialization import (
    Encoding, PrivateFormat, NoEncryption, pkcs12,
)

from .bundle import CertificateBundle, keyEncodings
from ..common.utils import bytes_
from ..exception import (
    MalformedCertificateBundle, CertificatePasswordRequired,
    InvalidCertificatePassword, MissingPrivateKey,
)


logger = logging.getLogger(__name__)

DER_SEQUENCE = 0x30
# INTEGER, length 1, value 3.  The only PFX version ever defined.
PFX_VERSION = b'\x02\x01\x03'


def _read_der_length(data: bytes, offset: int) -> Tuple[Optional[int], int]:
    """Returns declared length and offset of the first content octet.

    Length is None for BER indefinite length encoding."""
    if offset >= len(data):
        raise MalformedCertificateBundle(
            'Failed to parse PFX structure: truncated length',
        )
    first = data[offset]
    if first < 0x80:
        return first, offset + 1
    if first == 0x80:
        return None, offset + 1
    num_octets = first & 0x7F
    if num_octets > 4 or offset + 1 + num_octets > len(data):
        raise MalformedCertificateBundle(
            'Failed to parse PFX structure: invalid length encoding',
        )
    length = int.from_bytes(data[offset + 1:offset + 1 + num_octets], 'big')
    return length, offset + 1 + num_octets


def check_pfx_structure(data: bytes) -> None:
    """Validates the outer PFX container without decrypting anything.

    Keeps structurally broken input apart from password failures,
    which the decryption layer cannot tell apart."""
    if data[0] != DER_SEQUENCE:
        raise MalformedCertificateBundle(
            'Failed to parse PFX structure: expected SEQUENCE, found tag 0x%02x' % data[0],
        )
    length, offset = _read_der_length(data, 1)
    if length is not None and offset + length > len(data):
        raise MalformedCertificateBundle(
            'Failed to parse PFX structure: declared %d bytes, only %d available' % (
                length, len(data) - offset,
            ),
        )
    if data[offset:offset + len(PFX_VERSION)] != PFX_VERSION:
        raise MalformedCertificateBundle(
            'Failed to parse PFX structure: unsupported version',
        )


def _decrypt(data: bytes, password: str) -> Tuple[Any, Any, List[Any]]:
    # OpenSSL treats "no password" and "empty password" differently,
    # so an empty password tries both.
    candidates: List[Optional[bytes]] = [bytes_(password)] if password else [None, b'']
    reason: Optional[Exception] = None
    for candidate in candidates:
        try:
            return pkcs12.load_key_and_certificates(data, candidate)
        except ValueError as e:
            reason = e
    if password:
        raise InvalidCertificatePassword(
            'Failed to parse PFX file with provided password: %s' % reason,
        )
    raise CertificatePasswordRequired(
        'Failed to parse PFX file: %s. This file may require a password. '
        'Use --password option.' % reason,
    )


def parse_pfx_bytes(data: bytes, password: str = '') -> CertificateBundle:
    """Decodes a PKCS#12 bundle into a :class:`CertificateBundle`.

    The end-entity certificate leads the chain, followed by every
    additional certificate in container order.  The private key is
    always re-encoded as unencrypted PKCS#8 DER."""
    if not data:
        raise MalformedCertificateBundle('Empty PFX data provided')

    check_pfx_structure(data)
    key, cert, additional = _decrypt(data, password)

    chain: List[bytes] = []
    if cert is not None:
        cert_der = cert.public_bytes(Encoding.DER)
        logger.info('Found main certificate (%d bytes)', len(cert_der))
        chain.append(cert_der)
    for ca in additional:
        ca_der = ca.public_bytes(Encoding.DER)
        logger.info('Found chain certificate (%d bytes)', len(ca_der))
        chain.append(ca_der)

    if key is None:
        raise MissingPrivateKey('No private key found in PFX file')

    try:
        key_der = key.private_bytes(
            Encoding.DER, PrivateFormat.PKCS8, NoEncryption(),
        )
    except (ValueError, TypeError) as e:
        raise MalformedCertificateBundle(
            'Failed to encode private key to PKCS#8: %s' % e,
        ) from e
    logger.info('Extracted private key (%d bytes)', len(key_der))

    return CertificateBundle.create(chain, key_der, keyEncodings.PKCS8)
