# -*- coding: utf-8 -*-
"""
    tlsproxy
    ~~~~~~~~
    TLS terminating reverse proxy.  Exposes a plaintext TCP backend
    over TLS without modifying it.

    :copyright: (c) 2013-present by Abhinav Singh and contributors.
    :license: BSD, see LICENSE for more details.

    .. spelling::

       pem
       pkcs
"""
import re
import logging
from typing import Dict, Iterator, List, Optional, Tuple

from cryptography import x509
from cryptography.hazmat.primitives.serialization import (
    Encoding, PrivateFormat, NoEncryption, load_pem_private_key,
)

from .bundle import CertificateBundle, keyEncodings
from .files import ensure_exists, read_certificate_file
from ..common.utils import bytes_
from ..exception import (
    MalformedCertificateBundle, NoCertificatesFound, MissingPrivateKey,
    CertificatePasswordRequired, InvalidCertificatePassword,
)


logger = logging.getLogger(__name__)

# Trailing blanks after the encapsulation boundary are allowed (RFC 7468 laxtextualmsg)
PEM_BLOCK = re.compile(
    rb'-----BEGIN ([A-Z0-9 ]+)-----[ \t]*\r?\n(.*?)-----END \1-----',
    re.DOTALL,
)
CERTIFICATE_BEGIN = re.compile(rb'-----BEGIN (X509 )?CERTIFICATE-----')

ENCRYPTED_KEY_LABEL = b'ENCRYPTED PRIVATE KEY'
KEY_LABELS: Dict[bytes, str] = {
    b'PRIVATE KEY': keyEncodings.PKCS8,
    b'RSA PRIVATE KEY': keyEncodings.PKCS1,
    b'EC PRIVATE KEY': keyEncodings.SEC1,
}
KEY_FORMATS: Dict[str, PrivateFormat] = {
    keyEncodings.PKCS8: PrivateFormat.PKCS8,
    keyEncodings.PKCS1: PrivateFormat.TraditionalOpenSSL,
    keyEncodings.SEC1: PrivateFormat.TraditionalOpenSSL,
}


def iter_pem_blocks(data: bytes) -> Iterator[Tuple[bytes, bytes, bytes]]:
    """Yields (label, full block, body) for every PEM block in file order."""
    for match in PEM_BLOCK.finditer(data):
        yield match.group(1), match.group(0), match.group(2)


def parse_pem_certificates(data: bytes) -> List[bytes]:
    """Returns DER of every CERTIFICATE block, in file order."""
    if CERTIFICATE_BEGIN.search(data) is None:
        raise NoCertificatesFound('No certificates found in PEM file')
    try:
        certs = x509.load_pem_x509_certificates(data)
    except ValueError as e:
        raise MalformedCertificateBundle(
            'Failed to parse PEM certificate: %s' % e,
        ) from e
    return [cert.public_bytes(Encoding.DER) for cert in certs]


def _decrypt_pem_key(block: bytes, password: Optional[str]) -> bytes:
    if not password:
        raise CertificatePasswordRequired(
            'PEM private key is encrypted. Use --password option.',
        )
    try:
        key = load_pem_private_key(block, bytes_(password))
    except (ValueError, TypeError) as e:
        raise InvalidCertificatePassword(
            'Failed to decrypt PEM private key with provided password: %s' % e,
        ) from e
    return key.private_bytes(Encoding.DER, PrivateFormat.PKCS8, NoEncryption())


def _plain_pem_key(block: bytes, encoding: str) -> bytes:
    try:
        key = load_pem_private_key(block, None)
    except (ValueError, TypeError) as e:
        raise MalformedCertificateBundle(
            'Failed to parse PEM private key: %s' % e,
        ) from e
    return key.private_bytes(Encoding.DER, KEY_FORMATS[encoding], NoEncryption())


def parse_pem_private_key(
        data: bytes,
        password: Optional[str] = None,
) -> Tuple[bytes, str]:
    """Returns DER and encoding of the first private key block.

    Unencrypted keys keep their encoding.  Encrypted keys, PKCS#8
    or legacy ``Proc-Type: 4,ENCRYPTED`` PKCS#1/SEC1, are decrypted
    and returned as PKCS#8."""
    for label, block, body in iter_pem_blocks(data):
        if label == ENCRYPTED_KEY_LABEL:
            return _decrypt_pem_key(block, password), keyEncodings.PKCS8
        if label not in KEY_LABELS:
            continue
        if b'Proc-Type:' in body:
            return _decrypt_pem_key(block, password), keyEncodings.PKCS8
        return _plain_pem_key(block, KEY_LABELS[label]), KEY_LABELS[label]
    raise MissingPrivateKey('No private key found in PEM file')


def load_pem_certificate(
        cert_path: str,
        key_path: str,
        password: Optional[str] = None,
) -> CertificateBundle:
    """Loads a certificate chain and private key from PEM files.

    Both paths are checked before either file is opened.  The same
    path may be passed for both when one file carries chain and key."""
    ensure_exists(cert_path)
    ensure_exists(key_path)

    certs = parse_pem_certificates(read_certificate_file(cert_path))
    logger.info(
        'Loaded %d certificate(s) from PEM file (%d bytes total)',
        len(certs), sum(len(c) for c in certs),
    )

    key_der, key_encoding = parse_pem_private_key(
        read_certificate_file(key_path), password,
    )
    logger.info('Loaded %s private key from PEM file', key_encoding)

    return CertificateBundle.create(certs, key_der, key_encoding)
