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
import base64
import logging
import tempfile
from typing import Tuple

from ..certificate import CertificateBundle, keyEncodings
from ..common.constants import DEFAULT_SSL_CONTEXT_OPTIONS, DEFAULT_MINIMUM_TLS_VERSION
from ..exception import TlsConfigurationFailed


logger = logging.getLogger(__name__)

KEY_PEM_LABELS = {
    keyEncodings.PKCS8: 'PRIVATE KEY',
    keyEncodings.PKCS1: 'RSA PRIVATE KEY',
    keyEncodings.SEC1: 'EC PRIVATE KEY',
}


def _armor(label: str, der: bytes) -> str:
    b64 = base64.b64encode(der).decode('ascii')
    lines = [b64[i:i + 64] for i in range(0, len(b64), 64)]
    return '-----BEGIN %s-----\n%s\n-----END %s-----\n' % (
        label, '\n'.join(lines), label,
    )


def bundle_to_pem(bundle: CertificateBundle) -> Tuple[str, str]:
    """Returns (certificate chain PEM, private key PEM)."""
    chain = ''.join(ssl.DER_cert_to_PEM_cert(cert) for cert in bundle.chain)
    return chain, _armor(KEY_PEM_LABELS[bundle.key_encoding], bundle.private_key)


def _write_private(path: str, content: str) -> None:
    fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_EXCL, 0o600)
    with os.fdopen(fd, 'w') as f:
        f.write(content)


def build_server_context(bundle: CertificateBundle) -> ssl.SSLContext:
    """Builds the server side TLS context shared by every connection.

    No client certificate is requested.  OpenSSL verifies that the
    private key matches the leaf certificate while loading, a mismatch
    is raised as :exc:`TlsConfigurationFailed`.

    ``ssl`` loads identities only from files, hence chain and key are
    written into a private temporary directory removed right after.
    """
    ctx = ssl.SSLContext(ssl.PROTOCOL_TLS_SERVER)
    ctx.options |= DEFAULT_SSL_CONTEXT_OPTIONS
    ctx.minimum_version = DEFAULT_MINIMUM_TLS_VERSION
    ctx.verify_mode = ssl.CERT_NONE
    chain_pem, key_pem = bundle_to_pem(bundle)
    with tempfile.TemporaryDirectory(prefix='tlsproxy-') as tmpdir:
        certfile = os.path.join(tmpdir, 'chain.pem')
        keyfile = os.path.join(tmpdir, 'key.pem')
        try:
            _write_private(certfile, chain_pem)
            _write_private(keyfile, key_pem)
            ctx.load_cert_chain(certfile=certfile, keyfile=keyfile)
        except (ssl.SSLError, OSError) as e:
            raise TlsConfigurationFailed(
                'Failed to configure TLS identity: %s' % e,
            ) from e
    logger.info(
        'TLS identity configured with %d certificate(s)', len(bundle.chain),
    )
    return ctx
