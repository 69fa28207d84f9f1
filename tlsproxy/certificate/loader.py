# -*- coding: utf-8 -*-
"""
    tlsproxy
    ~~~~~~~~
    TLS terminating reverse proxy.  Exposes a plaintext TCP backend
    over TLS without modifying it.

    :copyright: (c) 2013-present by Abhinav Singh and contributors.
    :license: BSD, see LICENSE for more details.

    .. spelling::

       pfx
"""
import logging
from typing import Optional

from .pem import load_pem_certificate
from .files import ensure_exists, file_extension, read_certificate_file
from .bundle import CertificateBundle, CertificateSource, PfxSource, PemSource, certTypes
from .pkcs12 import parse_pfx_bytes
from ..common.constants import PFX_EXTENSIONS, PEM_EXTENSIONS
from ..exception import UnsupportedCertificateExtension


logger = logging.getLogger(__name__)


def detect_cert_type(path: str) -> int:
    """Detect certificate type by file extension."""
    ext = file_extension(path)
    if ext in PFX_EXTENSIONS:
        return certTypes.PFX
    if ext in PEM_EXTENSIONS:
        return certTypes.PEM
    raise UnsupportedCertificateExtension(ext)


def source_from_path(path: str, password: Optional[str] = None) -> CertificateSource:
    """Builds a source for a single positional certificate path.

    A PEM path must carry both the certificate chain and the key."""
    if detect_cert_type(path) == certTypes.PFX:
        return PfxSource(path, password)
    return PemSource(path, path, password)


def load_pfx_certificate(
        path: str,
        password: Optional[str] = None,
        validate_extension: bool = False,
) -> CertificateBundle:
    """Load certificate and key from a PKCS#12 file."""
    ensure_exists(path)

    if validate_extension:
        ext = file_extension(path)
        if ext not in PFX_EXTENSIONS:
            raise UnsupportedCertificateExtension(
                ext,
                "Invalid PFX file extension '%s'. Expected .pfx or .p12" % ext,
            )

    data = read_certificate_file(path)

    password = password or ''
    logger.info(
        'Attempting to decrypt PFX with %spassword',
        'empty ' if password == '' else '',
    )
    return parse_pfx_bytes(data, password)


def load_certificate(
        source: CertificateSource,
        validate_extension: bool = False,
) -> CertificateBundle:
    """Loads a :class:`CertificateBundle` from either source variant.

    With ``validate_extension``, file extensions must match the
    source variant.  Only positional mode enables it."""
    if isinstance(source, PfxSource):
        bundle = load_pfx_certificate(
            source.path, source.password,
            validate_extension=validate_extension,
        )
    elif isinstance(source, PemSource):
        if validate_extension:
            for path in (source.cert_path, source.key_path):
                ext = file_extension(path)
                if ext not in PEM_EXTENSIONS:
                    raise UnsupportedCertificateExtension(ext)
        bundle = load_pem_certificate(
            source.cert_path, source.key_path, source.password,
        )
    else:
        raise TypeError('Unknown certificate source %r' % (source,))
    logger.info(
        'Loaded certificate chain of %d certificate(s)', len(bundle.chain),
    )
    return bundle
