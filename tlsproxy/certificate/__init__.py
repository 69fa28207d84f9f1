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
       pfx
       pkcs
"""
from .bundle import (
    CertificateBundle, CertificateSource, PfxSource, PemSource,
    certTypes, keyEncodings,
)
from .pem import load_pem_certificate, parse_pem_certificates, parse_pem_private_key
from .pkcs12 import parse_pfx_bytes
from .loader import detect_cert_type, load_certificate, load_pfx_certificate, source_from_path


__all__ = [
    'CertificateBundle',
    'CertificateSource',
    'PfxSource',
    'PemSource',
    'certTypes',
    'keyEncodings',
    'detect_cert_type',
    'load_certificate',
    'load_pfx_certificate',
    'load_pem_certificate',
    'parse_pem_certificates',
    'parse_pem_private_key',
    'parse_pfx_bytes',
    'source_from_path',
]
