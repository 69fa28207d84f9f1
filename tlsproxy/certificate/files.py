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
import logging

from ..exception import CertificateFileNotFound, CertificateFileEmpty


logger = logging.getLogger(__name__)


def file_extension(path: str) -> str:
    """Lower case extension without the leading dot, empty if none."""
    return os.path.splitext(path)[1][1:].lower()


def ensure_exists(path: str) -> None:
    if not os.path.exists(path):
        raise CertificateFileNotFound(path)
    try:
        os.stat(path)
    except OSError as e:
        raise CertificateFileNotFound(path, reason=e.strerror or str(e)) from e
    if os.path.isdir(path):
        raise CertificateFileNotFound(path, reason='Is a directory')


def read_certificate_file(path: str) -> bytes:
    """Reads a certificate or key file, rejecting zero length files."""
    try:
        with open(path, 'rb') as f:
            data = f.read()
    except FileNotFoundError as e:
        raise CertificateFileNotFound(path) from e
    except OSError as e:
        raise CertificateFileNotFound(path, reason=e.strerror or str(e)) from e
    if len(data) == 0:
        raise CertificateFileEmpty(path)
    logger.info('Read %d bytes from %s', len(data), path)
    return data
