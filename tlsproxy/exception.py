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
from typing import Any, Optional


class TlsProxyException(Exception):
    """Top level :exc:`TlsProxyException` exception class.

    Exceptions raised during start-up (configuration, certificate loading,
    TLS context creation and listener binding) are fatal and surface at the
    process entry point.  Exceptions raised while serving a connection
    inherit :exc:`ConnectionException` and never leave that connection.
    """

    def __init__(self, message: Optional[str] = None, **kwargs: Any) -> None:
        super().__init__(message or 'Reason unknown')


class InvalidConfiguration(TlsProxyException):
    """Flags do not describe a runnable proxy."""
    pass


class CertificateException(TlsProxyException):
    """Base class for certificate ingestion failures."""
    pass


class CertificateFileNotFound(CertificateException):

    def __init__(self, path: str, reason: Optional[str] = None, **kwargs: Any) -> None:
        self.path = path
        message = 'File not found: %s' % path if reason is None \
            else 'Cannot read file %s: %s' % (path, reason)
        super().__init__(message, **kwargs)


class CertificateFileEmpty(CertificateException):

    def __init__(self, path: str, **kwargs: Any) -> None:
        self.path = path
        super().__init__('File is empty: %s' % path, **kwargs)


class UnsupportedCertificateExtension(CertificateException):
    """Raised when a file extension does not match the expected certificate format.

    ``extension`` is lower case without the leading dot, empty when
    the path has no extension at all."""

    def __init__(self, extension: str, message: Optional[str] = None, **kwargs: Any) -> None:
        self.extension = extension
        if message is None:
            message = 'Unsupported certificate file extension: .%s' % extension \
                if extension else 'Certificate file has no extension'
        super().__init__(message, **kwargs)


class MalformedCertificateBundle(CertificateException):
    pass


class CertificatePasswordRequired(CertificateException):
    """Decryption failed and no password was supplied."""
    pass


class InvalidCertificatePassword(CertificateException):
    """Decryption failed with the supplied password."""
    pass


class MissingPrivateKey(CertificateException):
    pass


class NoCertificatesFound(CertificateException):
    pass


class TlsConfigurationFailed(TlsProxyException):
    """Certificate chain and private key were rejected by the TLS layer."""
    pass


class ListenerBindFailed(TlsProxyException):

    def __init__(self, host: str, port: int, reason: str, **kwargs: Any) -> None:
        self.host = host
        self.port = port
        self.reason = reason
        super().__init__('Unable to listen on %s:%d: %s' % (host, port, reason), **kwargs)


class ConnectionException(TlsProxyException):
    """Base class for failures scoped to a single proxied connection."""
    pass


class TlsHandshakeFailed(ConnectionException):

    def __init__(self, address: str, reason: str, **kwargs: Any) -> None:
        self.address = address
        self.reason = reason
        super().__init__('TLS handshake with %s failed: %s' % (address, reason), **kwargs)


class BackendConnectionFailed(ConnectionException):
    """Raised when unable to establish connection to the backend server."""

    def __init__(self, host: str, port: int, reason: str, **kwargs: Any) -> None:
        self.host = host
        self.port = port
        self.reason = reason
        super().__init__('%s %s:%d %s' % (self.__class__.__name__, host, port, reason), **kwargs)


class RelayIoError(ConnectionException):

    def __init__(self, tag: str, reason: str, **kwargs: Any) -> None:
        self.tag = tag
        self.reason = reason
        super().__init__('I/O error on %s stream: %s' % (tag, reason), **kwargs)
