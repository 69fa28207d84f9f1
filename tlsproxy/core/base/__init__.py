# -*- coding: utf-8 -*-
"""
    tlsproxy
    ~~~~~~~~
    TLS terminating reverse proxy.  Exposes a plaintext TCP backend
    over TLS without modifying it.

    :copyright: (c) 2013-present by Abhinav Singh and contributors.
    :license: BSD, see LICENSE for more details.

    .. spelling::

       Submodules
"""
from .tcp_server import BaseTcpServerHandler
from .tcp_tunnel import TlsRelayHandler

__all__ = [
    'BaseTcpServerHandler',
    'TlsRelayHandler',
]
