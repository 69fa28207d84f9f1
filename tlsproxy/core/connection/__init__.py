# -*- coding: utf-8 -*-
"""
    tlsproxy
    ~~~~~~~~
    TLS terminating reverse proxy.  Exposes a plaintext TCP backend
    over TLS without modifying it.

    :copyright: (c) 2013-present by Abhinav Singh and contributors.
    :license: BSD, see LICENSE for more details.
"""
from .types import tcpConnectionTypes, connectionStates
from .client import TcpClientConnection
from .server import TcpServerConnection
from .connection import TcpConnection, TcpConnectionUninitializedException


__all__ = [
    'TcpConnection',
    'TcpConnectionUninitializedException',
    'TcpServerConnection',
    'TcpClientConnection',
    'tcpConnectionTypes',
    'connectionStates',
]
