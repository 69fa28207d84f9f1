# -*- coding: utf-8 -*-
"""
    tlsproxy
    ~~~~~~~~
    TLS terminating reverse proxy.  Exposes a plaintext TCP backend
    over TLS without modifying it.

    :copyright: (c) 2013-present by Abhinav Singh and contributors.
    :license: BSD, see LICENSE for more details.
"""
from typing import NamedTuple


TcpConnectionTypes = NamedTuple(
    'TcpConnectionTypes', [
        ('SERVER', int),
        ('CLIENT', int),
    ],
)
tcpConnectionTypes = TcpConnectionTypes(1, 2)

# Lifecycle of a proxied connection.  Transitions only move forward,
# any state may jump straight to CLOSED.
ConnectionStates = NamedTuple(
    'ConnectionStates', [
        ('ACCEPTED', int),
        ('HANDSHAKING', int),
        ('DIALING', int),
        ('RELAYING', int),
        ('CLOSED', int),
    ],
)
connectionStates = ConnectionStates(1, 2, 3, 4, 5)
