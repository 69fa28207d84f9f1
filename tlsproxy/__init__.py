# -*- coding: utf-8 -*-
"""
    tlsproxy
    ~~~~~~~~
    TLS terminating reverse proxy.  Exposes a plaintext TCP backend
    over TLS without modifying it.

    :copyright: (c) 2013-present by Abhinav Singh and contributors.
    :license: BSD, see LICENSE for more details.
"""
from .proxy import TlsProxy, main, sleep_loop, entry_point
from .testing import TestCase


__all__ = [
    # PyPi package entry_point, installed as ``tlsproxy`` command.
    'entry_point',
    # Embed tlsproxy within another program.
    'main',
    # Unit testing against a running tlsproxy.
    'TestCase',
    'TlsProxy',
    # Utility exposed for demos
    'sleep_loop',
]
