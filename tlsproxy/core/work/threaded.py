# -*- coding: utf-8 -*-
"""
    tlsproxy
    ~~~~~~~~
    TLS terminating reverse proxy.  Exposes a plaintext TCP backend
    over TLS without modifying it.

    :copyright: (c) 2013-present by Abhinav Singh and contributors.
    :license: BSD, see LICENSE for more details.
"""
import socket
import argparse
import threading

from typing import TYPE_CHECKING, Any, Optional, Tuple, Type

from ...common.types import HostPort

if TYPE_CHECKING:   # pragma: no cover
    from .work import Work


def start_threaded_work(
        flags: argparse.Namespace,
        work_klass: Type['Work[Any]'],
        conn: socket.socket,
        addr: Optional[HostPort],
        **kwargs: Any,
) -> Tuple['Work[Any]', threading.Thread]:
    """Utility method to start a work in a new thread.

    Additional ``kwargs`` are passed through to ``work_klass``."""
    work = work_klass(
        work_klass.create(conn=conn, addr=addr),
        flags=flags,
        **kwargs,
    )
    # Daemon threads, in-flight connections are dropped on process exit.
    thread = threading.Thread(
        target=work.run,
        name='work#{0}'.format(work.uid[:8]),
    )
    thread.daemon = True
    thread.start()
    return (work, thread)
