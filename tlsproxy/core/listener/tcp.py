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
import logging
from typing import Any, Optional

from .base import BaseListener
from ...common.flag import flags
from ...common.constants import DEFAULT_LISTEN
from ...exception import ListenerBindFailed


flags.add_argument(
    '--listen',
    type=str,
    default=DEFAULT_LISTEN,
    help='Default: ' + DEFAULT_LISTEN + '.  ip:port to accept TLS connections on.  '
    'Use port 0 for an ephemeral port.  Bracket IPv6 addresses e.g. [::1]:8443.',
)

logger = logging.getLogger(__name__)


class TcpSocketListener(BaseListener):
    """Tcp listener."""

    def __init__(self, *args: Any, port: Optional[int] = None, **kwargs: Any) -> None:
        # Port if passed will be used, otherwise
        # flag port value will be used.
        self.port = port
        # Set after binding to a port.
        #
        # Stored here separately for ephemeral port discovery.
        self._port: Optional[int] = None
        super().__init__(*args, **kwargs)

    def listen(self) -> socket.socket:
        sock = socket.socket(
            socket.AF_INET6 if self.flags.hostname.version == 6 else socket.AF_INET,
            socket.SOCK_STREAM,
        )
        port = self.port if self.port is not None else self.flags.port
        try:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)
            sock.bind((str(self.flags.hostname), port))
            sock.listen(self.flags.backlog)
        except OSError as e:
            sock.close()
            raise ListenerBindFailed(
                str(self.flags.hostname), port, e.strerror or str(e),
            ) from e
        sock.setblocking(False)
        self._port = sock.getsockname()[1]
        logger.info(
            'Listening on %s:%s' %
            (self.flags.hostname, self._port),
        )
        return sock
