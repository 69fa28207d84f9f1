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
import os
import sys
import ssl
import time
import pprint
import signal
import logging
import threading
from typing import Any, List, Optional

from .core.identity import build_server_context
from .core.acceptor import Acceptor
from .core.listener import TcpSocketListener
from .certificate import CertificateBundle, load_certificate
from .common.flag import FlagParser, flags
from .common.utils import bytes_
from .common.constants import (
    IS_WINDOWS, DEFAULT_VERSION, DEFAULT_LOG_FILE, DEFAULT_PID_FILE,
    DEFAULT_LOG_LEVEL, DEFAULT_LOG_FORMAT, DEFAULT_OPEN_FILE_LIMIT,
    DEFAULT_CERTIFICATE, DEFAULT_PFX_FILE, DEFAULT_PASSWORD,
    DEFAULT_CERT_FILE, DEFAULT_KEY_FILE,
)
from .exception import TlsProxyException


logger = logging.getLogger(__name__)


flags.add_argument(
    'certificate',
    nargs='?',
    type=str,
    default=DEFAULT_CERTIFICATE,
    help='Certificate file.  Format is inferred from the extension: '
    '.pfx/.p12 for PKCS#12, .pem/.crt/.cer/.cert/.key for a PEM file '
    'carrying both certificate chain and private key.',
)

flags.add_argument(
    '--pfx',
    type=str,
    default=DEFAULT_PFX_FILE,
    help='Default: None. PKCS#12 bundle with server certificate chain and key. '
    'Extension is not checked.',
)

flags.add_argument(
    '--password',
    type=str,
    default=DEFAULT_PASSWORD,
    help='Default: None. Password for the PKCS#12 bundle or encrypted PEM private key.',
)

flags.add_argument(
    '--cert-file',
    type=str,
    default=DEFAULT_CERT_FILE,
    help='Default: None. PEM server certificate chain, leaf first. '
    'If used, must also pass --key-file.',
)

flags.add_argument(
    '--key-file',
    type=str,
    default=DEFAULT_KEY_FILE,
    help='Default: None. PEM server private key. '
    'If used, must also pass --cert-file.',
)

flags.add_argument(
    '--version',
    '-v',
    action='store_true',
    default=DEFAULT_VERSION,
    help='Prints tlsproxy version.',
)

flags.add_argument(
    '--log-level',
    type=str,
    default=DEFAULT_LOG_LEVEL,
    help='Valid options: DEBUG, INFO (default), WARNING, ERROR, CRITICAL. '
    'Both upper and lowercase values are allowed. '
    'You may also simply use the leading character e.g. --log-level d',
)

flags.add_argument(
    '--log-file',
    type=str,
    default=DEFAULT_LOG_FILE,
    help='Default: sys.stdout. Log file destination.',
)

flags.add_argument(
    '--log-format',
    type=str,
    default=DEFAULT_LOG_FORMAT,
    help='Log format for Python logger.',
)

flags.add_argument(
    '--open-file-limit',
    type=int,
    default=DEFAULT_OPEN_FILE_LIMIT,
    help='Default: 1024. Maximum number of files (TCP connections) '
    'that tlsproxy can open concurrently.',
)

flags.add_argument(
    '--pid-file',
    type=str,
    default=DEFAULT_PID_FILE,
    help='Default: None. Save process ID to a file.',
)


class TlsProxy:
    """TlsProxy is a context manager to control tlsproxy core.

    Start-up happens in order: certificate is loaded into a
    :class:`~tlsproxy.certificate.CertificateBundle`, a shared server
    :class:`ssl.SSLContext` is built from it, listening socket is
    bound and finally :class:`~tlsproxy.core.acceptor.Acceptor` starts
    accepting connections.  Any failure on the way raises a
    :exc:`~tlsproxy.exception.TlsProxyException` and leaves nothing
    running.
    """

    def __init__(self, input_args: Optional[List[str]] = None, **opts: Any) -> None:
        self.opts = opts
        self.flags = FlagParser.initialize(input_args, **opts)
        self.bundle: Optional[CertificateBundle] = None
        self.context: Optional[ssl.SSLContext] = None
        self.listener: Optional[TcpSocketListener] = None
        self.acceptor: Optional[Acceptor] = None

    def __enter__(self) -> 'TlsProxy':
        self.setup()
        return self

    def __exit__(self, *args: Any) -> None:
        self.shutdown()

    def setup(self) -> None:
        self.bundle = load_certificate(
            self.flags.certificate_source,
            validate_extension=self.flags.validate_extension,
        )
        self.context = build_server_context(self.bundle)
        self.listener = TcpSocketListener(flags=self.flags)
        self.listener.setup()
        # Override flags.port to match the actual port
        # we are listening upon.  This is necessary to preserve
        # the server port when `--listen ip:0` is used.
        assert self.listener._port is not None
        self.flags.port = self.listener._port
        try:
            self._write_pid_file()
            self.acceptor = Acceptor(
                sock=self.listener.socket,
                flags=self.flags,
                context=self.context,
            )
            self.acceptor.start()
        except Exception:
            self.listener.shutdown()
            raise
        logger.info(
            'Relaying TLS connections on %s:%d to backend %s:%d',
            self.flags.hostname, self.flags.port,
            self.flags.backend[0], self.flags.backend[1],
        )
        if threading.current_thread() == threading.main_thread():
            self._register_signals()

    def shutdown(self) -> None:
        if self.acceptor:
            self.acceptor.shutdown()
            self.acceptor = None
        if self.listener:
            self.listener.shutdown()
            self.listener = None
            self._delete_pid_file()

    def _write_pid_file(self) -> None:
        if self.flags.pid_file:
            with open(self.flags.pid_file, 'wb') as pid_file:
                pid_file.write(bytes_(os.getpid()))

    def _delete_pid_file(self) -> None:
        if self.flags.pid_file \
                and os.path.exists(self.flags.pid_file):
            os.remove(self.flags.pid_file)

    def _register_signals(self) -> None:
        signal.signal(signal.SIGINT, self._handle_exit_signal)
        signal.signal(signal.SIGTERM, self._handle_exit_signal)
        if not IS_WINDOWS:
            if hasattr(signal, 'SIGINFO'):
                signal.signal(      # pragma: no cover
                    signal.SIGINFO,       # pylint: disable=E1101
                    self._handle_siginfo,
                )
            signal.signal(signal.SIGHUP, self._handle_exit_signal)

    @staticmethod
    def _handle_exit_signal(signum: int, _frame: Any) -> None:
        logger.debug('Received signal %d' % signum)
        sys.exit(0)

    def _handle_siginfo(self, _signum: int, _frame: Any) -> None:
        pprint.pprint(self.flags.__dict__)  # pragma: no cover


def sleep_loop(p: Optional[TlsProxy] = None) -> None:
    while True:
        try:
            time.sleep(1)
        except KeyboardInterrupt:
            break


def main(**opts: Any) -> None:
    with TlsProxy(sys.argv[1:], **opts) as p:
        sleep_loop(p)


def entry_point() -> None:
    try:
        main()
    except TlsProxyException as e:
        logger.error(str(e))
        sys.exit(1)
