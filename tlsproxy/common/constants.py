# -*- coding: utf-8 -*-
"""
    tlsproxy
    ~~~~~~~~
    TLS terminating reverse proxy.  Exposes a plaintext TCP backend
    over TLS without modifying it.

    :copyright: (c) 2013-present by Abhinav Singh and contributors.
    :license: BSD, see LICENSE for more details.
"""
import ssl
import platform
import ipaddress
from typing import Tuple


SYS_PLATFORM = platform.system()
IS_WINDOWS = SYS_PLATFORM == 'Windows'

# Certificate file extensions, lower case and without the leading dot.
PFX_EXTENSIONS: Tuple[str, ...] = ('pfx', 'p12')
PEM_EXTENSIONS: Tuple[str, ...] = ('pem', 'crt', 'cer', 'cert', 'key')

# Defaults
DEFAULT_BACKLOG = 100
DEFAULT_BUFFER_SIZE = 128 * 1024
DEFAULT_MAX_SEND_SIZE = 64 * 1024
DEFAULT_CLIENT_RECVBUF_SIZE = DEFAULT_BUFFER_SIZE
DEFAULT_SERVER_RECVBUF_SIZE = DEFAULT_BUFFER_SIZE
DEFAULT_CERTIFICATE = None
DEFAULT_PFX_FILE = None
DEFAULT_PASSWORD = None
DEFAULT_CERT_FILE = None
DEFAULT_KEY_FILE = None
DEFAULT_BACKEND = None
DEFAULT_IPV4_HOSTNAME = ipaddress.IPv4Address('127.0.0.1')
DEFAULT_PORT = 8443
DEFAULT_LISTEN = '%s:%d' % (DEFAULT_IPV4_HOSTNAME, DEFAULT_PORT)
DEFAULT_LOG_FILE = None
DEFAULT_LOG_FORMAT = '%(asctime)s - pid:%(process)d [%(levelname)-.1s] %(module)s.%(funcName)s:%(lineno)d - %(message)s'
DEFAULT_LOG_LEVEL = 'INFO'
DEFAULT_OPEN_FILE_LIMIT = 1024
DEFAULT_PID_FILE = None
DEFAULT_TIMEOUT = 10.0
DEFAULT_VERSION = False
# 25 milliseconds to keep the relay loops responsive
# to shutdown without spinning.
DEFAULT_SELECTOR_SELECT_TIMEOUT = 25 / 1000
DEFAULT_ACCEPTOR_SELECT_TIMEOUT = 1

DEFAULT_SSL_CONTEXT_OPTIONS = ssl.OP_NO_COMPRESSION
DEFAULT_MINIMUM_TLS_VERSION = ssl.TLSVersion.TLSv1_2
