# -*- coding: utf-8 -*-
"""
    tlsproxy
    ~~~~~~~~
    TLS terminating reverse proxy.  Exposes a plaintext TCP backend
    over TLS without modifying it.

    :copyright: (c) 2013-present by Abhinav Singh and contributors.
    :license: BSD, see LICENSE for more details.
"""
import sys
import argparse
import ipaddress

from typing import Optional, List, Any, Tuple, cast

from .types import HostPort
from .utils import parse_host_port, set_open_file_limit
from .logger import Logger
from .version import __version__
from ..exception import InvalidConfiguration
from ..certificate import CertificateSource, PfxSource, PemSource, source_from_path


class FlagParser:
    """Wrapper around argparse module.

    Import `flag.flags` and use `add_argument` API
    to define custom flags within respective Python files.

    Best Practice:
    1. Define flags at the top of your class files.
    2. DO NOT add flags within your class `__init__` method OR
       within class methods.  It MAY result into runtime exception,
       especially if your class is initialized multiple times or if
       class method registering the flag gets invoked multiple times.
    """

    def __init__(self) -> None:
        self.args: Optional[argparse.Namespace] = None
        self.actions: List[str] = []
        self.parser = argparse.ArgumentParser(
            description='tlsproxy v%s : TLS terminating reverse proxy' % __version__,
        )

    def add_argument(self, *args: Any, **kwargs: Any) -> argparse.Action:
        """Register a flag."""
        action = self.parser.add_argument(*args, **kwargs)
        self.actions.append(action.dest)
        return action

    def parse_args(
            self, input_args: Optional[List[str]],
    ) -> argparse.Namespace:
        """Parse flags from input arguments."""
        self.args = self.parser.parse_args(input_args)
        return self.args

    @staticmethod
    def initialize(
        input_args: Optional[List[str]] = None,
        **opts: Any,
    ) -> argparse.Namespace:
        """Parses flags and resolves derived values.

        Keyword ``opts`` take precedence over parsed flags, which is how
        embedded usage and tests configure the proxy.  Raises
        :exc:`InvalidConfiguration` for flag combinations that cannot run.
        """
        if input_args is None:
            input_args = []

        # Parse flags
        args = flags.parse_args(input_args)

        # Print version and exit
        if args.version:
            print(__version__)
            sys.exit(0)

        # Setup logging module
        log_level = opts.get('log_level', args.log_level)
        try:
            Logger.setup(
                opts.get('log_file', args.log_file),
                log_level,
                opts.get('log_format', args.log_format),
            )
        except (KeyError, IndexError) as e:
            raise InvalidConfiguration(
                'Invalid --log-level %r' % log_level,
            ) from e

        # Setup limits
        set_open_file_limit(args.open_file_limit)

        # Listening address
        hostname, port = FlagParser._host_port('--listen', args.listen)
        args.hostname = ipaddress.ip_address(opts.get('hostname', hostname))
        args.port = cast(int, opts.get('port', port))

        # Backend address
        backend = opts.get('backend', args.backend)
        if backend is None:
            raise InvalidConfiguration('--backend ip:port is required')
        args.backend = cast(
            HostPort,
            tuple(backend) if isinstance(backend, (tuple, list))
            else FlagParser._host_port('--backend', backend),
        )

        # Certificate source
        args.password = cast(Optional[str], opts.get('password', args.password))
        source = opts.get('certificate_source')
        if source is not None:
            args.certificate_source = cast(CertificateSource, source)
            args.validate_extension = cast(
                bool, opts.get('validate_extension', False),
            )
        else:
            args.certificate_source, args.validate_extension = \
                FlagParser.resolve_certificate_source(
                    certificate=opts.get('certificate', args.certificate),
                    pfx=opts.get('pfx', args.pfx),
                    cert_file=opts.get('cert_file', args.cert_file),
                    key_file=opts.get('key_file', args.key_file),
                    password=args.password,
                )

        args.backlog = cast(int, opts.get('backlog', args.backlog))
        timeout = opts.get('timeout', args.timeout)
        args.timeout = cast(
            Optional[float],
            float(timeout) if timeout else None,
        )
        args.client_recvbuf_size = cast(
            int,
            opts.get(
                'client_recvbuf_size',
                args.client_recvbuf_size,
            ),
        )
        args.server_recvbuf_size = cast(
            int,
            opts.get(
                'server_recvbuf_size',
                args.server_recvbuf_size,
            ),
        )
        args.max_sendbuf_size = cast(
            int,
            opts.get(
                'max_sendbuf_size',
                args.max_sendbuf_size,
            ),
        )
        args.pid_file = cast(
            Optional[str], opts.get(
                'pid_file', args.pid_file,
            ),
        )
        return args

    @staticmethod
    def resolve_certificate_source(
            certificate: Optional[str] = None,
            pfx: Optional[str] = None,
            cert_file: Optional[str] = None,
            key_file: Optional[str] = None,
            password: Optional[str] = None,
    ) -> Tuple[CertificateSource, bool]:
        """Returns certificate source and whether extensions must be validated.

        Exactly one of positional certificate, --pfx or
        --cert-file/--key-file pair must be provided.  Only the
        positional form validates file extensions."""
        if (cert_file is None) != (key_file is None):
            raise InvalidConfiguration(
                '--cert-file and --key-file must be used together',
            )
        provided = [
            name for name, value in (
                ('certificate', certificate),
                ('--pfx', pfx),
                ('--cert-file/--key-file', cert_file),
            ) if value is not None
        ]
        if len(provided) == 0:
            raise InvalidConfiguration(
                'No certificate provided.  Pass a certificate path, '
                '--pfx or --cert-file with --key-file',
            )
        if len(provided) > 1:
            raise InvalidConfiguration(
                'Conflicting certificate sources: %s' % ', '.join(provided),
            )
        if certificate is not None:
            return source_from_path(certificate, password), True
        if pfx is not None:
            return PfxSource(pfx, password), False
        assert cert_file is not None and key_file is not None
        return PemSource(cert_file, key_file, password), False

    @staticmethod
    def _host_port(flag: str, value: str) -> HostPort:
        try:
            return parse_host_port(value)
        except ValueError as e:
            raise InvalidConfiguration('Invalid %s: %s' % (flag, e)) from e


flags = FlagParser()
