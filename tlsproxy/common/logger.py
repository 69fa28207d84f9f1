# -*- coding: utf-8 -*-
"""
    tlsproxy
    ~~~~~~~~
    TLS terminating reverse proxy.  Exposes a plaintext TCP backend
    over TLS without modifying it.

    :copyright: (c) 2013-present by Abhinav Singh and contributors.
    :license: BSD, see LICENSE for more details.
"""
import logging
from typing import Optional

from .constants import DEFAULT_LOG_FILE, DEFAULT_LOG_LEVEL, DEFAULT_LOG_FORMAT


SINGLE_CHAR_TO_LEVEL = {
    'D': 'DEBUG',
    'I': 'INFO',
    'W': 'WARNING',
    'E': 'ERROR',
    'C': 'CRITICAL',
}


def single_char_to_level(char: str) -> int:
    """Resolves ``d``, ``debug``, ``DEBUG`` etc. into a logging level.

    Raises KeyError for an unknown level."""
    level: int = getattr(logging, SINGLE_CHAR_TO_LEVEL[char.upper()[0]])
    return level


class Logger:
    """Common logging utilities and setup."""

    @staticmethod
    def setup(
            log_file: Optional[str] = DEFAULT_LOG_FILE,
            log_level: str = DEFAULT_LOG_LEVEL,
            log_format: str = DEFAULT_LOG_FORMAT,
    ) -> int:
        """Configures the root logger once per process.

        Subsequent calls only adjust the level, which keeps embedded
        and test usage from stacking handlers."""
        level = single_char_to_level(log_level)
        root = logging.getLogger()
        if root.handlers:
            root.setLevel(level)
            return level
        if log_file:    # pragma: no cover
            logging.basicConfig(
                filename=log_file,
                filemode='a',
                level=level,
                format=log_format,
            )
        else:
            logging.basicConfig(
                level=level,
                format=log_format,
            )
        return level
