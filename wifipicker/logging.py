"""Logging setup for the wifipicker command line."""

from __future__ import annotations

import logging
import sys

LOG_NAMESPACE = 'wifipicker'


def get_logger(name: str) -> logging.Logger:
    """Logger under the wifipicker namespace."""
    if name != LOG_NAMESPACE and not name.startswith(LOG_NAMESPACE + '.'):
        name = f"{LOG_NAMESPACE}.{name}"
    return logging.getLogger(name)


def setup_logging(verbose: bool = False, quiet: bool = False) -> None:
    """
    Send wifipicker logs to stderr.

    The default level is WARNING so the menu is not interleaved with
    progress chatter; -v shows everything, -q only errors.
    """
    if quiet:
        log_level = logging.ERROR
    elif verbose:
        log_level = logging.DEBUG
    else:
        log_level = logging.WARNING

    logger = logging.getLogger(LOG_NAMESPACE)
    logger.setLevel(log_level)

    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    handler = logging.StreamHandler(stream=sys.stderr)
    handler.setLevel(log_level)
    if verbose:
        handler.setFormatter(logging.Formatter('%(levelname)s %(name)s: %(message)s'))
    else:
        handler.setFormatter(logging.Formatter('%(levelname)s: %(message)s'))

    logger.addHandler(handler)
    logger.propagate = False
