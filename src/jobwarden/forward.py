"""Data forwarding stage: copy job data from stdin to stdout, unmodified.

Run as ``python -m jobwarden.forward``. The supervisor places this process
between its own input and the target's stdin.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import BinaryIO

from .config.settings import DEVICE_URI_ENV
from .logging_config import setup_logging

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024


def forward_stream(source: BinaryIO, sink: BinaryIO, chunk_size: int = CHUNK_SIZE) -> int:
    """Copy *source* to *sink* until EOF and return the number of bytes copied.

    Reads return as soon as some data is available so the target sees data
    while it is still arriving. ``BrokenPipeError`` propagates when the
    reader goes away.
    """
    read = getattr(source, "read1", source.read)
    copied = 0
    while True:
        chunk = read(chunk_size)
        if not chunk:
            break
        sink.write(chunk)
        sink.flush()
        copied += len(chunk)
    return copied


def _scheme() -> str:
    scheme, sep, _ = os.environ.get(DEVICE_URI_ENV, "").partition(":")
    return scheme if sep and scheme else "forward"


def main() -> int:
    setup_logging(_scheme())
    try:
        copied = forward_stream(sys.stdin.buffer, sys.stdout.buffer)
    except BrokenPipeError:
        # Point stdout at /dev/null so the interpreter's final flush cannot fail again.
        devnull = os.open(os.devnull, os.O_WRONLY)
        os.dup2(devnull, sys.stdout.fileno())
        logger.warning("Target stopped reading job data before the end of input")
        return 1
    logger.debug("Forwarded %d bytes of job data", copied)
    return 0


if __name__ == "__main__":
    sys.exit(main())
