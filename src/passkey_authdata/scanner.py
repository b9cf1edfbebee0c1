"""Last-resort search for a P-256 coordinate pair in raw authenticator data.

Only used when structured decoding fails. The result is a guess: any 64
bytes whose halves are not blank pass, so callers must not treat it as a
verified key.
"""

import logging

from .authdata import HEADER_LENGTH

logger = logging.getLogger(__name__)

COORDINATE_LENGTH = 32
WINDOW_LENGTH = 2 * COORDINATE_LENGTH


def _is_blank(chunk):
    return chunk.count(0x00) == len(chunk) or chunk.count(0xFF) == len(chunk)


def scan_for_coordinates(raw):
    """Return the first plausible (x, y) pair after the header, or None."""
    data = bytes(raw)
    for offset in range(HEADER_LENGTH, len(data) - WINDOW_LENGTH + 1):
        x = data[offset:offset + COORDINATE_LENGTH]
        y = data[offset + COORDINATE_LENGTH:offset + WINDOW_LENGTH]
        if not _is_blank(x) and not _is_blank(y):
            logger.debug("Candidate coordinates found at offset %d", offset)
            return x, y
    logger.debug("No candidate coordinates in %d bytes", len(data))
    return None
