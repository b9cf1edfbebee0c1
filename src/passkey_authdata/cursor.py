"""Forward-only reader over an immutable byte buffer."""

import struct

from .errors import OutOfBoundsError


class ByteCursor:
    """Bounds-checked sequential reads over a byte buffer.

    Every read advances the offset. A read that would pass the end of the
    buffer raises OutOfBoundsError and leaves the offset unchanged.
    """

    def __init__(self, data, offset=0):
        self._data = bytes(data)
        if not 0 <= offset <= len(self._data):
            raise OutOfBoundsError(
                f"Start offset {offset} outside buffer of {len(self._data)} bytes"
            )
        self._offset = offset

    @property
    def offset(self):
        return self._offset

    @property
    def remaining(self):
        return len(self._data) - self._offset

    def read_bytes(self, length):
        """Read exactly `length` bytes."""
        if length < 0 or length > self.remaining:
            raise OutOfBoundsError(
                f"Cannot read {length} bytes at offset {self._offset}, "
                f"{self.remaining} remaining"
            )
        start = self._offset
        self._offset += length
        return self._data[start:self._offset]

    def read_rest(self):
        """Read everything left in the buffer (possibly nothing)."""
        return self.read_bytes(self.remaining)

    def read_uint8(self):
        return self.read_bytes(1)[0]

    def read_uint16_be(self):
        return struct.unpack(">H", self.read_bytes(2))[0]

    def read_uint32_be(self):
        return struct.unpack(">I", self.read_bytes(4))[0]
