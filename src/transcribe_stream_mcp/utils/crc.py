"""CRC-32 checksum used by the event-stream prelude and message trailer.

Standard reflected CRC-32 (polynomial 0xEDB88320): the register starts
with all bits set and the reported value is the bit-complemented register.
"""

from __future__ import annotations

POLYNOMIAL = 0xEDB88320
INITIAL = 0xFFFFFFFF


def _make_table() -> list[int]:
    table = []
    for n in range(256):
        c = n
        for _ in range(8):
            if c & 1:
                c = POLYNOMIAL ^ (c >> 1)
            else:
                c >>= 1
        table.append(c)
    return table


CRC32_TABLE = _make_table()


class CRC32:
    """Incremental CRC-32.

    Feeding the same bytes in any chunking yields the same checksum::

        crc = CRC32()
        crc.update(b"te")
        crc.update(b"st")
        assert crc.checksum == crc32(b"test")
    """

    def __init__(self) -> None:
        self._register = INITIAL

    @property
    def checksum(self) -> int:
        return self._register ^ INITIAL

    def update(self, data: bytes) -> int:
        """Feed ``data`` into the checksum and return the value so far."""
        register = self._register
        for byte in data:
            register = CRC32_TABLE[(register ^ byte) & 0xFF] ^ (register >> 8)
        self._register = register
        return self.checksum

    def reset(self) -> None:
        """Start a new, independent checksum."""
        self._register = INITIAL


def crc32(data: bytes) -> int:
    """Compute the CRC-32 of ``data`` in one call."""
    return CRC32().update(data)
