"""Extract one GeoIP or GeoSite entry from a geodata list file without parsing it all.

Entries are length-delimited messages under field 1 of the list, and each
entry's country code is a length-delimited string under its own field 1.
"""

from __future__ import annotations

import os
from typing import BinaryIO

_LEN_TAG = 0x0A  # field 1, wire type 2
_MAX_VARINT_BYTES = 10


class GeodataError(Exception):
    """Base class for geodata decoding errors."""

    default_message = "geodata error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)


class FailedToReadBytesError(GeodataError):
    default_message = "failed to read bytes"


class FailedToReadExpectedLenBytesError(GeodataError):
    default_message = "failed to read expected length of bytes"


class InvalidGeodataFileError(GeodataError):
    default_message = "invalid geodata file"


class InvalidGeodataVarintLengthError(GeodataError):
    default_message = "invalid geodata varint length"


class CodeNotFoundError(GeodataError):
    default_message = "code not found"


def _consume_varint(data: bytes) -> tuple[int, int]:
    value = 0
    for index, byte in enumerate(data):
        if index >= _MAX_VARINT_BYTES:
            break
        if index == _MAX_VARINT_BYTES - 1 and byte > 1:
            break
        value |= (byte & 0x7F) << (7 * index)
        if byte < 0x80:
            return value, index + 1
    raise InvalidGeodataVarintLengthError()


def emit_bytes(f: BinaryIO, code: str) -> bytes:
    """Return the raw bytes of the entry whose country code equals ``code`` (any case)."""
    wanted = code.casefold()
    count = 1
    inner = False
    pending = bytearray()
    advance = 1
    entry_len = code_len = code_len_size = 0

    while True:
        try:
            chunk = f.read(advance)
        except OSError as exc:
            raise FailedToReadBytesError() from exc
        if advance and not chunk:
            raise CodeNotFoundError()
        if len(chunk) != advance:
            raise FailedToReadExpectedLenBytesError()

        if count in (1, 3):
            if chunk[0] != _LEN_TAG:
                raise InvalidGeodataFileError()
            advance = 1
            count += 1
        elif count in (2, 4):
            pending += chunk
            if chunk[0] > 0x7F:
                advance = 1
                continue
            value, size = _consume_varint(bytes(pending))
            pending.clear()
            if not inner:
                inner = True
                entry_len = value
                advance = 1
            else:
                inner = False
                code_len = value
                code_len_size = size
                advance = code_len
            count += 1
        elif count == 5:
            found = chunk.decode("utf-8", errors="replace").casefold()
            if found == wanted:
                count += 1
                f.seek(-(1 + code_len_size + code_len), os.SEEK_CUR)
                advance = entry_len
            else:
                count = 1
                f.seek(entry_len - code_len - code_len_size - 1, os.SEEK_CUR)
                advance = 1
        else:
            return bytes(chunk)


def decode(filename: str | os.PathLike, code: str) -> bytes:
    """Open a geodata file and return the entry for ``code``."""
    with open(filename, "rb") as handle:
        return emit_bytes(handle, code)