"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/codec.py
Compact binary form (DAT) of a record-set.

LAYOUT
------
    offset  size  field
    0       4     magic b"MDAT"
    4       1     format version
    5       8     xxHash64 of the payload, big-endian
    13      ...   payload: MessagePack array of [name, description] arrays

decode(encode(x)) == x for every record-set, including empty ones and
empty or non-ASCII strings. Anything else fed to decode raises CodecError.
"""

import logging
import struct
from pathlib import Path
from typing import Optional, Union

import msgpack
import xxhash

from mameutility.core.interfaces import LogSink, StdLogSink
from mameutility.core.models import RecordSet
from mameutility.errors import CodecError

logger = logging.getLogger(__name__)

MAGIC = b"MDAT"
FORMAT_VERSION = 1

_HEADER = struct.Struct(">4sBQ")


def _checksum(payload: bytes) -> int:
    return xxhash.xxh64(payload).intdigest()


def encode(records: RecordSet) -> bytes:
    payload = msgpack.packb([[e.name, e.description] for e in records], use_bin_type=True)
    return _HEADER.pack(MAGIC, FORMAT_VERSION, _checksum(payload)) + payload


def decode(data: bytes) -> RecordSet:
    """
    Raises:
        CodecError: truncated header, wrong magic or version, checksum mismatch,
            undecodable payload, or a record that is not a pair of strings.
    """
    if len(data) < _HEADER.size:
        raise CodecError(f"DAT data truncated: {len(data)} bytes, header needs {_HEADER.size}")

    magic, version, checksum = _HEADER.unpack_from(data)
    if magic != MAGIC:
        raise CodecError(f"Not a DAT file: bad magic {magic!r}")
    if version != FORMAT_VERSION:
        raise CodecError(f"Unsupported DAT format version {version}")

    payload = data[_HEADER.size:]
    if _checksum(payload) != checksum:
        raise CodecError("DAT checksum mismatch: payload is corrupt")

    try:
        items = msgpack.unpackb(payload, raw=False)
    except (msgpack.UnpackException, ValueError, TypeError) as e:
        raise CodecError(f"DAT payload cannot be decoded: {e}") from e

    if not isinstance(items, list):
        raise CodecError("DAT payload is not a record list")

    pairs = []
    for index, item in enumerate(items):
        if (not isinstance(item, list) or len(item) != 2
                or not isinstance(item[0], str) or not isinstance(item[1], str)):
            raise CodecError(f"DAT record {index} is not a [name, description] pair")
        pairs.append((item[0], item[1]))
    return RecordSet.from_pairs(pairs)


def write_dat(path: Union[str, Path], records: RecordSet, log: Optional[LogSink] = None) -> None:
    """Encodes and writes a DAT file. I/O failures are logged and re-raised."""
    log = log or StdLogSink()
    try:
        Path(path).write_bytes(encode(records))
    except OSError as e:
        log.exception(e, f"Error saving DAT file {path}", fatal=True)
        raise
    logger.debug(f"Wrote {len(records)} records to {path}")


def read_dat(path: Union[str, Path], log: Optional[LogSink] = None) -> RecordSet:
    """Reads a DAT file. Any failure is logged and yields an empty record-set."""
    log = log or StdLogSink()
    try:
        return decode(Path(path).read_bytes())
    except CodecError as e:
        e.path = str(path)
        log.exception(e, "Error loading DAT file")
    except OSError as e:
        log.exception(e, f"Error loading DAT file {path}")
    return RecordSet()
