"""
Frame-memory access trace.

Each access to frame memory becomes one fixed-width text line:

    r 00009480 1

direction tag, 8-hex-digit absolute address, access size. The sequence is
consumed by cache simulators, so order is part of the contract.

Sinks accept single records and batches. Batches are encoded with NumPy
in one pass, and produce exactly the bytes that the same records written
one at a time would.
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import BinaryIO, List

import numpy as np


ACCESS_SIZE = 1
LINE_LENGTH = 13  # "r xxxxxxxx 1\n"

_HEX_DIGITS = np.frombuffer(b"0123456789abcdef", dtype=np.uint8)
_TAGS = np.frombuffer(b"rw", dtype=np.uint8)
_NIBBLE_SHIFTS = np.arange(28, -1, -4, dtype=np.uint64)


class Access(IntEnum):
    """Direction of a frame-memory access."""
    READ = 0
    WRITE = 1

    @property
    def tag(self) -> str:
        return "r" if self is Access.READ else "w"


@dataclass(frozen=True)
class AccessRecord:
    """A single traced access."""
    direction: Access
    address: int
    size: int = ACCESS_SIZE

    def to_line(self) -> str:
        return f"{self.direction.tag} {self.address:08x} {self.size}\n"


def encode_record(direction: Access, address: int) -> bytes:
    return f"{Access(direction).tag} {address & 0xFFFFFFFF:08x} {ACCESS_SIZE}\n".encode("ascii")


def encode_records(directions: np.ndarray, addresses: np.ndarray) -> bytes:
    """
    Encode a batch of records as trace lines.

    Args:
        directions: Access codes (0=read, 1=write), one per record
        addresses: Absolute addresses below 2**32

    Returns:
        ASCII bytes, LINE_LENGTH per record
    """
    directions = np.asarray(directions, dtype=np.uint8)
    addresses = np.asarray(addresses, dtype=np.int64).astype(np.uint64)

    lines = np.empty((len(addresses), LINE_LENGTH), dtype=np.uint8)
    lines[:, 0] = _TAGS[directions]
    lines[:, 1] = ord(" ")
    lines[:, 2:10] = _HEX_DIGITS[(addresses[:, None] >> _NIBBLE_SHIFTS) & 0xF]
    lines[:, 10] = ord(" ")
    lines[:, 11] = ord("1")
    lines[:, 12] = ord("\n")
    return lines.tobytes()


class TraceCounter:
    """
    Trace sink that only counts accesses.

    Subclasses override _emit/_emit_many to store or write records;
    counting always happens here.
    """

    def __init__(self):
        self.reads = 0
        self.writes = 0

    @property
    def total(self) -> int:
        return self.reads + self.writes

    def record(self, direction: Access, address: int):
        if direction == Access.WRITE:
            self.writes += 1
        else:
            self.reads += 1
        self._emit(direction, address)

    def record_many(self, directions: np.ndarray, addresses: np.ndarray):
        directions = np.asarray(directions, dtype=np.uint8)
        if len(directions) == 0:
            return
        writes = int(np.count_nonzero(directions))
        self.writes += writes
        self.reads += len(directions) - writes
        self._emit_many(directions, addresses)

    def _emit(self, direction: Access, address: int):
        pass

    def _emit_many(self, directions: np.ndarray, addresses: np.ndarray):
        pass

    def flush(self):
        pass


class TraceWriter(TraceCounter):
    """Writes trace lines to a binary stream (the stream stays caller-owned)."""

    def __init__(self, stream: BinaryIO):
        super().__init__()
        self.stream = stream

    def _emit(self, direction: Access, address: int):
        self.stream.write(encode_record(direction, address))

    def _emit_many(self, directions: np.ndarray, addresses: np.ndarray):
        self.stream.write(encode_records(directions, addresses))

    def flush(self):
        self.stream.flush()


class TraceBuffer(TraceCounter):
    """Keeps records in memory. Meant for tests and small geometries."""

    def __init__(self):
        super().__init__()
        self.records: List[AccessRecord] = []

    def _emit(self, direction: Access, address: int):
        self.records.append(AccessRecord(Access(direction), int(address)))

    def _emit_many(self, directions: np.ndarray, addresses: np.ndarray):
        for d, a in zip(directions.tolist(), np.asarray(addresses).tolist()):
            self.records.append(AccessRecord(Access(d), int(a)))

    def to_text(self) -> str:
        return "".join(r.to_line() for r in self.records)
