"""Engine packet types and the per-frame packet encoder and decoder."""

from __future__ import annotations

import contextlib
from dataclasses import dataclass
from enum import IntEnum
from typing import BinaryIO, Protocol

from eiokit.frame import FrameType

_ZERO = ord("0")


class PacketType(IntEnum):
    """Type of an engine packet."""

    OPEN = 0
    CLOSE = 1
    PING = 2
    PONG = 3
    MESSAGE = 4
    UPGRADE = 5
    NOOP = 6

    def __str__(self) -> str:
        return self.name.lower()

    def string_byte(self) -> int:
        """The byte that marks this type in a text frame."""
        return int(self) + _ZERO

    def binary_byte(self) -> int:
        """The byte that marks this type in a binary frame."""
        return int(self)


def byte_to_packet_type(b: int, frame_type: FrameType) -> PacketType:
    """Convert a marker byte read from a frame of the given type."""
    if frame_type == FrameType.STRING:
        b = (b - _ZERO) & 0xFF
    return PacketType(b)


@dataclass(frozen=True)
class Frame:
    """One transport frame."""

    frame_type: FrameType
    data: bytes


@dataclass(frozen=True)
class Packet:
    """One engine packet."""

    frame_type: FrameType
    packet_type: PacketType
    data: bytes


class _FrameReader(Protocol):
    def next_reader(self) -> tuple[FrameType, BinaryIO]: ...


class _FrameWriter(Protocol):
    def next_writer(self, frame_type: FrameType) -> BinaryIO: ...


class PacketDecoder:
    """Reads packets from a source of frames."""

    def __init__(self, reader: _FrameReader) -> None:
        self._reader = reader

    def next_reader(self) -> tuple[FrameType, PacketType, BinaryIO]:
        """Return the next frame's type, packet type and body stream.

        Raises EOFError when the frame carries no packet type byte.
        """
        frame_type, stream = self._reader.next_reader()
        head = stream.read(1)
        if not head:
            stream.close()
            raise EOFError("frame has no packet type")
        try:
            packet_type = byte_to_packet_type(head[0], frame_type)
        except ValueError:
            stream.close()
            raise
        return frame_type, packet_type, stream


class PacketEncoder:
    """Writes packets into a sink of frames."""

    def __init__(self, writer: _FrameWriter) -> None:
        self._writer = writer

    def next_writer(self, frame_type: FrameType, packet_type: PacketType) -> BinaryIO:
        """Open a frame, write the packet type marker and return the stream."""
        stream = self._writer.next_writer(frame_type)
        if frame_type == FrameType.STRING:
            marker = packet_type.string_byte()
        else:
            marker = packet_type.binary_byte()
        try:
            stream.write(bytes([marker]))
        except Exception:
            with contextlib.suppress(Exception):
                stream.close()
            raise
        return stream