"""Encodes packets into payloads written to a writer handed out by a feeder."""

from __future__ import annotations

import base64
import io
from typing import BinaryIO, Protocol

from eiokit.frame import FrameType
from eiokit.lengths import write_binary_len, write_text_len
from eiokit.packet import PacketType


class WriterFeeder(Protocol):
    def get_writer(self) -> BinaryIO: ...

    def put_writer(self, err: BaseException | None) -> None: ...


class PayloadEncoder:
    """Collects one packet at a time and writes it out framed on close."""

    def __init__(self, support_binary: bool, feeder: WriterFeeder | None = None) -> None:
        self.support_binary = support_binary
        self._feeder = feeder
        self._frame_type = FrameType.STRING
        self._packet_type = PacketType.OPEN
        self._cache = bytearray()
        self._raw: BinaryIO | None = None

    def noop(self) -> bytes:
        """An encoded NOOP packet."""
        if self.support_binary:
            return bytes([0x00, 0x01, 0xFF, ord("6")])
        return b"1:6"

    def next_writer(self, frame_type: FrameType, packet_type: PacketType) -> PayloadEncoder:
        """Start a packet; returns self as its body stream."""
        self._raw = self._feeder.get_writer()
        self._frame_type = frame_type
        self._packet_type = packet_type
        self._cache = bytearray()
        return self

    def write(self, data: bytes) -> int:
        self._cache.extend(data)
        return len(data)

    def close(self) -> None:
        """Write header and body to the writer and report back to the feeder."""
        err: BaseException | None = None
        try:
            body = bytes(self._cache)
            if not self.support_binary and self._frame_type == FrameType.BINARY:
                body = base64.b64encode(body)
            self._raw.write(self._header(len(body)) + body)
        except Exception as exc:
            err = exc
        self._feeder.put_writer(err)
        if err is not None:
            raise err

    def _header(self, size: int) -> bytes:
        buf = io.BytesIO()
        is_binary = self._frame_type == FrameType.BINARY
        if self.support_binary:
            marker = self._packet_type.binary_byte() if is_binary else self._packet_type.string_byte()
            buf.write(bytes([int(self._frame_type)]))
            write_binary_len(size + 1, buf)
            buf.write(bytes([marker]))
        else:
            prefix = b"b" if is_binary else b""
            write_text_len(size + len(prefix) + 1, buf)
            buf.write(prefix + bytes([self._packet_type.string_byte()]))
        return buf.getvalue()