"""Decodes a stream of packets out of payloads handed in by a feeder."""

from __future__ import annotations

import base64
import binascii
import io
from typing import BinaryIO, Protocol

from eiokit.frame import FrameType, byte_to_frame_type
from eiokit.lengths import read_binary_len, read_text_len
from eiokit.packet import PacketType, byte_to_packet_type
from eiokit.payload_errors import INVALID_PAYLOAD


class ReaderFeeder(Protocol):
    def get_reader(self) -> tuple[BinaryIO, bool]: ...

    def put_reader(self, err: BaseException | None) -> None: ...


def _next_byte(reader: BinaryIO) -> int:
    b = reader.read(1)
    if not b:
        raise EOFError("unexpected end of payload")
    return b[0]


class PayloadDecoder:
    """Reads packets one by one; itself is the stream of the current packet.

    The feeder supplies the payload reader and is told, through
    ``put_reader``, when the payload is exhausted or failed.
    """

    def __init__(self, feeder: ReaderFeeder) -> None:
        self._feeder = feeder
        self._raw: BinaryIO | None = None
        self._remaining = 0
        self._b64: io.BytesIO | None = None
        self._support_binary = False
        self._frame_type = FrameType.STRING
        self._packet_type = PacketType.OPEN

    def next_reader(self) -> tuple[FrameType, PacketType, PayloadDecoder]:
        """Return the frame type, packet type and body stream of the next packet."""
        if self._raw is None:
            raw, support_binary = self._feeder.get_reader()
            try:
                self._set_next_reader(raw, support_binary)
            except Exception as err:
                self._send_error(err)
        return self._frame_type, self._packet_type, self

    def read(self, size: int = -1) -> bytes:
        """Read from the body of the current packet."""
        if self._b64 is not None:
            return self._b64.read(size)
        if self._raw is None:
            return b""
        n = self._remaining if size is None or size < 0 else min(size, self._remaining)
        if n <= 0:
            return b""
        data = self._raw.read(n)
        self._remaining -= len(data)
        return data

    def close(self) -> None:
        """Skip the rest of the packet and move on to the next one."""
        try:
            while self.read(4096):
                pass
        except Exception as err:
            self._send_error(err)
        try:
            self._set_next_reader(self._raw, self._support_binary)
        except EOFError:
            self._raw = None
            self._remaining = 0
            self._b64 = None
            self._send_error(None)
        except Exception as err:
            self._send_error(err)

    def _send_error(self, err: BaseException | None) -> None:
        self._feeder.put_reader(err)
        if err is not None:
            raise err

    def _set_next_reader(self, raw: BinaryIO | None, support_binary: bool) -> None:
        if raw is None:
            raise EOFError("no payload")
        if support_binary:
            frame_type, packet_type, length = self._binary_read(raw)
        else:
            frame_type, packet_type, length = self._text_read(raw)
        self._frame_type = frame_type
        self._packet_type = packet_type
        self._raw = raw
        self._support_binary = support_binary
        if not support_binary and frame_type == FrameType.BINARY:
            encoded = raw.read(length) if length > 0 else b""
            self._remaining = 0
            try:
                self._b64 = io.BytesIO(base64.b64decode(encoded, validate=True))
            except binascii.Error as err:
                raise ValueError(INVALID_PAYLOAD) from err
        else:
            self._remaining = length
            self._b64 = None

    @staticmethod
    def _text_read(raw: BinaryIO) -> tuple[FrameType, PacketType, int]:
        length = read_text_len(raw)
        frame_type = FrameType.STRING
        b = _next_byte(raw)
        length -= 1
        if b == ord("b"):
            frame_type = FrameType.BINARY
            b = _next_byte(raw)
            length -= 1
        return frame_type, byte_to_packet_type(b, FrameType.STRING), length

    @staticmethod
    def _binary_read(raw: BinaryIO) -> tuple[FrameType, PacketType, int]:
        b = _next_byte(raw)
        if b > 1:
            raise ValueError(INVALID_PAYLOAD)
        frame_type = byte_to_frame_type(b)
        length = read_binary_len(raw)
        b = _next_byte(raw)
        return frame_type, byte_to_packet_type(b, frame_type), length - 1