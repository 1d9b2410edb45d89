"""Hands packets between a polling transport and its reader and writer."""

from __future__ import annotations

import threading
import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Any, BinaryIO

from eiokit.frame import FrameType
from eiokit.packet import PacketType
from eiokit.pauser import Pauser
from eiokit.payload_decoder import PayloadDecoder
from eiokit.payload_encoder import PayloadEncoder
from eiokit.payload_errors import ERR_OVERLAP, ERR_PAUSED, ERR_TIMEOUT, OpError

_POLL = 0.01


def _wait(cond: threading.Condition, ready: Callable[[], bool], check: Callable[[], None]) -> None:
    while not ready():
        check()
        cond.wait(_POLL)


class _Channel:
    """Unbuffered hand-over between two threads sharing one condition."""

    def __init__(self, cond: threading.Condition) -> None:
        self._cond = cond
        self._item: Any = None
        self._full = False
        self._sent = 0
        self._taken = 0

    def send(self, item: Any, check: Callable[[], None]) -> None:
        _wait(self._cond, lambda: not self._full, check)
        self._item = item
        self._full = True
        self._sent += 1
        ticket = self._sent
        self._cond.notify_all()
        try:
            _wait(self._cond, lambda: self._taken >= ticket, check)
        except BaseException:
            if self._taken < ticket:
                self._item = None
                self._full = False
                self._sent -= 1
            raise

    def recv(self, check: Callable[[], None]) -> Any:
        _wait(self._cond, lambda: self._full, check)
        item = self._item
        self._item = None
        self._full = False
        self._taken += 1
        self._cond.notify_all()
        return item


class _Pausing(Exception):
    pass


class Payload:
    """Encodes and decodes the payload protocol between threads.

    Deadlines are ``time.monotonic()`` values, or None for no deadline.
    """

    def __init__(self, support_binary: bool) -> None:
        self._cond = threading.Condition()
        self._closed = False
        self._err: BaseException | None = None
        self._pauser = Pauser()
        self._reader_chan = _Channel(self._cond)
        self._read_error = _Channel(self._cond)
        self._writer_chan = _Channel(self._cond)
        self._write_error = _Channel(self._cond)
        self._busy: set[str] = set()
        self._read_deadline: float | None = None
        self._write_deadline: float | None = None
        self._decoder = PayloadDecoder(self)
        self._encoder = PayloadEncoder(support_binary, self)

    def feed_in(self, reader: BinaryIO, support_binary: bool) -> None:
        """Hand a request body to the reader side and wait until it is consumed."""
        with self._exclusive("read"):
            if not self._pauser.working():
                raise OpError("payload", ERR_PAUSED)
            try:
                with self._cond:
                    check = self._checker(read=True)
                    self._reader_chan.send((reader, support_binary), check)
                    ret = self.store("read", self._read_error.recv(check))
            finally:
                self._pauser.done()
        if ret is not None:
            raise ret

    def flush_out(self, writer: BinaryIO) -> None:
        """Let the writer side write into ``writer`` and wait until it is done."""
        with self._exclusive("write"):
            if not self._pauser.working():
                writer.write(self._encoder.noop())
                return
            try:
                with self._cond:
                    try:
                        self._writer_chan.send(writer, self._checker(False, self._raise_if_pausing))
                    except _Pausing:
                        ret, pausing = None, True
                    else:
                        pausing = False
                        ret = self.store("write", self._write_error.recv(self._checker(False)))
                if pausing:
                    writer.write(self._encoder.noop())
                    return
            finally:
                self._pauser.done()
        if ret is not None:
            raise ret

    def next_reader(self) -> tuple[FrameType, PacketType, PayloadDecoder]:
        """Return the next packet fed in through feed_in."""
        return self._decoder.next_reader()

    def set_read_deadline(self, deadline: float | None) -> None:
        with self._cond:
            self._read_deadline = deadline

    def next_writer(self, frame_type: FrameType, packet_type: PacketType) -> PayloadEncoder:
        """Return a stream for the next packet, written out on flush_out."""
        return self._encoder.next_writer(frame_type, packet_type)

    def set_write_deadline(self, deadline: float | None) -> None:
        with self._cond:
            self._write_deadline = deadline

    def pause(self) -> None:
        """Wait for current readers and writers, then pause."""
        self._pauser.pause()

    def resume(self) -> None:
        self._pauser.resume()

    def close(self) -> None:
        with self._cond:
            self._closed = True
            self._cond.notify_all()

    def store(self, op: str, err: BaseException | None) -> BaseException | None:
        """Record the first real error; return what callers should raise, if anything."""
        with self._cond:
            if self._err is None:
                if err is None or isinstance(err, EOFError):
                    return err
                self._err = OpError(op, err)
            return self._err

    # feeder side used by the decoder and encoder

    def get_reader(self) -> tuple[BinaryIO, bool]:
        return self._take(self._reader_chan, read=True)

    def put_reader(self, err: BaseException | None) -> None:
        self._give(self._read_error, err, read=True)

    def get_writer(self) -> BinaryIO:
        return self._take(self._writer_chan, read=False)

    def put_writer(self, err: BaseException | None) -> None:
        with self._cond:
            self._ensure_open()
            ret = self.store("write", err)
            self._give(self._write_error, err, read=False)
        if ret is not None:
            raise ret

    # helpers

    @contextmanager
    def _exclusive(self, op: str) -> Iterator[None]:
        with self._cond:
            self._ensure_open()
            if op in self._busy:
                raise OpError(op, ERR_OVERLAP)
            self._busy.add(op)
        try:
            yield
        finally:
            with self._cond:
                self._busy.discard(op)

    def _take(self, chan: _Channel, read: bool) -> Any:
        self._ensure_open()
        if not self._pauser.working():
            raise OpError("payload", ERR_PAUSED)
        self._pauser.done()
        with self._cond:
            return chan.recv(self._checker(read, self._raise_if_paused))

    def _give(self, chan: _Channel, err: BaseException | None, read: bool) -> None:
        with self._cond:
            self._ensure_open()
            chan.send(err, self._checker(read))

    def _ensure_open(self) -> None:
        with self._cond:
            if self._closed:
                raise self._load()

    def _load(self) -> BaseException:
        with self._cond:
            return self._err if self._err is not None else EOFError("payload closed")

    def _expired(self, read: bool) -> bool:
        deadline = self._read_deadline if read else self._write_deadline
        return deadline is not None and time.monotonic() >= deadline

    def _raise_if_pausing(self) -> None:
        if self._pauser.pausing_trigger().is_set():
            raise _Pausing

    def _raise_if_paused(self) -> None:
        if self._pauser.paused_trigger().is_set():
            raise OpError("payload", ERR_PAUSED)

    def _checker(
        self, read: bool, extra: Callable[[], None] | None = None
    ) -> Callable[[], None]:
        op = "read" if read else "write"

        def check() -> None:
            if self._closed:
                raise self._load()
            if self._expired(read):
                raise self.store(op, ERR_TIMEOUT)
            if extra is not None:
                extra()

        return check