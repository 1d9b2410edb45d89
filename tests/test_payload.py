import io
import threading
import time

import pytest

from eiokit.frame import FrameType
from eiokit.packet import PacketType
from eiokit.payload import Payload
from eiokit.payload_errors import PayloadError

S, B = FrameType.STRING, FrameType.BINARY
NIHAO = "你好".encode()

SINGLE = [
    (True, bytes([0x00, 0x01, 0xFF]) + b"0", (S, PacketType.OPEN, b"")),
    (True, bytes([0x00, 0x01, 0x03, 0xFF]) + b"4hello " + NIHAO,
     (S, PacketType.MESSAGE, b"hello " + NIHAO)),
    (True, bytes([0x01, 0x01, 0x03, 0xFF, 0x04]) + b"hello " + NIHAO,
     (B, PacketType.MESSAGE, b"hello " + NIHAO)),
    (False, b"1:0", (S, PacketType.OPEN, b"")),
    (False, "13:4hello 你好".encode(), (S, PacketType.MESSAGE, b"hello " + NIHAO)),
    (False, b"18:b4aGVsbG8g5L2g5aW9", (B, PacketType.MESSAGE, b"hello " + NIHAO)),
]


def run(target, results):
    def body():
        try:
            results.append(("ok", target()))
        except BaseException as exc:  # noqa: BLE001
            results.append(("err", exc))

    t = threading.Thread(target=body, daemon=True)
    t.start()
    return t


def is_temporary(exc):
    return isinstance(exc, PayloadError) and exc.temporary()


def assert_all_paused(p):
    with pytest.raises(PayloadError) as info:
        p.next_reader()
    assert info.value.temporary()
    with pytest.raises(PayloadError) as info:
        p.next_writer(B, PacketType.OPEN)
    assert info.value.temporary()
    with pytest.raises(PayloadError) as info:
        p.feed_in(io.BytesIO(b"1:0"), False)
    assert info.value.temporary()
    buf = io.BytesIO()
    p.flush_out(buf)
    assert buf.getvalue() == bytes([0x00, 0x01, 0xFF]) + b"6"


def assert_all_closed(p):
    with pytest.raises(EOFError):
        p.next_reader()
    with pytest.raises(EOFError):
        p.next_writer(B, PacketType.OPEN)
    with pytest.raises(EOFError):
        p.feed_in(io.BytesIO(b"1:0"), False)
    with pytest.raises(EOFError):
        p.flush_out(io.BytesIO())


def test_feed_in():
    p = Payload(True)
    p.pause()
    p.resume()
    results = []

    def feed():
        for sb, data, _ in SINGLE:
            p.feed_in(io.BytesIO(data), sb)

    t = run(feed, results)
    for _, _, (ft, pt, body) in SINGLE:
        p.set_read_deadline(time.monotonic() + 0.5)
        got_ft, got_pt, r = p.next_reader()
        data = r.read()
        r.close()
        assert (got_ft, got_pt, data) == (ft, pt, body)
    p.set_read_deadline(time.monotonic() + 0.1)
    with pytest.raises(PayloadError) as info:
        p.next_reader()
    assert str(info.value) == "read: timeout"
    t.join(2)
    assert results == [("ok", None)]


def test_flush_out_text():
    p = Payload(False)
    p.pause()
    p.resume()
    cases = [c for c in SINGLE if not c[0]]
    flushed = []
    results = []

    def flush():
        for _ in cases:
            buf = io.BytesIO()
            p.flush_out(buf)
            flushed.append(buf.getvalue())

    t = run(flush, results)
    for _, _, (ft, pt, body) in cases:
        p.set_write_deadline(time.monotonic() + 0.5)
        w = p.next_writer(ft, pt)
        w.write(body)
        w.close()
    p.set_write_deadline(time.monotonic() + 0.1)
    with pytest.raises(PayloadError) as info:
        p.next_writer(B, PacketType.OPEN)
    assert str(info.value) == "write: timeout"
    t.join(2)
    assert results == [("ok", None)]
    assert flushed == [data for _, data, _ in cases]


def test_wait_next_close():
    p = Payload(True)
    results = []
    ts = [run(p.next_reader, results),
          run(lambda: p.next_writer(B, PacketType.OPEN), results)]
    time.sleep(0.1)
    p.close()
    for t in ts:
        t.join(2)
    assert len(results) == 2
    assert all(kind == "err" and isinstance(e, EOFError) for kind, e in results)
    assert_all_closed(p)


def test_wait_in_out_close():
    p = Payload(True)
    results = []
    ts = [run(lambda: p.feed_in(io.BytesIO(b"1:0"), False), results),
          run(lambda: p.flush_out(io.BytesIO()), results)]
    time.sleep(0.1)
    p.close()
    for t in ts:
        t.join(2)
    assert len(results) == 2
    assert all(kind == "err" and isinstance(e, EOFError) for kind, e in results)
    assert_all_closed(p)


def test_pause_close():
    p = Payload(True)
    p.pause()
    p.close()
    assert_all_closed(p)


def test_next_pause():
    p = Payload(True)
    results = []
    ts = [run(p.next_reader, results),
          run(lambda: p.next_writer(B, PacketType.OPEN), results)]
    time.sleep(0.1)
    p.pause()
    for t in ts:
        t.join(2)
    assert len(results) == 2
    assert all(kind == "err" and is_temporary(e) for kind, e in results)
    assert_all_paused(p)


def test_in_out_pause():
    p = Payload(True)
    results = []
    flushed = []

    def flush():
        buf = io.BytesIO()
        p.flush_out(buf)
        flushed.append(buf.getvalue())

    def read():
        time.sleep(0.3)
        _, _, r = p.next_reader()
        r.read()
        r.close()

    ts = [run(lambda: p.feed_in(io.BytesIO(b"1:0"), False), results),
          run(flush, results), run(read, results)]
    time.sleep(0.1)
    start = time.monotonic()
    p.pause()
    assert time.monotonic() - start >= 0.1
    for t in ts:
        t.join(2)
    assert results == [("ok", None)] * 3
    assert flushed == [bytes([0x00, 0x01, 0xFF]) + b"6"]
    assert_all_paused(p)


def test_next_close_pause():
    p = Payload(True)
    results = []
    after = []

    def read():
        _, _, r = p.next_reader()
        time.sleep(0.5)
        r.close()
        try:
            p.next_reader()
        except BaseException as exc:  # noqa: BLE001
            after.append(exc)

    def write():
        w = p.next_writer(B, PacketType.OPEN)
        time.sleep(0.5)
        w.close()
        try:
            p.next_writer(B, PacketType.OPEN)
        except BaseException as exc:  # noqa: BLE001
            after.append(exc)

    ts = [run(lambda: p.feed_in(io.BytesIO(b"1:0"), False), results),
          run(read, results),
          run(lambda: p.flush_out(io.BytesIO()), results),
          run(write, results)]
    time.sleep(0.1)
    begin = time.monotonic()
    p.pause()
    assert time.monotonic() - begin > 0.2
    for t in ts:
        t.join(3)
    assert results == [("ok", None)] * 4
    assert len(after) == 2 and all(is_temporary(e) for e in after)
    assert_all_paused(p)


def test_store_keeps_first_error():
    p = Payload(True)
    assert p.store("read", None) is None
    first = p.store("read", ValueError("bad"))
    assert str(first) == "read: bad"
    assert p.store("write", KeyError("other")) is first