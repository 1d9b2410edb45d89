import pytest

from eiokit.payload_errors import (
    ERR_OVERLAP,
    ERR_PAUSED,
    ERR_TIMEOUT,
    OpError,
    PayloadError,
    RetryError,
)


@pytest.mark.parametrize(
    "op, err, temporary, text",
    [
        ("read", ERR_PAUSED, True, "read: paused"),
        ("read", ERR_TIMEOUT, False, "read: timeout"),
    ],
)
def test_op_error(op, err, temporary, text):
    e = OpError(op, err)
    assert str(e) == text
    assert isinstance(e, PayloadError)
    assert e.temporary() is temporary


def test_nested_op_error_keeps_temporary():
    inner = OpError("payload", ERR_PAUSED)
    outer = OpError("write", inner)
    assert outer.temporary() is True
    assert str(outer) == "write: payload: paused"


def test_retry_error_is_temporary():
    e = RetryError("paused")
    assert e.temporary() is True
    assert str(e) == "paused"


def test_overlap_op_error_is_not_temporary():
    e = OpError("write", ERR_OVERLAP)
    assert str(e) == "write: overlap"
    assert e.temporary() is False