"""Frame types carried by the engine transport."""

from enum import IntEnum


class FrameType(IntEnum):
    """Kind of a transport frame: text or binary."""

    STRING = 0
    BINARY = 1


def byte_to_frame_type(b: int) -> FrameType:
    """Convert a raw byte to a frame type."""
    return FrameType(b)