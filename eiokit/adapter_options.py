"""Configuration for the Redis broadcast adapter."""

from __future__ import annotations

from dataclasses import dataclass, fields

DEFAULT_ADDR = "127.0.0.1:6379"
DEFAULT_PREFIX = "socket.io"
DEFAULT_NETWORK = "tcp"


@dataclass
class RedisAdapterOptions:
    """Where and how to reach Redis.

    ``host`` and ``port`` are deprecated in favour of ``addr``.
    """

    host: str = ""
    port: str = ""
    addr: str = ""
    prefix: str = ""
    network: str = ""

    def resolved_addr(self) -> str:
        """The address to dial; built from host and port when addr is empty."""
        if not self.addr:
            self.addr = f"{self.host}:{self.port}"
        return self.addr


def default_options() -> RedisAdapterOptions:
    """Options used when nothing is configured."""
    return RedisAdapterOptions(addr=DEFAULT_ADDR, prefix=DEFAULT_PREFIX, network=DEFAULT_NETWORK)


def get_options(opts: RedisAdapterOptions | None) -> RedisAdapterOptions:
    """Defaults overridden by every non-empty field of ``opts``."""
    options = default_options()
    if opts is not None:
        for f in fields(RedisAdapterOptions):
            value = getattr(opts, f.name)
            if value:
                setattr(options, f.name, value)
    return options