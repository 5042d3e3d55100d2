"""Runtime configuration shared, read-only, by every request."""

from __future__ import annotations

import ipaddress
import os
from dataclasses import dataclass
from pathlib import Path

from .errors import AddrParseError

DEFAULT_ADDR = "0.0.0.0:4000"
DEFAULT_WS_PORT = 8090
DEFAULT_ROOT = "."

_FALSEY = {"0", "false", "no", "off"}


@dataclass(frozen=True, slots=True)
class Config:
    host: str
    port: int
    ws_port: int
    root_dir: Path
    watch: bool = True

    @property
    def addr(self) -> str:
        if ":" in self.host:
            return f"[{self.host}]:{self.port}"
        return f"{self.host}:{self.port}"

    @classmethod
    def from_options(
        cls,
        addr: str = DEFAULT_ADDR,
        ws_port: int = DEFAULT_WS_PORT,
        root: str | Path = DEFAULT_ROOT,
        watch: bool = True,
    ) -> "Config":
        host, port = parse_addr(addr)
        return cls(
            host=host,
            port=port,
            ws_port=_coerce_port(ws_port),
            root_dir=Path(os.path.abspath(root)),
            watch=watch,
        )


def _coerce_port(value: int | str) -> int:
    port = int(value)
    if not 0 <= port <= 65535:
        raise ValueError(f"port out of range: {port}")
    return port


def parse_addr(raw: str) -> tuple[str, int]:
    """Split an ``IP:PORT`` (or ``[IPv6]:PORT``) string."""

    host, sep, port = raw.strip().rpartition(":")
    if not sep or not host:
        raise AddrParseError(f"failed to parse IP address: {raw!r}")
    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]
    try:
        ip = ipaddress.ip_address(host)
        port_number = _coerce_port(port)
    except ValueError as exc:
        raise AddrParseError(f"failed to parse IP address: {raw!r}") from exc
    return str(ip), port_number


def env_flag(raw: str | None, *, default: bool = True) -> bool:
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() not in _FALSEY


def config_from_env() -> Config:
    return Config.from_options(
        addr=os.environ.get("DEVSERVER_ADDR", DEFAULT_ADDR),
        ws_port=int(os.environ.get("DEVSERVER_WS_PORT", DEFAULT_WS_PORT)),
        root=os.environ.get("DEVSERVER_ROOT", DEFAULT_ROOT),
        watch=env_flag(os.environ.get("DEVSERVER_WATCH")),
    )


__all__ = [
    "Config",
    "DEFAULT_ADDR",
    "DEFAULT_WS_PORT",
    "DEFAULT_ROOT",
    "config_from_env",
    "env_flag",
    "parse_addr",
]
