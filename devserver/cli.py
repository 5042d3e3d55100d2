"""Command line entry point: serve files and the live-reload channel together."""

from __future__ import annotations

import argparse
import asyncio
import ipaddress
import logging
import os
import socket
import sys
from typing import Sequence

import uvicorn

from . import __version__
from .config import DEFAULT_ADDR, DEFAULT_ROOT, DEFAULT_WS_PORT, Config, env_flag
from .errors import AddrParseError, log_error_chain
from .livereload import ReloadHub, create_livereload_app, watch_root
from .main import create_app

logger = logging.getLogger(__name__)

LOG_FORMAT = "[%(levelname)s] %(message)s"


def configure_logging(level: str | None = None) -> None:
    level_name = (level or os.environ.get("DEVSERVER_LOG") or "INFO").upper()
    logging.basicConfig(level=logging.WARNING, format=LOG_FORMAT)
    logging.getLogger("devserver").setLevel(level_name)
    logging.getLogger("uvicorn.error").setLevel(logging.INFO)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="devserver", description="A basic HTTP file server")
    parser.add_argument(
        "-a",
        "--addr",
        default=os.environ.get("DEVSERVER_ADDR", DEFAULT_ADDR),
        help="the IP:PORT combination (default: %(default)s)",
    )
    parser.add_argument(
        "--ws-port",
        type=int,
        default=int(os.environ.get("DEVSERVER_WS_PORT", DEFAULT_WS_PORT)),
        help="the port for the live-reload websocket server (default: %(default)s)",
    )
    parser.add_argument(
        "--no-watch",
        dest="watch",
        action="store_false",
        default=env_flag(os.environ.get("DEVSERVER_WATCH")),
        help="do not watch the root directory for changes",
    )
    parser.add_argument("--log-level", default=None, help="log level for devserver (default: INFO)")
    parser.add_argument(
        "root",
        nargs="?",
        default=os.environ.get("DEVSERVER_ROOT", DEFAULT_ROOT),
        metavar="ROOT",
        help="the root directory for serving files (default: current directory)",
    )
    return parser


def config_from_args(args: argparse.Namespace) -> Config:
    return Config.from_options(addr=args.addr, ws_port=args.ws_port, root=args.root, watch=args.watch)


def outbound_address() -> str | None:
    # Connecting a UDP socket sends nothing; it only picks the outgoing interface.
    try:
        with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as udp:
            udp.connect(("10.255.255.255", 1))
            return udp.getsockname()[0]
    except OSError:
        return None


def lan_addresses() -> list[str]:
    """Private IPv4 addresses of this host, for reaching it from other devices."""

    candidates = []
    outbound = outbound_address()
    if outbound:
        candidates.append(outbound)
    try:
        infos = socket.getaddrinfo(socket.gethostname(), None, socket.AF_INET)
    except OSError:
        infos = []
    candidates.extend(sockaddr[0] for *_, sockaddr in infos)

    found = set()
    for candidate in candidates:
        ip = ipaddress.ip_address(candidate)
        if ip.is_private and not ip.is_loopback and not ip.is_unspecified:
            found.add(str(ip))
    return sorted(found, key=ipaddress.ip_address)


def log_startup(config: Config) -> None:
    logger.info("devserver %s", __version__)
    logger.info("addr: http://%s", config.addr)
    logger.info("root dir: %s", config.root_dir)
    logger.info("live-reload port: %s", config.ws_port)
    addresses = lan_addresses()
    if addresses:
        logger.info("Available (IPv4 LAN) address(es):")
        for ip in addresses:
            logger.info("\t-a %s:%s | http://%s:%s", ip, config.port, ip, config.port)


def _server(app, host: str, port: int) -> uvicorn.Server:
    return uvicorn.Server(uvicorn.Config(app, host=host, port=port, log_config=None))


async def serve_forever(config: Config) -> None:
    hub = ReloadHub()
    servers = [
        _server(create_app(config), config.host, config.port),
        _server(create_livereload_app(hub), config.host, config.ws_port),
    ]
    stop = asyncio.Event()
    tasks = [asyncio.create_task(server.serve()) for server in servers]
    if config.watch:
        tasks.append(asyncio.create_task(watch_root(config.root_dir, hub, stop_event=stop)))
    try:
        await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)
    finally:
        for server in servers:
            server.should_exit = True
        stop.set()
        results = await asyncio.gather(*tasks, return_exceptions=True)
        for result in results:
            if isinstance(result, Exception):
                log_error_chain(result)


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)
    try:
        config = config_from_args(args)
    except (AddrParseError, ValueError) as exc:
        log_error_chain(exc)
        return 1

    log_startup(config)
    try:
        asyncio.run(serve_forever(config))
    except KeyboardInterrupt:
        logger.info("stopping devserver")
    return 0


def run() -> None:
    sys.exit(main())


__all__ = [
    "build_parser",
    "config_from_args",
    "configure_logging",
    "lan_addresses",
    "log_startup",
    "main",
    "outbound_address",
    "run",
    "serve_forever",
]
