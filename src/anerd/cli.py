"""Command-line entry point for the anerd daemon.

Usage:
    # Defaults: /dev/urandom, port 26373, 64-byte payloads, donate every 60s
    anerd

    # Smaller payloads, donate every 10 seconds
    anerd -s 32 -i 10

    # Answer peers but never donate
    anerd -i 0

Every option can also be set through ``ANERD_*`` environment variables;
command-line values take precedence.
"""

from __future__ import annotations

import argparse
import logging
import signal
import sys

from anerd import __version__
from anerd.config import load_config
from anerd.daemon import AnerdDaemon
from anerd.exceptions import AnerdError
from anerd.logging.setup import setup_logging

logger = logging.getLogger("anerd")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="anerd",
        description="Asynchronous Network Exchange Randomness Daemon",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""\
Examples:
  %(prog)s                      # Defaults from ANERD_* env or built-ins
  %(prog)s -d /dev/random       # Mix into a different device
  %(prog)s -p 26374 -s 128      # Custom port and payload size
  %(prog)s -i 0                 # Never donate, only answer peers
""",
    )
    parser.add_argument("-d", "--device", default=None, help="Randomness device (default: /dev/urandom).")
    parser.add_argument("-i", "--interval", type=int, default=None, help="Seconds between donations (default: 60).")
    parser.add_argument("-p", "--port", type=int, default=None, help="UDP exchange port (default: 26373).")
    parser.add_argument("-s", "--size", type=int, default=None, help="Payload size in bytes (default: 64).")
    parser.add_argument(
        "-b",
        "--broadcast",
        dest="broadcast_address",
        default=None,
        help="Donation destination address (default: 255.255.255.255).",
    )
    parser.add_argument(
        "--no-syslog",
        dest="syslog",
        action="store_const",
        const=False,
        default=None,
        help="Log to stderr only.",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging.")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv: list[str] | None = None) -> int:
    """Parse arguments, start the daemon, and block until it stops.

    Returns:
        Process exit status: 0 after a signal-triggered stop, 1 on a fatal
        startup error or a crashed task.
    """
    args = build_parser().parse_args(argv)

    try:
        config = load_config(
            device=args.device,
            interval=args.interval,
            port=args.port,
            size=args.size,
            broadcast_address=args.broadcast_address,
            syslog=args.syslog,
        )
    except AnerdError as exc:
        logging.basicConfig(format="%(levelname)s %(name)s: %(message)s")
        logger.error("Invalid configuration: %s", exc)
        return 1

    setup_logging(config, verbose=args.verbose)

    daemon = AnerdDaemon(config)

    def _shutdown(signum: int, frame: object) -> None:
        logger.info("Received signal %d, shutting down...", signum)
        daemon.stop()

    signal.signal(signal.SIGINT, _shutdown)
    if hasattr(signal, "SIGTERM"):
        signal.signal(signal.SIGTERM, _shutdown)

    try:
        daemon.start()
    except AnerdError as exc:
        logger.error("Startup failed: %s", exc)
        return 1

    return daemon.wait()


if __name__ == "__main__":
    sys.exit(main())
