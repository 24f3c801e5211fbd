"""
Demo writer for rotatefile.

Writes a line of random text at a fixed interval into a small rotating log
so rotation, compression and retention can be watched in a directory
listing. Stops on SIGINT or SIGTERM.
"""

import argparse
import asyncio
import logging
import os
import random
import signal
import string

from dotenv import load_dotenv

from rotatefile import RotateFile, setup_logging
from rotatefile.utils.bytesize import parse_bytes

# Load environment variables
load_dotenv("config/.env")

# Global variable to track shutdown state
shutdown_event = asyncio.Event()

logger = logging.getLogger("rotatefile.demo")

LINE_LENGTH = 1024


def handle_shutdown(signum, frame):
    """Handle shutdown signals gracefully."""
    logger.info("Shutdown signal %s received", signal.Signals(signum).name)
    shutdown_event.set()


def random_line(length: int = LINE_LENGTH) -> str:
    alphabet = string.ascii_letters + string.digits
    return "".join(random.choice(alphabet) for _ in range(length))


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Write random lines into a rotating log file")
    parser.add_argument("--logdir", default="./log", help="directory for the demo log (default: ./log)")
    parser.add_argument("--max-size", default="64KiB", help="rotate after this many bytes (default: 64KiB)")
    parser.add_argument("--interval", type=float, default=0.01, help="seconds between lines (default: 0.01)")
    parser.add_argument("--max-backups", type=int, default=5, help="backups to keep (default: 5)")
    return parser.parse_args(argv)


async def main(args: argparse.Namespace) -> None:
    rotate_file = RotateFile(
        filename=os.path.join(args.logdir, "demo.log"),
        max_size=parse_bytes(args.max_size),
        max_backups=args.max_backups,
        max_days=1,
        compress=True,
        rotate_signals=[signal.SIGHUP]
    )
    setup_logging(rotate_file, level="DEBUG")

    # Set up signal handlers
    signal.signal(signal.SIGINT, handle_shutdown)
    signal.signal(signal.SIGTERM, handle_shutdown)

    logger.info("Writing to %s", rotate_file.current_filename())
    lines = 0
    try:
        while not shutdown_event.is_set():
            logger.info(random_line())
            lines += 1
            try:
                await asyncio.wait_for(shutdown_event.wait(), timeout=args.interval)
            except asyncio.TimeoutError:
                pass
    finally:
        logger.info("Wrote %d lines", lines)
        rotate_file.wait_for_mill(timeout=5.0)
        logging.shutdown()


if __name__ == "__main__":
    asyncio.run(main(parse_args()))
