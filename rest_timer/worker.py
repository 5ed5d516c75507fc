"""
Standalone delivery worker process.

    python -m rest_timer.worker            # sweep every SWEEP_INTERVAL_SECONDS
    python -m rest_timer.worker --once     # single sweep, for external schedulers
"""
import argparse
import asyncio
import logging

from rest_timer import config
from rest_timer.api.deps import get_delivery_worker

logger = logging.getLogger(__name__)


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Send due rest-timer notifications")
    parser.add_argument("--once", action="store_true", help="run a single sweep and exit")
    parser.add_argument(
        "--interval",
        type=int,
        default=config.SWEEP_INTERVAL_SECONDS,
        help="seconds between sweeps (default: %(default)s)",
    )
    return parser.parse_args(argv)


async def run(once: bool, interval: int) -> None:
    worker = get_delivery_worker()
    if once:
        await worker.sweep()
    else:
        await worker.run_forever(interval)


def main(argv=None) -> None:
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    )
    args = parse_args(argv)
    try:
        asyncio.run(run(args.once, args.interval))
    except KeyboardInterrupt:
        logger.info("Delivery worker stopped")


if __name__ == "__main__":
    main()
