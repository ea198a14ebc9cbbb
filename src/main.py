"""Entry point for the $PUMPDROP monitor."""

import asyncio
import signal

from loguru import logger

from src.parsers.worker import run_monitor
from src.utils.logger import setup_logger


async def main() -> None:
    setup_logger(level="INFO")
    logger.info("Starting pumpdrop monitor...")

    # Graceful shutdown on SIGINT/SIGTERM
    loop = asyncio.get_running_loop()
    shutdown_event = asyncio.Event()

    def _signal_handler() -> None:
        logger.info("Shutdown signal received")
        shutdown_event.set()

    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, _signal_handler)

    monitor_task = asyncio.create_task(run_monitor())

    # Wait for either the monitor to finish or a shutdown signal
    done, pending = await asyncio.wait(
        [monitor_task, asyncio.create_task(shutdown_event.wait())],
        return_when=asyncio.FIRST_COMPLETED,
    )

    for task in pending:
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    for task in done:
        if task is monitor_task and not task.cancelled() and task.exception():
            logger.error(f"Monitor stopped with error: {task.exception()!r}")

    logger.info("Shutdown complete")


def run() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    run()
