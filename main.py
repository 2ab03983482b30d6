import time
import logging
import signal
import argparse
import os

from core.app_context import AppContext
from core.config_loader import CONFIG_PATH_ENV, load_config
from database.database import init_db

logger = logging.getLogger(__name__)

# Global flag for graceful shutdown
running = True


def signal_handler(sig, frame):
    global running
    logger.info("Shutdown signal received")
    running = False


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )


def run_sweep_loop(ctx: AppContext) -> None:
    """Drain stale rankings every `scheduler.interval_seconds` until signalled."""
    interval = ctx.config.scheduler.interval_seconds

    cycle_count = 0
    while running:
        cycle_count += 1
        cycle_start = time.time()
        logger.info(f"=== Starting stale sweep #{cycle_count} ===")
        try:
            summary = ctx.ranking_service.schedule_stale_recalculations(wait=True)
            logger.info(
                f"Sweep #{cycle_count}: {summary.succeeded} recalculated, {summary.failed} failed"
            )
        except Exception as e:
            logger.error(f"Error in sweep loop: {e}", exc_info=True)

        cycle_elapsed = time.time() - cycle_start
        if running:
            logger.info(
                f"=== Sweep #{cycle_count} completed in {cycle_elapsed:.2f}s. "
                f"Sleeping for {interval} seconds... ==="
            )
            # Sleep in chunks to allow responsive shutdown
            for _ in range(max(1, interval // 5)):
                if not running:
                    break
                time.sleep(min(5, interval))


def main():
    parser = argparse.ArgumentParser(description="Candidate ranking service")
    parser.add_argument('command', choices=['init-db', 'sweep', 'serve'],
                        help='init-db: create tables; sweep: periodic stale recalculation; serve: HTTP API')
    parser.add_argument('--config', type=str, default='config.yaml', help='Path to config.yaml')
    parser.add_argument('--once', action='store_true', help='sweep: run a single sweep and exit')
    args = parser.parse_args()

    config = load_config(args.config)
    configure_logging(config.logging.level)

    if args.command == 'serve':
        # The app factory runs inside uvicorn and reloads config from this path
        os.environ[CONFIG_PATH_ENV] = args.config
        from web.backend.app import main as serve
        serve()
        return

    ctx = AppContext.build(config)
    try:
        # Initialize DB (with retry logic)
        init_db(ctx.engine)
        if args.command == 'init-db':
            return

        if not config.scheduler.enabled and not args.once:
            logger.info("Scheduler disabled in config; nothing to do")
            return

        if args.once:
            ctx.ranking_service.schedule_stale_recalculations(wait=True)
            return

        signal.signal(signal.SIGINT, signal_handler)
        signal.signal(signal.SIGTERM, signal_handler)
        run_sweep_loop(ctx)
    finally:
        ctx.shutdown()


if __name__ == "__main__":
    main()
