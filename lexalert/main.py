"""Main entry point for the alerting engine"""

import json
import signal
import sys
import argparse

from lexalert import __version__
from lexalert.config.settings import load_config
from lexalert.utils.logger import setup_logger
from lexalert.engine import AlertingEngine


def parse_args(argv=None):
    """Parse command-line arguments"""
    parser = argparse.ArgumentParser(
        description='Rule-based alerting engine for product and performance metrics'
    )

    parser.add_argument(
        '--config',
        '-c',
        type=str,
        default=None,
        help='Path to configuration file (YAML)'
    )

    parser.add_argument(
        '--log-level',
        '-l',
        type=str,
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
        default=None,
        help='Override log level'
    )

    parser.add_argument(
        '--once',
        action='store_true',
        help='Evaluate all rules once, print the alerts as JSON and exit'
    )

    parser.add_argument(
        '--version',
        '-v',
        action='version',
        version=f'lexalert v{__version__}'
    )

    return parser.parse_args(argv)


def run_once(engine: AlertingEngine) -> int:
    """Evaluate one tick and print created alerts"""
    summary = engine.run_once()
    print(json.dumps([alert.to_dict() for alert in summary.fired], indent=2))
    return 1 if summary.errors else 0


def run_forever(engine: AlertingEngine, logger) -> int:
    """Run until SIGINT or SIGTERM"""
    stop_requested = []

    def signal_handler(signum, frame):
        logger.info(f"Received signal {signum}, initiating graceful shutdown...")
        stop_requested.append(signum)
        engine.stop()

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    engine.start()

    # join with a timeout keeps the main thread responsive to signals
    while engine.running and not stop_requested:
        engine.join(timeout=1)

    return 0


def main(argv=None):
    """Main entry point"""
    args = parse_args(argv)

    try:
        config = load_config(args.config)

        if args.log_level:
            config['engine']['log_level'] = args.log_level

        logger = setup_logger(config)
        logger.info(f"lexalert v{__version__}")

        if args.config:
            logger.info(f"Loaded configuration from: {args.config}")
        else:
            logger.info("Using default configuration")

        engine = AlertingEngine(config)
        try:
            if args.once:
                return run_once(engine)
            return run_forever(engine, logger)
        finally:
            engine.close()

    except KeyboardInterrupt:
        print("\nShutdown requested by user")
        return 0
    except Exception as e:
        print(f"Fatal error: {e}", file=sys.stderr)
        import traceback
        traceback.print_exc()
        return 1


if __name__ == '__main__':
    sys.exit(main())
