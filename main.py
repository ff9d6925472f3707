import asyncio
import argparse
import json
import logging
import sys
from pathlib import Path

from pullchunk.config import TransferConfig
from pullchunk.errors import ConfigError
from pullchunk.io.sink import FileChunkSink
from pullchunk.io.source import FileByteSource
from pullchunk.transfer.driver import TransferDriver, TransferStatus
from pullchunk.transfer.monitor import TransferMonitor
from pullchunk.transfer.store import TransferStore
from pullchunk.watch.watcher import SourceWatcher
from pullchunk.benchmark.benchmark import Benchmarker

logger = logging.getLogger(__name__)


def setup_logging():
    """Log to stdout and pullchunk.log"""
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler(sys.stdout),
            logging.FileHandler('pullchunk.log')
        ]
    )


def build_pipeline(config: TransferConfig):
    """Store, driver and monitor wired together"""
    store = TransferStore(FileByteSource(), chunk_size=config.chunk_size)
    driver = TransferDriver(
        store,
        FileChunkSink(config.output_dir),
        max_failures=config.max_failures
    )
    monitor = TransferMonitor(store, interval=config.monitor_interval)
    return store, driver, monitor


async def run_send(args, config: TransferConfig) -> int:
    """Transfer the given files and report"""
    logger.info("=== pullchunk send ===")

    store, driver, monitor = build_pipeline(config)
    driver.attach()
    monitor.attach()

    for name in args.files:
        path = Path(name)
        if not path.is_file():
            logger.error(f"Not a file: {path}")
            continue
        store.register(str(path))

    results = await driver.join()

    summary = {
        'results': [r.to_dict() for r in results],
        **monitor.report()
    }
    print(json.dumps(summary, indent=2 if args.json else None))

    abandoned = [r for r in results if r.status is TransferStatus.ABANDONED]
    if abandoned or len(results) < len(args.files):
        logger.error(f"{len(args.files) - len(results) + len(abandoned)} "
                     f"of {len(args.files)} transfers did not complete")
        return 1
    return 0


async def run_watch(args, config: TransferConfig) -> int:
    """Transfer every file dropped into the watch directory"""
    logger.info("=== pullchunk watch ===")

    store, driver, monitor = build_pipeline(config)
    driver.attach()
    monitor.attach()

    watcher = SourceWatcher(store, config.watch_dir)
    watcher.start()

    try:
        while True:
            await asyncio.sleep(1)
            for result in await driver.join():
                logger.info(f"{result.key}: {result.status.value}")
                store.discard(result.key)
    finally:
        watcher.stop()
        await driver.join()

    return 0


async def run_benchmark(args, config: TransferConfig) -> int:
    """Run chunk size benchmark"""
    logger.info("=== pullchunk benchmark ===")

    benchmarker = Benchmarker(
        output_dir=Path(args.output),
        file_size=args.file_size
    )

    chunk_sizes = args.chunk_sizes or None
    await benchmarker.test_all_chunk_sizes(chunk_sizes, iterations=args.iterations)
    benchmarker.save_results()

    logger.info("\n=== Chunk Size Recommendations ===")
    for category, result in benchmarker.compare_chunk_sizes().items():
        logger.info(f"{category}: {result['chunk_size']} bytes "
                    f"({result['throughput_mb_s']:.1f} MB/s, {result['memory_mb_max']:.2f} MB)")

    logger.info("Benchmark completed")
    return 0


def create_parser():
    """Create argument parser"""
    parser = argparse.ArgumentParser(
        description='pullchunk - acknowledgement-gated chunk transfer',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Transfer files into ./received
  python main.py send big.iso notes.txt --out ./received

  # Transfer every file moved into ./outbox
  python main.py watch ./outbox --out ./received

  # Compare chunk sizes
  python main.py benchmark --chunk-sizes 16384 65536
        """
    )

    # Mode selection
    parser.add_argument(
        'mode',
        choices=['send', 'watch', 'benchmark'],
        help='Execution mode'
    )
    parser.add_argument(
        'files',
        nargs='*',
        help='Files to send (send) or directory to watch (watch)'
    )

    # Transfer arguments
    parser.add_argument(
        '--config',
        default='pullchunk.yaml',
        help='YAML config file (default: pullchunk.yaml)'
    )
    parser.add_argument(
        '--out',
        help='Output directory (default: ./received)'
    )
    parser.add_argument(
        '--chunk-size',
        type=int,
        help='Chunk size in bytes (default: 16384)'
    )
    parser.add_argument(
        '--max-failures',
        type=int,
        help='Consecutive failures before a transfer is abandoned (default: 3)'
    )
    parser.add_argument(
        '--json',
        action='store_true',
        help='Indent the JSON summary'
    )

    # Benchmark-specific arguments
    parser.add_argument(
        '--output',
        default='./benchmarks',
        help='Benchmark output directory (default: ./benchmarks)'
    )
    parser.add_argument(
        '--iterations',
        type=int,
        default=3,
        help='Transfers per chunk size (default: 3)'
    )
    parser.add_argument(
        '--file-size',
        type=int,
        default=8 * 1024 * 1024,
        help='Size of the generated benchmark file in bytes (default: 8MB)'
    )
    parser.add_argument(
        '--chunk-sizes',
        type=int,
        nargs='+',
        help='Chunk sizes to benchmark'
    )

    # Logging
    parser.add_argument(
        '--debug',
        action='store_true',
        help='Enable debug logging'
    )
    parser.add_argument(
        '--quiet',
        action='store_true',
        help='Minimal output'
    )

    return parser


def load_config(args) -> TransferConfig:
    """Config file first, command line overrides on top"""
    config = TransferConfig.from_file(Path(args.config))
    config.update(
        output_dir=args.out,
        chunk_size=args.chunk_size,
        max_failures=args.max_failures,
        watch_dir=args.files[0] if args.mode == 'watch' and args.files else None
    )
    return config


async def async_main() -> int:
    """Main entry point"""
    parser = create_parser()
    args = parser.parse_args()

    if args.mode == 'send' and not args.files:
        parser.error("send requires at least one file")
    if args.iterations <= 0:
        parser.error("--iterations must be positive")

    try:
        config = load_config(args)
    except ConfigError as e:
        logger.error(f"Configuration error: {e}")
        return 1

    # Adjust logging level
    if args.debug:
        logging.getLogger().setLevel(logging.DEBUG)
    elif args.quiet:
        logging.getLogger().setLevel(logging.WARNING)
    else:
        logging.getLogger().setLevel(config.log_level)

    # Route to appropriate mode
    try:
        if args.mode == 'send':
            return await run_send(args, config)
        elif args.mode == 'watch':
            return await run_watch(args, config)
        elif args.mode == 'benchmark':
            return await run_benchmark(args, config)
    except KeyboardInterrupt:
        logger.info("\nShutdown requested by user")
    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        return 1
    return 0


def main():
    # Check Python version
    if sys.version_info < (3, 8):
        print("Error: Python 3.8 or higher is required")
        sys.exit(1)

    setup_logging()

    try:
        sys.exit(asyncio.run(async_main()))
    except KeyboardInterrupt:
        pass


if __name__ == '__main__':
    main()
