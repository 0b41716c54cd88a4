"""
Command line entry point.

    lb bump my-layer -r us-east-1,us-west-2
    lb verify my-layer -r us-east-1 -r us-west-2
"""

import argparse
import asyncio
import logging
import os
import sys
from typing import List, Optional, Sequence

from prometheus_client import CollectorRegistry

from . import __version__
from .common.config import Config, load_config
from .common.errors import LayerBalancerError, UsageError
from .common.logger import setup_logging
from .gateway.lambda_layers import LambdaLayerGateway, LayerGateway, create_session
from .gateway.transfer import PayloadDownloader
from .layer import LayerVersion
from .monitoring.metrics import export_textfile
from .replication.reconciler import Reconciler
from .replication.region_query import validate_regions
from .replication.verifier import Verifier

logger = logging.getLogger("layer_balancer")

DESCRIPTION = (
    "Layer Balancer or 'lb' is a tool for balancing the layer version of your Lambda\n"
    "across AWS regions, so each region has the same Lambda layer version."
)


def parse_regions(values: Optional[Sequence[str]]) -> List[str]:
    """Flatten repeated and comma separated region flags, keeping their order"""
    regions = []
    for value in values or []:
        regions.extend(r.strip() for r in value.split(',') if r.strip())
    return regions


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lb",
        description=DESCRIPTION,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--config", help="YAML configuration file")
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Override the configured log level",
    )

    commands = parser.add_subparsers(dest="command", metavar="command")

    for name, help_text in (
        ("bump", "bump layer to latest version across regions"),
        ("verify", "verifies layer latest versions across regions"),
    ):
        command = commands.add_parser(name, help=help_text, description=help_text)
        command.add_argument("layer_name", metavar="layer-name", nargs="?", default="")
        command.add_argument(
            "-r", "--regions", action="append", required=True,
            help="list of regions separated by comma.",
        )

    return parser


def create_gateway(config: Config) -> LayerGateway:
    return LambdaLayerGateway(
        session=create_session(config.AWS_PROFILE),
        retry_attempts=config.RETRY_ATTEMPTS,
        retry_min_wait=config.RETRY_MIN_WAIT,
        retry_max_wait=config.RETRY_MAX_WAIT,
    )


def create_downloader(config: Config) -> PayloadDownloader:
    return PayloadDownloader(
        timeout_seconds=config.DOWNLOAD_TIMEOUT_SECONDS,
        chunk_size=config.DOWNLOAD_CHUNK_SIZE,
        retry_attempts=config.RETRY_ATTEMPTS,
        retry_min_wait=config.RETRY_MIN_WAIT,
        retry_max_wait=config.RETRY_MAX_WAIT,
    )


def print_progress(region: str, message: str) -> None:
    print(f"{region}: {message}", flush=True)


def print_greatest(greatest: LayerVersion) -> None:
    print(f"Greatest version {greatest.number} in region {greatest.region}", flush=True)


async def run_bump(layer: str, regions: List[str], config: Config) -> None:
    print(f"Bumping layer across regions: {', '.join(regions)}")

    registry = CollectorRegistry() if config.METRICS_TEXTFILE else None

    async with create_downloader(config) as downloader:
        reconciler = Reconciler(
            create_gateway(config),
            downloader,
            layer,
            registry=registry,
            strict_numbering=config.STRICT_NUMBERING,
            progress=print_progress,
        )
        try:
            report = await reconciler.bump(regions, on_greatest=print_greatest)
        finally:
            if registry is not None:
                export_textfile(registry, config.METRICS_TEXTFILE)

    print(
        f"{len(report.bumped_regions)} of {len(report.regions)} regions bumped "
        f"to version {report.greatest.number}"
    )


async def run_verify(layer: str, regions: List[str], config: Config) -> None:
    result = await Verifier(create_gateway(config), layer).verify(regions)
    result.raise_for_state()
    print("all regions bumped")


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    try:
        if not args.layer_name:
            raise UsageError('required argument "layer-name" not set')

        regions = parse_regions(args.regions)
        validate_regions(regions)

        config = load_config(args.config)
        setup_logging(args.log_level or config.LOG_LEVEL, structured=config.LOG_FORMAT == 'structured')

        runner = run_bump if args.command == "bump" else run_verify
        asyncio.run(runner(args.layer_name, regions, config))

    except LayerBalancerError as e:
        logger.debug("Command failed", exc_info=True)
        print(f"{e}\n")
        return 1
    except KeyboardInterrupt:
        print("interrupted\n")
        return 1

    return 0


if __name__ == "__main__":
    if os.name == 'nt':
        asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())
    sys.exit(main())
