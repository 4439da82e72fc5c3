#!/usr/bin/env python3
"""
JMX Agent Smoke Harness - command line entry point

Runs the same checks as the integration test suite without pytest, which is
handy when bringing up a new base image or debugging an exporter endpoint.

Usage:
    agent-smoke images
    agent-smoke config
    agent-smoke scrape http://localhost:9000/metrics --timeout 5
    agent-smoke check openjdk:11-jre ibmjava:8-jre
"""

import argparse
import json
import logging
import os
import sys
from typing import List, Optional

from docker.errors import DockerException

from .assertions import (
    JVM_NON_HEAP_COMMITTED,
    TABULAR_DISK_USAGE_METRICS,
    assert_metric_positive,
    assert_metrics_present,
)
from .artifacts import resolve_artifacts
from .config import Config
from .container import JavaContainer
from .errors import HarnessError
from .scrape import scrape_metrics

logger = logging.getLogger(__name__)


def setup_logging(level: Optional[str] = None) -> logging.Logger:
    """
    Configure the root logger for console output.

    Args:
        level: Log level name, defaults to the LOG_LEVEL environment variable

    Returns:
        Logger instance for this module
    """
    log_level_str = (level or os.environ.get("LOG_LEVEL", "INFO")).upper()
    log_level = getattr(logging, log_level_str, logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(
        logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    )
    root_logger.addHandler(console_handler)

    return logging.getLogger(__name__)


def check_image(base_image: str, config: Config) -> List[str]:
    """
    Run both metric checks against one base image.

    Returns:
        Failure messages, empty when the image passes
    """
    failures = []
    artifacts = resolve_artifacts(config)
    missing = artifacts.missing()
    if missing:
        return [f"Missing artifact: {path}" for path in missing]

    with JavaContainer(base_image, artifacts, config) as container:
        try:
            value = assert_metric_positive(container.scrape(), JVM_NON_HEAP_COMMITTED)
            logger.info(f"{base_image}: {JVM_NON_HEAP_COMMITTED} = {value}")
        except AssertionError as e:
            failures.append(str(e))

        try:
            assert_metrics_present(container.scrape(), TABULAR_DISK_USAGE_METRICS)
        except AssertionError as e:
            failures.append(str(e))

    return failures


def cmd_images(args, config: Config) -> int:
    for image in config.base_images:
        print(image)
    return 0


def cmd_config(args, config: Config) -> int:
    print(json.dumps(config.get_startup_summary(), indent=2))
    errors = config.validate()
    for error in errors:
        logger.error(f"Configuration error: {error}")
    return 1 if errors else 0


def cmd_scrape(args, config: Config) -> int:
    timeout = args.timeout if args.timeout is not None else config.scrape_timeout
    try:
        lines = scrape_metrics(
            args.url,
            timeout,
            poll_interval=config.poll_interval,
            request_timeout=config.request_timeout,
        )
    except AssertionError as e:
        logger.error(str(e))
        return 1

    for line in lines:
        print(line)
    return 0


def cmd_check(args, config: Config) -> int:
    images = args.images or config.base_images
    failed = 0

    for image in images:
        try:
            failures = check_image(image, config)
        except (HarnessError, DockerException) as e:
            failures = [str(e)]

        if failures:
            failed += 1
            print(f"FAIL {image}")
            for failure in failures:
                print(f"     {failure}")
        else:
            print(f"PASS {image}")

    logger.info(f"{len(images) - failed}/{len(images)} images passed")
    return 1 if failed else 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="agent-smoke",
        description="Smoke test the JMX exporter agent on Java base images",
    )
    parser.add_argument("--log-level", help="Override LOG_LEVEL")
    parser.add_argument(
        "--project-root", help="Directory artifact paths are resolved from"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    images = subparsers.add_parser("images", help="List configured base images")
    images.set_defaults(func=cmd_images)

    config = subparsers.add_parser("config", help="Show and validate configuration")
    config.set_defaults(func=cmd_config)

    scrape = subparsers.add_parser("scrape", help="Scrape a metrics endpoint")
    scrape.add_argument("url", help="Metrics URL, e.g. http://localhost:9000/metrics")
    scrape.add_argument("--timeout", type=float, help="Seconds to keep retrying")
    scrape.set_defaults(func=cmd_scrape)

    check = subparsers.add_parser("check", help="Build, run and check base images")
    check.add_argument("images", nargs="*", help="Base images (default: all configured)")
    check.set_defaults(func=cmd_check)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the agent-smoke command."""
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.log_level)

    try:
        config = Config(project_root=args.project_root)
    except ValueError as e:
        logger.critical(f"Invalid configuration: {e}")
        return 2

    try:
        return args.func(args, config)
    except KeyboardInterrupt:
        logger.info("Interrupted")
        return 130


if __name__ == "__main__":
    sys.exit(main())
