#!/usr/bin/env python3
"""
Build script for the site publisher.

Modes:
    generate  Read articles (through the gateway) and context documents,
              then materialize every page into the build directory.
    pages     Re-render pages from the item index of the last generate.
    finalize  Fingerprint bundler outputs and content payloads, write the
              manifest and produce the dist tree.

The bundler runs between ``generate`` and ``finalize``.
"""

import argparse
import asyncio
import sys

import structlog

from site_publisher.config import settings
from site_publisher.errors import GatewayError, ManifestConflictError
from site_publisher.logging_config import configure_logging
from site_publisher.repositories import (
    ContextFileRepository,
    GatewayContentRepository,
    McpGatewayClient,
)
from site_publisher.services import GatewayService, PublishService, RateLimitedCommandQueue

logger = structlog.get_logger()


def print_section(title: str) -> None:
    """Print a section header."""
    print("\n" + "=" * 70)
    print(f"  {title}")
    print("=" * 70)


async def run_generate() -> None:
    """Read all sources and materialize pages."""
    print_section("Generate")

    gateway = McpGatewayClient.create()
    queue = RateLimitedCommandQueue(gateway=gateway)
    sources = [ContextFileRepository()]
    if gateway.configured:
        sources.insert(0, GatewayContentRepository(GatewayService(queue=queue)))
    else:
        logger.warning("gateway_not_configured", detail="articles skipped")

    try:
        result = await PublishService(sources=sources).generate()
    finally:
        await queue.close()
        await gateway.close()

    print(f"  Articles:  {result.published} published, {result.drafts} drafts")
    print(f"  Context:   {result.context}")
    print(f"  Time:      {result.elapsed_ms:.0f}ms")


def run_pages() -> None:
    """Re-render pages without touching the gateway."""
    print_section("Pages")
    count = PublishService(sources=[]).render_pages()
    print(f"  Pages:     {count}")


def run_finalize() -> None:
    """Produce the dist tree."""
    print_section("Finalize")
    result = PublishService(sources=[]).finalize()
    print(f"  Assets:    {len(result.manifest.entries)} fingerprinted, {result.skipped} skipped")
    print(f"  Pages:     {result.pages}")
    print(f"  Output:    {settings.resolve(settings.dist_dir)}")
    print(f"  Time:      {result.elapsed_ms:.0f}ms")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Build the static site")
    parser.add_argument(
        "--mode",
        choices=("generate", "pages", "finalize"),
        required=True,
        help="Build step to run",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    """Run one build step."""
    args = parse_args(argv)
    configure_logging()

    try:
        if args.mode == "generate":
            asyncio.run(run_generate())
        elif args.mode == "pages":
            run_pages()
        else:
            run_finalize()
    except (FileNotFoundError, GatewayError, ManifestConflictError) as e:
        print(f"\n❌ Error: {e}")
        return 1

    print("\n✅ Done")
    return 0


if __name__ == "__main__":
    sys.exit(main())
