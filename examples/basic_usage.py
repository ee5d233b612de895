#!/usr/bin/env python3
"""
Basic trotd usage example.

Prints today's trending repositories from every enabled provider, then
reports any provider that failed or fell back to cached data.
Run with: python examples/basic_usage.py
"""

import asyncio
import logging
import sys

from trotd import AsyncTrotdClient, ConfigurationError, configure_logging


async def main() -> int:
    configure_logging(level=logging.WARNING)

    try:
        client = AsyncTrotdClient.from_env()
    except ConfigurationError as e:
        print(f"Configuration error: {e.message}", file=sys.stderr)
        return 2

    async with client:
        report = await client.trending()

    for entry in report.entries:
        marks = ""
        if entry.starred:
            marks += " *"
        if entry.stale:
            marks += " (cached)"
        language = entry.language or "-"
        print(f"[{entry.provider_id}] {entry.full_name:40} {entry.stars_total:>7} {language}{marks}")
        if entry.description:
            print(f"    {entry.description}")

    if report.all_seen:
        print("Everything trending today has already been shown. Use show_all=True to see it again.")

    for provider_id, reason in report.failure_reasons().items():
        print(f"warning: {provider_id}: {reason}", file=sys.stderr)
    for warning in report.warnings:
        print(f"warning: {warning}", file=sys.stderr)

    return 1 if report.exhausted else 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
