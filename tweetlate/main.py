"""Command line entry point for one-off refreshes and cache inspection.

Usage:
    python -m tweetlate.main refresh nate_smith en es
    python -m tweetlate.main show nate_smith en es
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from typing import List, Optional

from dotenv import load_dotenv

from tweetlate.core.errors import TweetlateError
from tweetlate.core.services import build_services, build_store
from tweetlate.core.settings import get_settings
from tweetlate.models.subscription import Subscription, SubscriptionValidationError
from tweetlate.refresh.reader import get_cached_texts
from tweetlate.utils.logger import get_logger, setup_logging

log = get_logger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Refresh and inspect translated timelines.")
    parser.add_argument("command", choices=["refresh", "show"], help="Action to perform")
    parser.add_argument("username", help="Twitter screen name")
    parser.add_argument("src", help="Source language code, e.g. en")
    parser.add_argument("tgt", help="Target language code, e.g. es")
    return parser.parse_args(argv)


async def run(command: str, subscription: Subscription) -> int:
    settings = get_settings()
    if command == "show":
        # Reading the cache needs no API credentials.
        store = build_store(settings)
        try:
            for text in await get_cached_texts(store, subscription):
                print(text)
        finally:
            await store.close()
        return 0

    services = build_services(settings)
    try:
        outcome = await services.pipeline.refresh(subscription)
        print(f"{subscription}: {outcome.value}")
    finally:
        await services.close()
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    load_dotenv()
    setup_logging()
    args = parse_args(argv)

    try:
        subscription = Subscription(args.username, args.src, args.tgt)
    except SubscriptionValidationError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    try:
        return asyncio.run(run(args.command, subscription))
    except TweetlateError as exc:
        log.error(f"{args.command} failed: {exc.as_dict()}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
