#!/usr/bin/env python3
"""
Demo script for the portfolio backend core.

Shows the cache running in whichever mode REDIS_URL allows, and a short chat
session stored in an in-memory database. Without AI_API_URL every reply comes
from the canned fallback set.
"""

import asyncio
import time

from portfolio_backend.config import get_settings
from portfolio_backend.logging_config import configure_logging
from portfolio_backend.repositories import (
    Database,
    HttpCompletionProvider,
    SqlChatSessionRepository,
    create_cache_and_queue,
)
from portfolio_backend.services import ChatService


def print_section(title: str) -> None:
    """Print a section header."""
    print("\n" + "=" * 70)
    print(f"  {title}")
    print("=" * 70)


async def demo_cache() -> None:
    """Demonstrate set/get/expiry in the active cache mode."""
    print_section("Cache")

    settings = get_settings()
    cache, queue = await create_cache_and_queue(settings)
    print(f"\n  Cache mode: {cache.mode}, queue mode: {queue.mode}")

    await cache.set("greeting", "hi", 1)
    print(f"  get('greeting') -> {await cache.get('greeting')!r}")
    await asyncio.sleep(1.1)
    print(f"  after 1.1s      -> {await cache.get('greeting')!r}")

    await cache.close()


async def demo_chat() -> None:
    """Demonstrate a two-message chat session."""
    print_section("Chat Session")

    settings = get_settings()
    database = Database("sqlite+aiosqlite:///:memory:")
    await database.create_tables()
    cache, _ = await create_cache_and_queue(settings)
    provider = HttpCompletionProvider.create(settings)
    chat = ChatService(SqlChatSessionRepository(database), provider, cache)

    for message in ["Halo, siapa kamu?", "Ceritakan tentang proyekmu."]:
        start_time = time.time()
        reply = await chat.handle_message(message, session_id="demo", timeout=settings.chat_request_timeout)
        duration = (time.time() - start_time) * 1000
        print(f"\n  User: {message}")
        print(f"  Assistant: {reply.message}  ({duration:.0f}ms)")

    print("\n  Stored transcript:")
    for turn in await chat.get_history("demo"):
        print(f"    [{turn.role.value}] {turn.content}")

    await provider.close()
    await cache.close()
    await database.dispose()


def main() -> None:
    """Run all demos."""
    configure_logging("WARNING")
    print("\n🚀 Portfolio Backend Demo")
    print("=" * 70)

    asyncio.run(demo_cache())
    asyncio.run(demo_chat())

    print("\n" + "=" * 70)
    print("✅ Demo completed successfully!")
    print("=" * 70)


if __name__ == "__main__":
    main()
