"""Chat service for the session transcript protocol.

This service orchestrates one chat exchange: resolve the session, append the
user turn, ask the completion provider (bounded by a timeout), append the
assistant turn, persist, and invalidate the cached transcript.
"""

import asyncio
import json
import logging
import random
import uuid
from dataclasses import dataclass

from portfolio_backend.entities import ChatSessionEntity, TurnEntity, TurnRole
from portfolio_backend.exceptions import CompletionError, EmptyMessageError
from portfolio_backend.protocols import CacheStore, ChatSessionStore, CompletionProvider

logger = logging.getLogger(__name__)

UNKNOWN_ADDRESS = "0.0.0.0"
HISTORY_KEY_PREFIX = "chat:history:"
VERSION_KEY_PREFIX = "chat:version:"

# Canned replies used when the provider fails, times out or answers empty.
REQUEST_FALLBACK_REPLIES = (
    "Menarik! Ceritakan lebih lanjut.",
    "Saya mengerti. Ada yang bisa saya bantu lagi?",
    "Terima kasih telah bertanya. Silakan jelaskan lebih detail.",
    "Hmm, saya perlu memikirkan itu. Bisa Anda jelaskan ulang?",
    "Maaf, saya sedang mengalami gangguan koneksi. Coba lagi nanti ya.",
)
SOCKET_FALLBACK_REPLIES = (
    "Saya sedang belajar. Ceritakan lebih lanjut!",
    "Menarik! Bisa dijelaskan lebih detail?",
    "Hmm, saya perlu waktu untuk memikirkan itu.",
    "Terima kasih atas masukannya!",
    "Maaf, saya sedang gangguan. Coba lagi nanti ya.",
)


@dataclass(frozen=True)
class ChatReply:
    """Result of one chat exchange."""

    message: str
    session_id: str


def history_key(session_id: str) -> str:
    return f"{HISTORY_KEY_PREFIX}{session_id}"


def version_key(session_id: str) -> str:
    """Key of the token that changes every time a transcript is saved."""
    return f"{VERSION_KEY_PREFIX}{session_id}"


class ChatService:
    """Core chat orchestration service.

    This service depends on PROTOCOLS, not concrete implementations:
    - ChatSessionStore: SQL database or any document store
    - CompletionProvider: the HTTP AI endpoint or a test fake
    - CacheStore: Redis or the in-memory fallback

    Two messages for the same session are not serialized against each other;
    the persistence layer's last write wins.

    Example:
        ```python
        chat = ChatService(repository=repo, provider=provider, cache=cache)
        reply = await chat.handle_message("hello", session_id="s1", timeout=10)
        turns = await chat.get_history("s1")
        ```
    """

    def __init__(
        self,
        repository: ChatSessionStore,
        provider: CompletionProvider,
        cache: CacheStore,
        max_turns: int = 0,
        history_ttl: int = 60,
        rng: random.Random | None = None,
    ) -> None:
        """Initialize the chat service.

        Args:
            repository: Chat transcript persistence (required).
            provider: AI completion provider (required).
            cache: Cache for transcripts served by ``get_history`` (required).
            max_turns: Keep only the newest N turns per session; 0 keeps all.
            history_ttl: Seconds a cached transcript stays valid.
            rng: Random source for choosing fallback replies.
        """
        self._repository = repository
        self._provider = provider
        self._cache = cache
        self._max_turns = max_turns
        self._history_ttl = history_ttl
        self._rng = rng or random.Random()

    @staticmethod
    def resolve_session_id(session_id: str | None, client_address: str | None) -> str:
        """Use the supplied id verbatim, else derive one from the caller address.

        Address-derived ids are not unique per user (shared NAT collides).
        """
        if session_id:
            return session_id
        return client_address or UNKNOWN_ADDRESS

    async def handle_message(
        self,
        text: str,
        session_id: str | None = None,
        client_address: str | None = None,
        timeout: float = 10.0,
        fallback_replies: tuple[str, ...] = REQUEST_FALLBACK_REPLIES,
    ) -> ChatReply:
        """Run one chat exchange.

        Args:
            text: The user message
            session_id: Client-supplied session id, if any
            client_address: Caller network address, used when no id is supplied
            timeout: Budget for the completion call in seconds
            fallback_replies: Canned replies for this path

        Returns:
            ChatReply with the assistant text and the resolved session id

        Raises:
            EmptyMessageError: If ``text`` is empty or whitespace-only
            PersistenceError: If the transcript cannot be loaded or saved
        """
        content = (text or "").strip()
        if not content:
            raise EmptyMessageError("Message must not be empty")

        resolved_id = self.resolve_session_id(session_id, client_address)

        session = await self._repository.find_by_session_id(resolved_id)
        if session is None:
            session = ChatSessionEntity.new(resolved_id)
            logger.info("Starting chat session %s", resolved_id)

        session.append(TurnRole.USER, content)
        reply = await self.complete(content, timeout, fallback_replies)
        session.append(TurnRole.ASSISTANT, reply)

        dropped = session.trim(self._max_turns)
        if dropped:
            logger.debug("Trimmed %d old turns from session %s", dropped, resolved_id)
        session.touch()
        await self._repository.save(session)
        # Bump the version before dropping the cached copy; get_history
        # relies on this order to discard transcripts it read too early.
        await self._cache.set(version_key(resolved_id), uuid.uuid4().hex, self._history_ttl)
        await self._cache.delete(history_key(resolved_id))

        return ChatReply(message=reply, session_id=resolved_id)

    async def complete(
        self,
        prompt: str,
        timeout: float,
        fallback_replies: tuple[str, ...] = REQUEST_FALLBACK_REPLIES,
    ) -> str:
        """Ask the provider once; any failure yields a canned reply.

        Never raises for provider failures. The call is abandoned (not retried)
        once ``timeout`` elapses.
        """
        try:
            reply = await asyncio.wait_for(self._provider.complete(prompt, timeout), timeout)
        except asyncio.TimeoutError:
            logger.error("AI API timed out after %.1fs, using fallback reply", timeout)
            return self._rng.choice(fallback_replies)
        except CompletionError as e:
            logger.error("AI API error: %s", e)
            return self._rng.choice(fallback_replies)

        if not reply:
            logger.warning("AI API returned no message, using fallback reply")
            return self._rng.choice(fallback_replies)
        return reply

    async def get_history(self, session_id: str) -> list[TurnEntity]:
        """Return the stored transcript, oldest turn first.

        Unknown sessions yield an empty list, not an error. A transcript read
        from the repository is cached unless a save for the same session
        landed meanwhile (detected through the version token).

        Raises:
            PersistenceError: If the transcript cannot be loaded
        """
        key = history_key(session_id)
        version = await self._cache.get(version_key(session_id))
        cached = await self._cache.get(key)
        if cached is not None:
            try:
                return [TurnEntity.from_dict(item) for item in json.loads(cached)]
            except (ValueError, KeyError, TypeError) as e:
                logger.warning("Discarding unreadable cached transcript for %s: %s", session_id, e)
                await self._cache.delete(key)

        session = await self._repository.find_by_session_id(session_id)
        if session is None:
            return []

        payload = json.dumps([turn.to_dict() for turn in session.turns])
        await self._cache.set(key, payload, self._history_ttl)
        if await self._cache.get(version_key(session_id)) != version:
            logger.debug("Transcript %s changed while loading, not caching it", session_id)
            await self._cache.delete(key)
        return list(session.turns)

    @property
    def repository(self) -> ChatSessionStore:
        """Get the underlying repository (for testing)."""
        return self._repository

