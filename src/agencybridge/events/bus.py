"""Redis Streams event bus publisher."""

from typing import Protocol

from redis.asyncio import Redis

from agencybridge.events.constants import STREAM_MAIN
from agencybridge.events.envelope import EventEnvelope


class EventPublisher(Protocol):
    """Protocol for forwarding envelopes to the internal event bus."""

    async def publish(self, envelope: EventEnvelope) -> str:
        """Publish envelope and return a message id."""
        ...


class EventBus:
    """Event bus for publishing envelopes to Redis Streams."""

    def __init__(self, redis: Redis, stream: str = STREAM_MAIN) -> None:
        """Initialize event bus.

        Args:
            redis: Redis async client
            stream: Stream name to publish to
        """
        self.redis = redis
        self.stream = stream

    async def publish(self, envelope: EventEnvelope) -> str:
        """Publish envelope to the stream.

        Args:
            envelope: Validated event envelope

        Returns:
            Redis message ID (e.g., "1234567890123-0")

        Raises:
            MissingRequiredFieldsError: If the envelope is not valid
        """
        envelope.ensure_valid()
        message_id = await self.redis.xadd(self.stream, envelope.as_redis_fields())
        if isinstance(message_id, bytes):
            return message_id.decode()
        return message_id


class RecordingEventBus:
    """Publisher that keeps envelopes in memory, for tests and local runs."""

    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.published: list[dict] = []

    async def publish(self, envelope: EventEnvelope) -> str:
        envelope.ensure_valid()
        if self.fail:
            raise ConnectionError("event bus unavailable")
        self.published.append(envelope.to_wire())
        return f"{len(self.published)}-0"
