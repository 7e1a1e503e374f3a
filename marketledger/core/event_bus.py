"""Event bus — hashes marketplace events and fans them out to handlers.

Events are published only after the operation that produced them has
finished mutating state.  A handler failure is therefore logged and does
not reach the caller: the sale, listing or cancellation already happened.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable

from marketledger.core.hasher import compute_payload_hash, canonical_json_bytes
from marketledger.models.events import EVENT_TYPE_MAP, EventKind, MarketEvent

logger = logging.getLogger(__name__)

EventHandler = Callable[[MarketEvent], None]


class EventValidationError(ValueError):
    """Raised when a serialized event fails validation."""


class EventBus:
    """Routes marketplace events to every handler registered for their kind.

    Usage
    -----
    >>> bus = EventBus()
    >>> seen = []
    >>> bus.subscribe(EventKind.ITEM_LISTED, seen.append)
    """

    def __init__(self) -> None:
        self._handlers: dict[EventKind, list[EventHandler]] = {
            kind: [] for kind in EventKind
        }

    def subscribe(self, kind: EventKind, handler: EventHandler) -> None:
        """Register *handler* for one event kind."""
        self._handlers[kind].append(handler)

    def subscribe_all(self, handler: EventHandler) -> None:
        """Register *handler* for every event kind."""
        for kind in EventKind:
            self._handlers[kind].append(handler)

    # ------------------------------------------------------------------
    # Publish (hash + route)
    # ------------------------------------------------------------------

    @staticmethod
    def prepare(event: MarketEvent) -> MarketEvent:
        """Return *event* with its ``payload_hash`` computed."""
        payload_fields = event.model_dump(
            mode="json",
            exclude={"payload_hash", "event_id", "timestamp_utc"},
        )
        return event.model_copy(
            update={"payload_hash": compute_payload_hash(payload_fields)}
        )

    def publish(self, event: MarketEvent) -> MarketEvent:
        """Hash and dispatch *event*; return the prepared event."""
        prepared = self.prepare(event)
        for handler in self._handlers.get(prepared.event_kind, []):
            try:
                handler(prepared)
            except Exception as exc:  # noqa: BLE001
                logger.error(
                    "Handler %r failed for event %s: %s",
                    handler,
                    prepared.event_id,
                    exc,
                )
        return prepared

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    @staticmethod
    def serialize(event: MarketEvent) -> bytes:
        """Serialize an event to canonical JSON bytes."""
        return canonical_json_bytes(event.model_dump(mode="json"))

    @staticmethod
    def receive(raw_json: bytes | str) -> MarketEvent:
        """Deserialize and validate a raw JSON event into its model."""
        if isinstance(raw_json, bytes):
            raw_json = raw_json.decode("utf-8")

        try:
            data = json.loads(raw_json)
        except json.JSONDecodeError as exc:
            raise EventValidationError(f"Invalid JSON: {exc}") from exc

        if not isinstance(data, dict):
            raise EventValidationError(
                f"Event must be a JSON object, got {type(data).__name__}"
            )

        kind_str = data.get("event_kind")
        if not kind_str:
            raise EventValidationError("Missing event_kind field")

        try:
            kind = EventKind(kind_str)
        except ValueError as exc:
            raise EventValidationError(f"Unknown event_kind: {kind_str!r}") from exc

        try:
            return EVENT_TYPE_MAP[kind].model_validate(data)
        except Exception as exc:
            raise EventValidationError(f"Event validation failed: {exc}") from exc
