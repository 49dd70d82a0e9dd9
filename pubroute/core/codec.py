import logging
from typing import Any, Mapping

from pydantic import ValidationError

from pubroute.core.errors import DecodeError
from pubroute.core.models.event import EVENT_TYPES, EventMessage
from pubroute.core.ports.serializer import Serializer


DISCRIMINATOR = "event"


class EventCodec:
    """
    Converts raw channel payloads to and from typed events.

    Decoding runs in two steps: the Serializer turns bytes into a plain
    mapping, then the `event` discriminator selects the variant model that
    validates the remaining fields. Every failure surfaces as a DecodeError;
    the codec itself has no side effects.
    """

    def __init__(
        self,
        serializer: Serializer,
        variants: Mapping[str, type[EventMessage]] | None = None,
    ) -> None:
        self._serializer = serializer
        self._variants = dict(EVENT_TYPES if variants is None else variants)
        self._logger = logging.getLogger("core.codec")

    def encode(self, event: EventMessage) -> bytes:
        return self._serializer.serialize(event.model_dump(mode="json", by_alias=True))

    def decode(self, data: bytes) -> EventMessage:
        try:
            payload = self._serializer.deserialize(data)
        except Exception as exc:
            raise DecodeError(f"Malformed payload: {exc}") from exc

        return self.from_mapping(payload)

    def from_mapping(self, payload: Any) -> EventMessage:
        if not isinstance(payload, Mapping):
            raise DecodeError(
                f"Expected a mapping payload, got {type(payload).__name__}"
            )

        discriminator = payload.get(DISCRIMINATOR)
        if not isinstance(discriminator, str) or not discriminator.strip():
            raise DecodeError(f"Missing or empty '{DISCRIMINATOR}' discriminator")

        variant = self._variants.get(discriminator.lower())
        if variant is None:
            raise DecodeError(f"Unknown event type '{discriminator}'")

        try:
            event = variant.model_validate(payload)
        except ValidationError as exc:
            raise DecodeError(
                f"Invalid '{discriminator}' event: {exc.error_count()} field error(s)\n{exc}"
            ) from exc

        self._logger.debug(f"Decoded {variant.__name__} from {event.from_user_name}")
        return event
