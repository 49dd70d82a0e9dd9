from typing import Protocol, Any


class Serializer(Protocol):
    """
    Defines the interface for encoding/decoding event payloads exchanged
    over the pub/sub channel.

    Implementations must be:
    - deterministic
    - pure (no side effects)
    - mutual inverses for every plain mapping they produce
    """

    def serialize(self, message: Any) -> bytes:
        """Encode a Python object into bytes suitable for publishing."""

    def deserialize(self, data: bytes) -> Any:
        """Decode bytes received from the channel into a Python object."""
