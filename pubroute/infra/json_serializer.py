import json
from typing import Any

from pubroute.core.ports.serializer import Serializer


class JsonSerializer(Serializer):
    """
    JSON implementation of the Serializer interface.

    - UTF-8 text, readable from any redis-cli session
    - compact separators, keys kept in insertion order
    - the default wire format of published events
    """
    def serialize(self, message: Any) -> bytes:
        return json.dumps(message, ensure_ascii=False, separators=(",", ":")).encode("utf-8")

    def deserialize(self, data: bytes) -> Any:
        return json.loads(data)
