import logging

from pubroute.bootstrap.deps import get_registry
from pubroute.core.models.event import ScanEvent


registry = get_registry()


@registry.processor("scan")
class ScanMessageProcessor:
    def __init__(self) -> None:
        self._logger = logging.getLogger("bootstrap.processors.scan")

    async def on_message(self, event: ScanEvent) -> None:
        self._logger.info(
            f"Follower {event.from_user_name} scanned QR scene '{event.event_key}'"
        )
