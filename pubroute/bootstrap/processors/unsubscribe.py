import logging

from pubroute.bootstrap.deps import get_registry
from pubroute.core.models.event import UnsubscribeEvent


registry = get_registry()


@registry.processor("unsubscribe")
class UnsubscribeMessageProcessor:
    def __init__(self) -> None:
        self._logger = logging.getLogger("bootstrap.processors.unsubscribe")

    async def on_message(self, event: UnsubscribeEvent) -> None:
        self._logger.info(f"User {event.from_user_name} unfollowed {event.to_user_name}")
