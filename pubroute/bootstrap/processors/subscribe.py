import logging

from pubroute.bootstrap.deps import get_registry
from pubroute.core.models.event import SubscribeEvent


registry = get_registry()


@registry.processor("subscribe")
class SubscribeMessageProcessor:
    def __init__(self) -> None:
        self._logger = logging.getLogger("bootstrap.processors.subscribe")

    async def on_message(self, event: SubscribeEvent) -> None:
        if event.scene is None:
            self._logger.info(f"User {event.from_user_name} followed {event.to_user_name}")
        else:
            self._logger.info(
                f"User {event.from_user_name} followed {event.to_user_name} "
                f"from QR scene '{event.scene}'"
            )
