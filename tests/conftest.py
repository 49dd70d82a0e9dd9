import asyncio

import pytest
import pytest_asyncio

from tests.fake.fake_broker import FakeBroker
from tests.fake.fake_processor import RecordingProcessor

from pubroute.core.codec import EventCodec
from pubroute.core.helpers.spawn import TaskSpawner
from pubroute.core.routing.dispatcher import Dispatcher
from pubroute.core.routing.registry import HandlerRegistry
from pubroute.core.service.listener import SubscriptionListener
from pubroute.infra.json_serializer import JsonSerializer


CHANNEL = "events"


@pytest.fixture
def codec() -> EventCodec:
    return EventCodec(serializer=JsonSerializer())


@pytest.fixture
def subscribe_processor() -> RecordingProcessor:
    return RecordingProcessor()


@pytest.fixture
def unsubscribe_processor() -> RecordingProcessor:
    return RecordingProcessor()


@pytest.fixture
def registry(subscribe_processor, unsubscribe_processor) -> HandlerRegistry:
    registry = HandlerRegistry()
    registry.register("subscribe", subscribe_processor)
    registry.register("unsubscribe", unsubscribe_processor)
    registry.seal()
    return registry


@pytest.fixture
def dispatcher(registry) -> Dispatcher:
    return Dispatcher(registry=registry)


@pytest.fixture
def broker() -> FakeBroker:
    return FakeBroker()


@pytest_asyncio.fixture
async def spawner() -> TaskSpawner:
    return TaskSpawner(loop=asyncio.get_running_loop())


@pytest_asyncio.fixture
async def listener(broker, codec, dispatcher, spawner) -> SubscriptionListener:
    return SubscriptionListener(
        channel=CHANNEL,
        broker=broker,
        codec=codec,
        dispatcher=dispatcher,
        spawner=spawner,
    )
