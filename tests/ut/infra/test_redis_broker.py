import asyncio

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from tests.fake.fake_redis import FakeRedis, RecordingSubscriber
from tests.helpers import wait_until

from pubroute.core.models.message import InboundMessage
from pubroute.infra.redis_broker import RedisBroker


def build_broker(client, spawner) -> RedisBroker:
    return RedisBroker(
        client=client,  # type: ignore[arg-type]
        spawner=spawner,
        poll_interval=0.01,
        reconnect_initial=0.001,
        reconnect_maximum=0.01,
        reconnect_jitter=0,
    )


def message_frame(data: bytes) -> dict:
    return {"type": "message", "pattern": None, "channel": b"events", "data": data}


@pytest.mark.ut
@pytest.mark.asyncio
async def test_messages_are_forwarded_to_subscriber(spawner):
    client = FakeRedis(script=[
        None,
        {"type": "subscribe", "pattern": None, "channel": b"events", "data": 1},
        message_frame(b"payload-1"),
        message_frame(b"payload-2"),
    ])
    broker = build_broker(client, spawner)
    subscriber = RecordingSubscriber()

    await broker.subscribe("events", subscriber)
    await wait_until(lambda: len(subscriber.calls) == 3)

    assert subscriber.calls == [
        ("made",),
        ("message", InboundMessage(channel="events", data=b"payload-1")),
        ("message", InboundMessage(channel="events", data=b"payload-2")),
    ]
    assert client.pubsubs[0].channels == ["events"]

    await broker.close()


@pytest.mark.ut
@pytest.mark.asyncio
async def test_reader_reconnects_after_connection_error(spawner):
    error = RedisConnectionError("Connection reset by peer")
    client = FakeRedis(script=[error, error, message_frame(b"after-outage")])
    broker = build_broker(client, spawner)
    subscriber = RecordingSubscriber()

    await broker.subscribe("events", subscriber)
    await wait_until(lambda: len(subscriber.calls) == 4)

    assert subscriber.calls == [
        ("made",),
        ("lost", error),
        ("made",),
        ("message", InboundMessage(channel="events", data=b"after-outage")),
    ]

    await broker.close()


@pytest.mark.ut
@pytest.mark.asyncio
async def test_unsubscribe_stops_reader_and_closes_pubsub(spawner):
    client = FakeRedis()
    broker = build_broker(client, spawner)
    subscriber = RecordingSubscriber()

    await broker.subscribe("events", subscriber)
    await broker.unsubscribe("events")

    pubsub = client.pubsubs[0]
    assert pubsub.closed
    assert pubsub.channels == []
    assert subscriber.calls == [("made",), ("lost", None)]
    await wait_until(lambda: spawner.remaining_tasks == 0)

    # unknown channel is ignored
    await broker.unsubscribe("events")


@pytest.mark.ut
@pytest.mark.asyncio
async def test_double_subscribe_is_rejected(spawner):
    broker = build_broker(FakeRedis(), spawner)
    await broker.subscribe("events", RecordingSubscriber())

    with pytest.raises(RuntimeError):
        await broker.subscribe("events", RecordingSubscriber())

    await broker.close()


@pytest.mark.ut
@pytest.mark.asyncio
async def test_close_unsubscribes_everything_and_closes_client(spawner):
    client = FakeRedis()
    broker = build_broker(client, spawner)
    first, second = RecordingSubscriber(), RecordingSubscriber()
    await broker.subscribe("events", first)
    await broker.subscribe("audit", second)

    await broker.close()

    assert client.closed
    assert first.calls[-1] == ("lost", None)
    assert second.calls[-1] == ("lost", None)
    await asyncio.wait_for(spawner.drain(poll_interval=0.005), timeout=1)


@pytest.mark.ut
@pytest.mark.asyncio
async def test_publish_returns_receiver_count(spawner):
    client = FakeRedis()
    broker = build_broker(client, spawner)
    await broker.subscribe("events", RecordingSubscriber())

    assert await broker.publish("events", b"data") == 1
    assert await broker.publish("other", b"data") == 0
    assert client.published == [("events", b"data"), ("other", b"data")]

    await broker.close()
