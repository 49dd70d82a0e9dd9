import argparse
import asyncio
import json
import sys

from redis.asyncio import Redis

from pubroute.bootstrap.config.loader import add_common_arguments, resolve_configfile
from pubroute.bootstrap.config.settings import PubrouteConfig
from pubroute.bootstrap.deps import get_codec, read_config
from pubroute.core.errors import DecodeError
from pubroute.core.helpers.spawn import TaskSpawner
from pubroute.core.helpers.utils import setup_logging
from pubroute.core.models.event import EventMessage
from pubroute.core.service.publisher import EventPublisher
from pubroute.infra.redis_broker import RedisBroker


def get_publish_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="pubroute-publish",
        description=(
            "Publish one event notification on the configured channel.\n\n"
            "The event is given as a JSON document and validated against the\n"
            "known event types before being encoded with the configured codec."
        ),
        formatter_class=argparse.RawTextHelpFormatter
    )
    add_common_arguments(parser)
    parser.add_argument(
        "event",
        nargs="?",
        help=(
            "JSON event document, read from stdin when omitted.\n"
            "Example:\n"
            "  '{\"event\": \"subscribe\", \"to_user_name\": \"gh_1\",\n"
            "    \"from_user_name\": \"o_42\", \"create_time\": 1700000000}'"
        ),
    )
    return parser.parse_args(argv)


def parse_event(config: PubrouteConfig, document: str) -> EventMessage:
    try:
        payload = json.loads(document)
    except ValueError as ex:
        raise SystemExit(f"Event document is not valid JSON: {ex}")

    try:
        return get_codec(config).from_mapping(payload)
    except DecodeError as ex:
        raise SystemExit(f"Invalid event: {ex}")


async def publish(config: PubrouteConfig, event: EventMessage) -> int:
    broker = RedisBroker(
        client=Redis.from_url(config.broker.url),
        spawner=TaskSpawner(loop=asyncio.get_running_loop()),
    )
    publisher = EventPublisher(
        broker=broker,
        codec=get_codec(config),
        channel=config.broker.channel,
    )
    try:
        return await publisher.publish(event)
    finally:
        await broker.close()


def main(argv: list[str] | None = None) -> None:
    args = get_publish_args(argv)
    setup_logging(args.log_level)

    config = read_config(resolve_configfile(args.config))
    document = args.event if args.event is not None else sys.stdin.read()
    event = parse_event(config, document)

    receivers = asyncio.run(publish(config, event))
    print(f"{event.event_type} -> {config.broker.channel}: {receivers} receiver(s)")


if __name__ == "__main__":
    main()
