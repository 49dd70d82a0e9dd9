import json
from functools import lru_cache
from pathlib import Path

from pydantic import ValidationError

from pubroute.bootstrap.config.loader import get_configfile
from pubroute.bootstrap.config.settings import PubrouteConfig, load_config
from pubroute.core.codec import EventCodec
from pubroute.core.ports.serializer import Serializer
from pubroute.core.routing.registry import HandlerRegistry
from pubroute.core.worker import Worker
from pubroute.infra.json_serializer import JsonSerializer
from pubroute.infra.msgpack_serializer import MsgPackSerializer


SERIALIZERS: dict[str, type[Serializer]] = {
    "json": JsonSerializer,
    "msgpack": MsgPackSerializer,
}


@lru_cache
def get_worker() -> Worker:
    config = get_config()
    return Worker(
        config=config,
        registry=get_registry(),
        serializer=get_serializer(config),
    )


@lru_cache
def get_registry() -> HandlerRegistry:
    return HandlerRegistry()


def get_serializer(config: PubrouteConfig) -> Serializer:
    return SERIALIZERS[config.codec.format]()


def get_codec(config: PubrouteConfig) -> EventCodec:
    return EventCodec(serializer=get_serializer(config))


@lru_cache
def get_config() -> PubrouteConfig:
    return read_config(get_configfile())


def read_config(file: Path) -> PubrouteConfig:
    try:
        return load_config(file)
    except FileNotFoundError as ex:
        raise SystemExit(f"Provide a correct configuration file path: {ex}")
    except ValidationError as ex:
        msg = ["Configuration validation failed:"]
        errs = json.loads(ex.json())
        for err in errs:
            msg.append(f"  {'.'.join(str(loc) for loc in err['loc'])}: {err['msg']}")
        raise SystemExit("\n".join(msg))
