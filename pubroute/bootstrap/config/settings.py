from pathlib import Path
from typing import Annotated, Literal

from pydantic import BaseModel, Field
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)


class BrokerSettings(BaseModel):
    url: Annotated[
        str,
        Field(
            description=(
                "Redis connection URL, e.g. 'redis://localhost:6379/0'.\n"
                "Credentials and TLS ('rediss://') are expressed in the URL."
            ),
            default="redis://localhost:6379/0"
        )
    ]

    channel: Annotated[
        str,
        Field(
            description="Name of the pub/sub channel carrying event notifications.",
            min_length=1
        )
    ]

    poll_interval: Annotated[
        float,
        Field(
            description="Seconds a reader waits for a message before polling again.",
            default=1.0,
            gt=0
        )
    ]

    reconnect_initial: Annotated[
        float,
        Field(
            description="Delay (seconds) before the first reconnection attempt.",
            default=0.5,
            gt=0
        )
    ]

    reconnect_maximum: Annotated[
        float,
        Field(
            description="Upper bound (seconds) of the delay between reconnection attempts.",
            default=30.0,
            gt=0
        )
    ]

    reconnect_jitter: Annotated[
        float,
        Field(
            description="Maximum random delay (seconds) added to each reconnection attempt.",
            default=1.2,
            ge=0
        )
    ]


class CodecSettings(BaseModel):
    format: Annotated[
        Literal["json", "msgpack"],
        Field(
            description=(
                "Wire format of published events.\n"
                "'json' is readable from redis-cli; 'msgpack' is more compact.\n"
                "Publishers and workers on a channel must agree on it."
            ),
            default="json"
        )
    ]


class DispatchSettings(BaseModel):
    handler_timeout: Annotated[
        float | None,
        Field(
            description=(
                "Maximum time (seconds) a processor may spend on one event.\n"
                "A processor exceeding it is cancelled and the event is logged as failed.\n"
                "Unset means no limit."
            ),
            default=None,
            gt=0
        )
    ]

    max_inflight: Annotated[
        int,
        Field(
            description=(
                "Number of events that may be dispatched concurrently.\n"
                "1 keeps strict delivery order; processors must be safe under\n"
                "concurrency before raising it."
            ),
            default=1,
            ge=1
        )
    ]

    shutdown_grace: Annotated[
        float,
        Field(
            description=(
                "Time (seconds) in-flight dispatches get to finish on shutdown.\n"
                "Dispatches still running afterwards are cancelled."
            ),
            default=10.0,
            gt=0
        )
    ]


class PubrouteConfig(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="PUBROUTE_",
        env_nested_delimiter="__",
        extra="ignore"
    )

    broker: Annotated[
        BrokerSettings,
        Field(
            description=(
                "Pub/sub broker configuration.\n"
                "Defines the Redis server to connect to, the channel to subscribe to\n"
                "and how connection losses are retried."
            )
        )
    ]

    codec: Annotated[
        CodecSettings,
        Field(
            description="Serialization of event payloads.",
            default_factory=CodecSettings
        )
    ]

    dispatch: Annotated[
        DispatchSettings,
        Field(
            description="Limits applied while routing events to processors.",
            default_factory=DispatchSettings
        )
    ]

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # Priority: explicit arguments > PUBROUTE_* environment > YAML file
        return (init_settings, env_settings, YamlConfigSettingsSource(settings_cls))


def load_config(file: Path) -> PubrouteConfig:
    """Build a PubrouteConfig whose YAML source is `file`."""

    class FileConfig(PubrouteConfig):
        model_config = SettingsConfigDict(yaml_file=file)

    return FileConfig()  # type: ignore[call-arg]
