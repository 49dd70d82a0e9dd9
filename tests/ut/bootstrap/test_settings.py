import pytest
import yaml

from pubroute.bootstrap.config.loader import resolve_configfile
from pubroute.bootstrap.config.settings import load_config
from pubroute.bootstrap.deps import get_serializer, read_config
from pubroute.infra.json_serializer import JsonSerializer
from pubroute.infra.msgpack_serializer import MsgPackSerializer


@pytest.fixture
def config_file(tmp_path):
    file = tmp_path / "pubroute.yaml"
    data = {
        "broker": {
            "url": "redis://redis.internal:6380/2",
            "channel": "kemao_3_event",
            "poll_interval": 0.5,
        },
        "codec": {"format": "msgpack"},
        "dispatch": {"handler_timeout": 2.5, "max_inflight": 4},
    }
    file.write_text(yaml.dump(data))
    return file


@pytest.mark.ut
def test_load_config_from_yaml(config_file):
    config = load_config(config_file)

    assert config.broker.url == "redis://redis.internal:6380/2"
    assert config.broker.channel == "kemao_3_event"
    assert config.broker.poll_interval == 0.5
    assert config.broker.reconnect_maximum == 30.0
    assert config.codec.format == "msgpack"
    assert config.dispatch.handler_timeout == 2.5
    assert config.dispatch.max_inflight == 4
    assert isinstance(get_serializer(config), MsgPackSerializer)


@pytest.mark.ut
def test_defaults(tmp_path):
    file = tmp_path / "pubroute.yaml"
    file.write_text(yaml.dump({"broker": {"channel": "events"}}))

    config = load_config(file)

    assert config.broker.url == "redis://localhost:6379/0"
    assert config.codec.format == "json"
    assert config.dispatch.handler_timeout is None
    assert config.dispatch.max_inflight == 1
    assert config.dispatch.shutdown_grace == 10.0
    assert isinstance(get_serializer(config), JsonSerializer)


@pytest.mark.ut
def test_environment_overrides_yaml(config_file, monkeypatch):
    monkeypatch.setenv("PUBROUTE_BROKER__CHANNEL", "from_env")

    config = load_config(config_file)

    assert config.broker.channel == "from_env"
    assert config.broker.url == "redis://redis.internal:6380/2"


@pytest.mark.ut
def test_invalid_config_exits_with_field_errors(tmp_path):
    file = tmp_path / "pubroute.yaml"
    file.write_text(yaml.dump({
        "broker": {"url": "redis://localhost"},
        "dispatch": {"max_inflight": 0},
    }))

    with pytest.raises(SystemExit) as info:
        read_config(file)

    message = str(info.value)
    assert "Configuration validation failed" in message
    assert "broker.channel" in message
    assert "dispatch.max_inflight" in message


@pytest.mark.ut
def test_resolve_configfile_priority(config_file, tmp_path, monkeypatch):
    monkeypatch.setenv("PUBROUTECONFIG", str(config_file))
    assert resolve_configfile(None) == config_file

    other = tmp_path / "other.yaml"
    other.write_text("broker: {channel: x}\n")
    assert resolve_configfile(str(other)) == other


@pytest.mark.ut
def test_resolve_configfile_missing(tmp_path, monkeypatch):
    monkeypatch.delenv("PUBROUTECONFIG", raising=False)
    monkeypatch.chdir(tmp_path)

    with pytest.raises(SystemExit, match="Configuration file not found"):
        resolve_configfile(None)
