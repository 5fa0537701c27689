import pytest
from pydantic import ValidationError

from relay_trader.utils.config import RelayConfig, create_default_config, read_config
from relay_trader.utils.constants import DEFAULT_INIT_TIMEOUT_MS, endpoints_for_network
from relay_trader.utils.enums import NetworkId


def write(tmp_path, text, name="relay.yaml"):
    path = tmp_path / name
    path.write_text(text)
    return path


def test_read_config(tmp_path, logger):
    path = write(
        tmp_path,
        "Endpoint: https://api.example.relay/v2/\n"
        "WebsocketEndpoint: wss://ws.example.relay/v2\n"
        "LogPath: logs/relay.log\n",
    )

    config = read_config(path, logger)

    assert config.Endpoint == "https://api.example.relay/v2"
    assert config.SdkInitializationTimeout == DEFAULT_INIT_TIMEOUT_MS
    assert config.ConsoleLevel == "INFO"
    assert config.LogPath == "logs/relay.log"


def test_read_config_rejects_other_suffixes(tmp_path, logger):
    path = write(tmp_path, "Endpoint: x\n", name="relay.json")
    with pytest.raises(ValueError, match=".yaml"):
        read_config(path, logger)


def test_read_config_missing_file(tmp_path, logger):
    with pytest.raises(FileNotFoundError):
        read_config(tmp_path / "absent.yml", logger)


def test_read_config_missing_section(tmp_path, logger):
    path = write(tmp_path, "Endpoint: https://api.example.relay/v2\n")
    with pytest.raises(KeyError, match="WebsocketEndpoint"):
        read_config(path, logger)


def test_read_config_wrong_section_type(tmp_path, logger):
    path = write(tmp_path, "Endpoint: [a, b]\nWebsocketEndpoint: wss://ws\n")
    with pytest.raises(TypeError, match="Endpoint"):
        read_config(path, logger)


def test_read_config_non_mapping(tmp_path, logger):
    path = write(tmp_path, "- just\n- a list\n")
    with pytest.raises(TypeError, match="mapping"):
        read_config(path, logger)


def test_read_config_bad_yaml(tmp_path, logger):
    path = write(tmp_path, "Endpoint: [unclosed\n")
    with pytest.raises(ValueError, match="YAML syntax error"):
        read_config(path, logger)


def test_read_config_schema_failure(tmp_path, logger):
    path = write(
        tmp_path,
        "Endpoint: https://api.example.relay/v2\n"
        "WebsocketEndpoint: wss://ws.example.relay/v2\n"
        "SdkInitializationTimeout: -5\n",
    )
    with pytest.raises(ValidationError):
        read_config(path, logger)


def test_config_validators():
    with pytest.raises(ValidationError):
        RelayConfig(Endpoint="", WebsocketEndpoint="wss://ws")
    with pytest.raises(ValidationError):
        RelayConfig(Endpoint="https://api", WebsocketEndpoint="wss://ws", ConsoleLevel="LOUD")

    config = RelayConfig(Endpoint="https://api", WebsocketEndpoint="wss://ws/", FileLevel="warning")
    assert config.WebsocketEndpoint == "wss://ws"
    assert config.FileLevel == "WARNING"


def test_create_default_config(logger):
    config = create_default_config(logger, NetworkId.KOVAN)
    assert config.Endpoint == "https://api.kovan.radarrelay.com/v2"
    assert config.WebsocketEndpoint == "wss://ws.kovan.radarrelay.com/v2"


def test_endpoints_for_network():
    assert endpoints_for_network(1) == {
        "endpoint": "https://api.radarrelay.com/v2",
        "websocket_endpoint": "wss://ws.radarrelay.com/v2",
    }
    with pytest.raises(ValueError, match="Unsupported network: 3"):
        endpoints_for_network(3)
