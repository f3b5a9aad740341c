"""
Tests for config.py and core/llm/config.py - settings and the models config file.
"""
import json

import pytest
from pydantic import ValidationError as PydanticValidationError

from transgate.config import Settings
from transgate.core.errors import ConfigError
from transgate.core.llm.config import (
    DEFAULT_MODELS,
    ModelsConfig,
    ProviderConfig,
    load_models_config,
    load_or_create_models_config,
    save_models_config,
)


@pytest.fixture
def config_path(tmp_path):
    return tmp_path / "config.json"


@pytest.fixture
def sample_config_data():
    return {
        "port": 9090,
        "defaultModel": "local",
        "models": {
            "local": {
                "type": "openai",
                "apiKey": "sk-local",
                "apiUrl": "http://127.0.0.1:8000/v1/chat/completions",
                "modelName": "qwen2.5",
                "systemMsg": "Translate to Chinese.",
            }
        },
    }


class TestLoadOrCreate:
    """Tests for load_or_create_models_config."""

    def test_missing_file_writes_defaults(self, config_path):
        config = load_or_create_models_config(config_path)

        assert config_path.exists()
        data = json.loads(config_path.read_text(encoding="utf-8"))
        assert data["defaultModel"] == config.default_model
        assert len(data["models"]) >= 2
        # Operators fill credentials in by hand
        assert all(model["apiKey"] == "" for model in data["models"].values())
        urls = {model["apiUrl"] for model in data["models"].values()}
        assert len(urls) == len(data["models"])

    def test_existing_file_is_loaded(self, config_path, sample_config_data):
        config_path.write_text(json.dumps(sample_config_data), encoding="utf-8")

        config = load_or_create_models_config(config_path)

        assert config.port == 9090
        assert config.default_model == "local"
        local = config.models["local"]
        assert local.api_key.get_secret_value() == "sk-local"
        assert local.model_name == "qwen2.5"
        assert local.kind == "openai"

    def test_second_start_reads_what_first_wrote(self, config_path):
        first = load_or_create_models_config(config_path)
        second = load_or_create_models_config(config_path)

        assert second == first


class TestLoadModelsConfig:
    """Tests for malformed config files."""

    def test_invalid_json(self, config_path):
        config_path.write_text("{", encoding="utf-8")

        with pytest.raises(ConfigError):
            load_models_config(config_path)

    def test_invalid_schema(self, config_path):
        config_path.write_text(json.dumps({"models": ["deepseek"]}), encoding="utf-8")

        with pytest.raises(ConfigError):
            load_models_config(config_path)

    def test_not_an_object(self, config_path):
        config_path.write_text("[]", encoding="utf-8")

        with pytest.raises(ConfigError):
            load_models_config(config_path)


class TestProviderConfig:
    """Tests for ProviderConfig."""

    def test_credential_hidden_from_repr(self):
        provider = ProviderConfig(api_key="sk-very-secret", model_name="m")

        assert "sk-very-secret" not in repr(provider)
        assert "sk-very-secret" not in str(provider)

    def test_saved_file_keeps_credential_and_aliases(self, config_path):
        config = ModelsConfig(
            default_model="deepseek",
            models={
                "deepseek": ProviderConfig(
                    kind="deepseek",
                    api_key="sk-1",
                    api_url=DEFAULT_MODELS["deepseek"].api_url,
                    model_name="deepseek-chat",
                    system_msg="Translate.",
                )
            },
        )

        save_models_config(config, config_path)
        data = json.loads(config_path.read_text(encoding="utf-8"))

        assert data["models"]["deepseek"]["apiKey"] == "sk-1"
        assert set(data["models"]["deepseek"]) == {"type", "apiKey", "apiUrl", "modelName", "systemMsg"}

    def test_frozen(self):
        provider = ProviderConfig(model_name="m")

        with pytest.raises(PydanticValidationError):
            provider.model_name = "other"


class TestSettings:
    """Tests for Settings.resolve_port."""

    def test_environment_port_wins(self, monkeypatch):
        monkeypatch.setenv("PORT", "9000")
        settings = Settings(_env_file=None)

        assert settings.resolve_port(8081) == 9000

    def test_config_file_port_then_default(self, monkeypatch):
        monkeypatch.delenv("PORT", raising=False)
        settings = Settings(_env_file=None)

        assert settings.resolve_port(8081) == 8081
        assert settings.resolve_port(None) == 8080

    def test_explicit_zero_ports_are_kept(self, monkeypatch):
        monkeypatch.setenv("PORT", "0")
        assert Settings(_env_file=None).resolve_port(8081) == 0

        monkeypatch.delenv("PORT", raising=False)
        assert Settings(_env_file=None).resolve_port(0) == 0
