"""
Test suite for configuration and main application
"""
import dataclasses

import pytest
from bi_editor import main as main_module
from bi_editor.config import EditorConfig


def test_editor_config_creation():
    """Test creation of EditorConfig"""
    config = EditorConfig()

    # Verify default values are set
    assert config.database == ":memory:"
    assert config.row_limit == 200
    assert config.pool_size == 10
    assert config.port == 3000
    assert config.pk_columns == ()


def test_editor_config_validation():
    """Test configuration validation"""
    config = EditorConfig(table="items", pk_columns=("id",))

    # Valid config should not raise an error
    config.validate()

    # Missing table and pk
    with pytest.raises(ValueError, match="APP_TABLE is required; APP_PK is required"):
        EditorConfig().validate()

    with pytest.raises(ValueError, match="row_limit must be positive"):
        EditorConfig(table="items", pk_columns=("id",), row_limit=0).validate()

    with pytest.raises(ValueError, match="not a valid identifier"):
        EditorConfig(table="items;", pk_columns=("id",)).validate()

    with pytest.raises(ValueError, match="APP_PK column"):
        EditorConfig(table="items", pk_columns=("id", "bad col")).validate()


def test_editor_config_is_immutable():
    config = EditorConfig(table="items", pk_columns=("id",))
    with pytest.raises(dataclasses.FrozenInstanceError):
        config.table = "other"


def test_config_from_env(monkeypatch):
    """Test loading config from environment variables"""
    monkeypatch.setenv('EDITOR_DATABASE', 'data/stock.duckdb')
    monkeypatch.setenv('APP_TABLE', 'stock')
    monkeypatch.setenv('APP_PK', ' material_code , center ,')
    monkeypatch.setenv('APP_LIMIT', '50')
    monkeypatch.setenv('PORT', '8080')
    monkeypatch.setenv('EDITOR_READ_ONLY', 'true')
    monkeypatch.setenv('LOG_LEVEL', 'debug')

    config = EditorConfig.from_env()

    assert config.database == 'data/stock.duckdb'
    assert config.table == 'stock'
    assert config.pk_columns == ('material_code', 'center')
    assert config.row_limit == 50
    assert config.port == 8080
    assert config.read_only is True
    assert config.log_level == 'DEBUG'
    config.validate()


def test_config_from_env_defaults(monkeypatch):
    for name in ('EDITOR_DATABASE', 'APP_TABLE', 'APP_PK', 'APP_LIMIT', 'PORT'):
        monkeypatch.delenv(name, raising=False)

    config = EditorConfig.from_env()

    assert config.table == ""
    assert config.pk_columns == ()
    assert config.row_limit == 200
    with pytest.raises(ValueError):
        config.validate()


def test_main_starts_server(monkeypatch):
    """main() builds the app from the environment and hands it to uvicorn"""
    for name in ('HOST', 'EDITOR_DATABASE', 'EDITOR_READ_ONLY', 'EDITOR_POOL_SIZE', 'LOG_LEVEL'):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv('APP_TABLE', 'items')
    monkeypatch.setenv('APP_PK', 'id')
    monkeypatch.setenv('PORT', '3100')
    calls = {}

    def fake_run(app, host, port):
        calls["app"] = app
        calls["host"] = host
        calls["port"] = port

    monkeypatch.setattr(main_module.uvicorn, "run", fake_run)

    main_module.main()

    assert calls["port"] == 3100
    assert calls["host"] == "0.0.0.0"
    assert calls["app"].title == "BI Editor API"


def test_main_rejects_missing_config(monkeypatch):
    monkeypatch.delenv('APP_TABLE', raising=False)
    monkeypatch.delenv('APP_PK', raising=False)
    with pytest.raises(ValueError):
        main_module.main()


if __name__ == "__main__":
    pytest.main([__file__])
