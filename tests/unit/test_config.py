"""
Unit tests for StoreConfig.
"""

import pytest

from mongo_records.config import StoreConfig
from mongo_records.constants import DEFAULT_MAX_POOL_SIZE, DEFAULT_SERVERS
from mongo_records.exceptions import ConfigurationError


class TestStoreConfigDefaults:
    def test_defaults(self, clean_env):
        config = StoreConfig(db_name="app")
        assert config.servers == DEFAULT_SERVERS
        assert config.db_name == "app"
        assert config.max_pool_size == DEFAULT_MAX_POOL_SIZE

    def test_reads_environment(self, clean_env, monkeypatch):
        monkeypatch.setenv("MONGO_URI", "mongodb://db:27017")
        monkeypatch.setenv("DB_NAME", "from_env")
        monkeypatch.setenv("MONGO_MAX_POOL_SIZE", "7")
        config = StoreConfig()
        assert config.servers == "mongodb://db:27017"
        assert config.db_name == "from_env"
        assert config.max_pool_size == 7

    def test_parameters_override_environment(self, clean_env, monkeypatch):
        monkeypatch.setenv("DB_NAME", "from_env")
        assert StoreConfig(db_name="explicit").db_name == "explicit"

    def test_non_integer_environment_value(self, clean_env, monkeypatch):
        monkeypatch.setenv("MONGO_MAX_POOL_SIZE", "lots")
        with pytest.raises(ConfigurationError) as exc_info:
            StoreConfig()
        assert exc_info.value.config_key == "MONGO_MAX_POOL_SIZE"


class TestStoreConfigValidate:
    def test_valid(self, clean_env):
        StoreConfig(servers="localhost", db_name="app").validate()

    def test_missing_db_name(self, clean_env):
        with pytest.raises(ConfigurationError) as exc_info:
            StoreConfig(servers="localhost").validate()
        assert exc_info.value.config_key == "db_name"

    def test_min_pool_larger_than_max(self, clean_env):
        config = StoreConfig(db_name="app", max_pool_size=2, min_pool_size=5)
        with pytest.raises(ConfigurationError) as exc_info:
            config.validate()
        assert exc_info.value.config_key == "min_pool_size"

    def test_negative_max_pool(self, clean_env):
        config = StoreConfig(db_name="app")
        config.max_pool_size = 0
        with pytest.raises(ConfigurationError):
            config.validate()
