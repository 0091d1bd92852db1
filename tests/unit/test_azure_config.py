"""
Module: test_azure_config.py
Description: Unit tests for environment-driven configuration.
"""

from typing import Optional, get_type_hints

import pytest

from config.azure_config import AzureConfig

CONFIG_VARIABLES = [
    "ENVIRONMENT",
    "AZURE_SERVICEBUS_NAMESPACE_NAME",
    "AZURE_SERVICE_BUS_NAMESPACE",
    "SERVICEBUS_DEFAULT_PAGE_SIZE",
    "SERVICEBUS_DEFAULT_SEARCH_LIMIT",
    "SERVICEBUS_DEFAULT_CONTENT_TYPE",
    "LOG_LEVEL",
    "LOG_DIR",
]


@pytest.fixture
def clean_env(monkeypatch):
    for name in CONFIG_VARIABLES:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestAzureConfig:

    def test_defaults(self, clean_env):
        config = AzureConfig()

        assert config.environment == "development"
        assert config.is_development()
        assert config.get_servicebus_namespace() is None
        assert config.get_default_page_size() == 25
        assert config.get_default_search_limit() == 50
        assert config.get_default_content_type() == "application/json"
        assert config.get_log_level() == "INFO"
        assert config.get_log_dir() is None

    def test_namespace_falls_back_to_legacy_variable(self, clean_env):
        clean_env.setenv("AZURE_SERVICE_BUS_NAMESPACE", "legacy-bus")

        assert AzureConfig().get_servicebus_namespace() == "legacy-bus"

        clean_env.setenv("AZURE_SERVICEBUS_NAMESPACE_NAME", "contoso")

        assert AzureConfig().get_servicebus_namespace() == "contoso"

    def test_integer_settings(self, clean_env):
        clean_env.setenv("SERVICEBUS_DEFAULT_PAGE_SIZE", "100")
        clean_env.setenv("SERVICEBUS_DEFAULT_SEARCH_LIMIT", "5")

        config = AzureConfig()

        assert config.get_default_page_size() == 100
        assert config.get_default_search_limit() == 5

    def test_invalid_integer_names_variable(self, clean_env):
        clean_env.setenv("SERVICEBUS_DEFAULT_PAGE_SIZE", "lots")

        with pytest.raises(ValueError, match="SERVICEBUS_DEFAULT_PAGE_SIZE"):
            AzureConfig().get_default_page_size()

    def test_environment_is_lowercased(self, clean_env):
        clean_env.setenv("ENVIRONMENT", "Production")

        config = AzureConfig()

        assert config.is_production()
        assert not config.is_development()

    def test_summary_reports_missing_namespace(self, clean_env):
        config = AzureConfig()

        assert config.validate_configuration() == {"namespace": False, "environment": True}
        assert "Missing: namespace" in config.get_configuration_summary()

    def test_summary_when_complete(self, clean_env):
        clean_env.setenv("AZURE_SERVICEBUS_NAMESPACE_NAME", "contoso")

        summary = AzureConfig().get_configuration_summary()

        assert "contoso" in summary
        assert "All required configuration present" in summary

    @pytest.mark.parametrize("getter", ["get_servicebus_namespace", "get_log_dir"])
    def test_unset_settings_are_typed_optional(self, getter):
        assert get_type_hints(getattr(AzureConfig, getter))["return"] == Optional[str]
