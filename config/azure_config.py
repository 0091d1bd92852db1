"""
Azure Configuration Management
Handles environment-specific Service Bus connection and inspection settings
Compatible with Azure Developer CLI (azd) outputs
"""
import os
from typing import Optional


class AzureConfig:
    """Manages Service Bus inspection settings based on environment"""

    def __init__(self):
        self.environment = os.getenv('ENVIRONMENT', 'development').lower()

    def _get_int(self, name: str, default: int) -> int:
        raw_value = os.getenv(name)
        if raw_value is None or raw_value == '':
            return default
        try:
            return int(raw_value)
        except ValueError:
            raise ValueError(f"{name} must be an integer, got '{raw_value}'")

    def get_servicebus_namespace(self) -> Optional[str]:
        """Get Service Bus namespace name (without the DNS suffix)"""
        return os.getenv('AZURE_SERVICEBUS_NAMESPACE_NAME', os.getenv('AZURE_SERVICE_BUS_NAMESPACE'))

    def get_default_page_size(self) -> int:
        """Get the page size used when a caller does not pick one"""
        return self._get_int('SERVICEBUS_DEFAULT_PAGE_SIZE', 25)

    def get_default_search_limit(self) -> int:
        """Get the maximum number of search hits when a caller does not pick one"""
        return self._get_int('SERVICEBUS_DEFAULT_SEARCH_LIMIT', 50)

    def get_default_content_type(self) -> str:
        """Get the content type stamped on sent messages"""
        return os.getenv('SERVICEBUS_DEFAULT_CONTENT_TYPE', 'application/json')

    def get_log_level(self) -> str:
        """Get root log level"""
        return os.getenv('LOG_LEVEL', 'INFO').upper()

    def get_log_dir(self) -> Optional[str]:
        """Get log file directory - console only when unset"""
        return os.getenv('LOG_DIR')

    def is_development(self) -> bool:
        """Check if running in development mode"""
        return self.environment == 'development'

    def is_production(self) -> bool:
        """Check if running in production mode"""
        return self.environment == 'production'

    def validate_configuration(self) -> dict:
        """Validate that all required configuration is present"""
        validation = {
            'namespace': bool(self.get_servicebus_namespace()),
            'environment': bool(self.environment)
        }
        return validation

    def get_configuration_summary(self) -> str:
        """Get a summary of current configuration"""
        validation = self.validate_configuration()
        missing = [k for k, v in validation.items() if not v]

        summary = f"Environment: {self.environment}\n"
        summary += f"Service Bus: {'✅ ' + self.get_servicebus_namespace() if validation['namespace'] else '❌'}\n"
        summary += f"Default page size: {self.get_default_page_size()}\n"
        summary += f"Default search limit: {self.get_default_search_limit()}\n"

        if missing:
            summary += f"\n⚠️  Missing: {', '.join(missing)}"
            summary += "\n💡 Set AZURE_SERVICEBUS_NAMESPACE_NAME or run 'azd env get-values'"
        else:
            summary += "\n🎯 All required configuration present!"

        return summary


# Global instance
azure_config = AzureConfig()
