"""Configuration module for Service Bus Diver"""

from .azure_config import azure_config, AzureConfig

__all__ = ['azure_config', 'AzureConfig']
