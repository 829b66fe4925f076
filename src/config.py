"""
Configuration module for the Katapult cloud provider.

Loads configuration from environment variables.
"""

import os
from dataclasses import dataclass, field
from typing import Optional

from katapult.models import DataCenter, Organization

DEFAULT_API_HOST = "https://api.katapult.io"


def _require_env(name: str, description: str) -> str:
    value = os.getenv(name, "")
    if not value:
        raise ValueError(
            f"{name} environment variable must be set. "
            f"{description} cannot be empty."
        )
    return value


@dataclass
class KatapultConfig:
    """Katapult API connection configuration."""

    api_token: str = field(default="", repr=False)  # Never log the token
    api_host: str = DEFAULT_API_HOST
    timeout: int = 30  # seconds per request

    @classmethod
    def from_env(cls):
        """Load from environment variables."""
        return cls(
            api_token=_require_env("KATAPULT_API_TOKEN", "API token"),
            api_host=os.getenv("KATAPULT_API_HOST", DEFAULT_API_HOST),
            timeout=int(os.getenv("KATAPULT_API_TIMEOUT", "30")),
        )


@dataclass(frozen=True)
class LoadBalancerConfig:
    """Where load balancers are created and which nodes they target."""

    organization_id: str
    data_center_id: str
    node_tag_id: str

    @classmethod
    def from_env(cls):
        """Load from environment variables."""
        return cls(
            organization_id=_require_env(
                "KATAPULT_ORGANIZATION_RID", "Organization ID"
            ),
            data_center_id=_require_env("KATAPULT_DATA_CENTER_RID", "Data center ID"),
            node_tag_id=_require_env("KATAPULT_NODE_TAG_RID", "Node tag ID"),
        )

    def org_ref(self) -> Organization:
        """Reference to the configured organization."""
        return Organization(id=self.organization_id)

    def dc_ref(self) -> DataCenter:
        """Reference to the configured data center."""
        return DataCenter(id=self.data_center_id)


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = "INFO"

    @classmethod
    def from_env(cls):
        """Load from environment variables."""
        return cls(level=os.getenv("LOG_LEVEL", "INFO").upper())


@dataclass
class ProviderConfig:
    """Which registered cloud provider to run."""

    name: str = "kce"

    @classmethod
    def from_env(cls):
        """Load from environment variables."""
        return cls(name=os.getenv("CLOUD_PROVIDER", "kce"))


@dataclass
class Config:
    """Main configuration object."""

    katapult: KatapultConfig
    load_balancer: LoadBalancerConfig
    logging: LoggingConfig
    provider: ProviderConfig

    @classmethod
    def from_env(cls):
        """Load all configuration from environment variables."""
        return cls(
            katapult=KatapultConfig.from_env(),
            load_balancer=LoadBalancerConfig.from_env(),
            logging=LoggingConfig.from_env(),
            provider=ProviderConfig.from_env(),
        )


# Global config instance
config: Optional[Config] = None


def load_config() -> Config:
    """Load configuration (singleton pattern)."""
    global config
    if config is None:
        config = Config.from_env()
    return config


def get_config() -> Config:
    """Get the current configuration."""
    if config is None:
        return load_config()
    return config


def reset_config() -> None:
    """Reset configuration (mainly for testing)."""
    global config
    config = None
