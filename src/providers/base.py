"""
Cloud Provider Base - Abstract interface for cloud providers.

A cloud provider offers a fixed set of capabilities to the host controller.
Each capability is either backed by an implementation or unsupported.
"""

import logging
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


class Capability(Enum):
    """Capabilities a host controller may ask a cloud provider for."""

    LOAD_BALANCER = "load_balancer"
    INSTANCES = "instances"
    INSTANCES_V2 = "instances_v2"
    ZONES = "zones"
    CLUSTERS = "clusters"
    ROUTES = "routes"


class CloudProvider(ABC):
    """
    Abstract base class for cloud providers.

    Providers are registered with the ProviderRegistry under their name and
    built from configuration by the bootstrap code.
    """

    @classmethod
    def from_config(cls, config: Any) -> "CloudProvider":
        """
        Build the provider from the loaded configuration.

        Override this method in subclasses that can be built by the registry.
        """
        raise NotImplementedError(f"{cls.__name__} cannot be built from config")

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique identifier for this provider (e.g., 'kce')."""
        pass

    @abstractmethod
    def capabilities(self) -> Dict[Capability, Any]:
        """
        Return the supported capabilities.

        Returns:
            Mapping of capability to its implementation. Capabilities that
            are not in the mapping are unsupported.
        """
        pass

    @property
    def has_cluster_id(self) -> bool:
        """Whether the provider requires a cluster ID."""
        return True

    async def initialize(self) -> None:
        """Prepare the provider before first use."""
        pass

    async def close(self) -> None:
        """Release any resources held by the provider."""
        pass

    def get(self, capability: Capability) -> Optional[Any]:
        """
        Get the implementation of a capability.

        Args:
            capability: The capability requested by the host

        Returns:
            The implementation, or None if the capability is unsupported
        """
        return self.capabilities().get(capability)

    def supports(self, capability: Capability) -> bool:
        """Check whether a capability is supported."""
        return self.get(capability) is not None
