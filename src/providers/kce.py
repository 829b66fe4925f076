"""
Krystal Cloud Engine provider.

Backs the load balancer capability with Katapult load balancers. All other
capabilities are unsupported.
"""

import logging
from typing import Any, Dict, Optional

from config import Config, DEFAULT_API_HOST
from katapult.client import KatapultClient
from loadbalancer import LoadBalancerManager
from providers.base import Capability, CloudProvider

logger = logging.getLogger(__name__)


class KCEProvider(CloudProvider):
    """Cloud provider for Kubernetes clusters running on Katapult."""

    PROVIDER_NAME = "kce"

    def __init__(
        self,
        load_balancer: LoadBalancerManager,
        client: Optional[KatapultClient] = None,
    ):
        self.load_balancer = load_balancer
        self.client = client

    @classmethod
    def from_config(cls, config: Config) -> "KCEProvider":
        """
        Build the provider and its Katapult client from configuration.

        Args:
            config: Loaded configuration

        Returns:
            A KCEProvider using a new KatapultClient
        """
        if config.katapult.api_host != DEFAULT_API_HOST:
            logger.warning(
                f"Default Katapult API host overridden: {config.katapult.api_host}"
            )

        client = KatapultClient(
            api_token=config.katapult.api_token,
            base_url=config.katapult.api_host,
            timeout=config.katapult.timeout,
        )
        manager = LoadBalancerManager(
            config=config.load_balancer,
            load_balancers=client.load_balancers,
            load_balancer_rules=client.load_balancer_rules,
        )
        return cls(load_balancer=manager, client=client)

    @property
    def name(self) -> str:
        return self.PROVIDER_NAME

    def capabilities(self) -> Dict[Capability, Any]:
        return {Capability.LOAD_BALANCER: self.load_balancer}

    async def close(self) -> None:
        """Close the Katapult client."""
        if self.client is not None:
            await self.client.close()
