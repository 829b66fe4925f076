"""
Provider Registry - Discovery and registration of cloud providers.

This module maps provider names to provider classes for the bootstrap code.
The load balancer manager itself never goes through the registry.
"""

import logging
from importlib.metadata import entry_points
from typing import Dict, List, Optional, Type

from config import Config
from providers.base import CloudProvider

logger = logging.getLogger(__name__)

ENTRY_POINT_GROUP = "kce.providers"


class ProviderRegistry:
    """
    Central registry for cloud providers.

    Provider classes are registered under their name and built on demand
    with a classmethod ``from_config(config)``.
    """

    def __init__(self):
        # Registered provider classes (not instantiated)
        self._providers: Dict[str, Type[CloudProvider]] = {}

        # Initialized provider instances
        self._instances: Dict[str, CloudProvider] = {}

    def register_provider(
        self, provider_class: Type[CloudProvider], name: Optional[str] = None
    ) -> None:
        """
        Register a provider class.

        Args:
            provider_class: The CloudProvider subclass to register
            name: Name to register under. Defaults to the class' PROVIDER_NAME
                attribute.
        """
        name = name or getattr(provider_class, "PROVIDER_NAME", None)
        if not name:
            raise ValueError(
                f"Provider class {provider_class.__name__} has no name to "
                f"register under"
            )

        if name in self._providers:
            logger.warning(f"Overwriting existing provider: {name}")

        self._providers[name] = provider_class
        logger.info(f"Registered cloud provider: {name}")

    async def get_provider(self, name: str, config: Config) -> CloudProvider:
        """
        Get an initialized provider instance.

        Args:
            name: The provider name to retrieve
            config: Configuration passed to the provider's from_config()

        Returns:
            An initialized CloudProvider instance

        Raises:
            ValueError: If the provider name is not registered
        """
        if name not in self._providers:
            available = ", ".join(self._providers.keys()) or "none"
            raise ValueError(
                f"Unknown cloud provider: {name}. Available providers: {available}"
            )

        if name not in self._instances:
            provider = self._providers[name].from_config(config)
            await provider.initialize()
            self._instances[name] = provider
            logger.info(f"Initialized cloud provider: {name}")

        return self._instances[name]

    async def close(self) -> None:
        """Close every initialized provider."""
        for name, provider in list(self._instances.items()):
            try:
                await provider.close()
            except Exception as e:
                logger.error(f"Error closing provider '{name}': {e}")
        self._instances.clear()

    def list_providers(self) -> List[str]:
        """List all registered provider names."""
        return list(self._providers.keys())

    def has_provider(self, name: str) -> bool:
        """Check if a provider is registered."""
        return name in self._providers


# Global registry instance
_registry: Optional[ProviderRegistry] = None


def get_registry() -> ProviderRegistry:
    """Get the global provider registry singleton."""
    global _registry
    if _registry is None:
        _registry = ProviderRegistry()
    return _registry


def reset_registry() -> None:
    """Reset the global registry (mainly for testing)."""
    global _registry
    _registry = None


def register_builtin_providers() -> None:
    """
    Register the built-in KCE provider and discover other providers via
    entry points.
    """
    registry = get_registry()

    from providers.kce import KCEProvider

    registry.register_provider(KCEProvider)

    discovered = entry_points(group=ENTRY_POINT_GROUP)
    for ep in discovered:
        try:
            provider_class = ep.load()
            registry.register_provider(provider_class, name=ep.name)
        except Exception as e:
            logger.warning(f"Could not load cloud provider {ep.name}: {e}")
