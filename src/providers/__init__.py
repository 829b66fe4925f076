"""
Cloud providers.

This package provides the cloud provider interface, the KCE provider and the
registry used by bootstrap code to look providers up by name.
"""

from providers.base import Capability, CloudProvider
from providers.registry import ProviderRegistry, get_registry

__all__ = [
    "Capability",
    "CloudProvider",
    "ProviderRegistry",
    "get_registry",
]
