"""
Katapult API client package.

Provides the pydantic models, collaborator contracts and the aiohttp client
used to manage load balancers on Katapult.
"""

from katapult.base import KatapultError, LoadBalancerAPI, LoadBalancerRuleAPI
from katapult.client import KatapultClient
from katapult.models import (
    DataCenter,
    ListOptions,
    LoadBalancer,
    LoadBalancerRule,
    Organization,
    Pagination,
)

__all__ = [
    "DataCenter",
    "KatapultClient",
    "KatapultError",
    "ListOptions",
    "LoadBalancer",
    "LoadBalancerAPI",
    "LoadBalancerRule",
    "LoadBalancerRuleAPI",
    "Organization",
    "Pagination",
]
