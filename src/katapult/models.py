"""
Katapult core API models.

Pydantic models for the subset of the Katapult core v1 API used to manage
load balancers and their rules. Unknown response fields are ignored.
"""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class RuleAlgorithm(str, Enum):
    """Load balancing algorithms supported by a rule."""

    ROUND_ROBIN = "round_robin"
    LEAST_CONNECTIONS = "least_connections"
    STICKY = "sticky"


class Protocol(str, Enum):
    """Protocols a rule can listen on."""

    HTTP = "HTTP"
    HTTPS = "HTTPS"
    TCP = "TCP"


class ResourceType(str, Enum):
    """How a load balancer selects its targets."""

    TAGS = "tags"
    VIRTUAL_MACHINES = "virtual_machines"
    VIRTUAL_MACHINE_GROUPS = "virtual_machine_groups"


class APIModel(BaseModel):
    """Base model for API payloads."""

    model_config = ConfigDict(extra="ignore", use_enum_values=True)


class Organization(APIModel):
    """Reference to an organization."""

    id: Optional[str] = None
    sub_domain: Optional[str] = None


class DataCenter(APIModel):
    """Reference to a data center."""

    id: Optional[str] = None
    name: Optional[str] = None
    permalink: Optional[str] = None


class IPAddress(APIModel):
    id: Optional[str] = None
    address: str = ""


class LoadBalancer(APIModel):
    """A load balancer as returned by the API."""

    id: str
    name: str = ""
    resource_type: Optional[ResourceType] = None
    resource_ids: List[str] = Field(default_factory=list)
    ip_address: Optional[IPAddress] = None
    https_redirect: Optional[bool] = None
    data_center: Optional[DataCenter] = None

    @property
    def address(self) -> str:
        """The ingress IP address, or an empty string if none is allocated."""
        if self.ip_address is None:
            return ""
        return self.ip_address.address


class LoadBalancerRule(APIModel):
    """A forwarding rule belonging to a load balancer."""

    id: str
    algorithm: Optional[RuleAlgorithm] = None
    destination_port: int = 0
    listen_port: int = 0
    protocol: Optional[Protocol] = None
    proxy_protocol: Optional[bool] = None
    check_enabled: Optional[bool] = None
    check_fall: Optional[int] = None
    check_interval: Optional[int] = None
    check_path: Optional[str] = None
    check_protocol: Optional[Protocol] = None
    check_rise: Optional[int] = None
    check_timeout: Optional[int] = None


class Pagination(APIModel):
    """Pagination metadata attached to list responses."""

    current_page: int = 1
    per_page: int = 0
    total_pages: int = 1
    total: int = 0
    large_set: bool = False


class ListOptions(APIModel):
    """Page selection for list requests."""

    page: Optional[int] = None
    per_page: Optional[int] = None


class LoadBalancerCreateArguments(APIModel):
    """Properties used to create a load balancer."""

    name: str
    data_center: DataCenter
    resource_type: ResourceType
    resource_ids: List[str] = Field(default_factory=list)


class LoadBalancerUpdateArguments(APIModel):
    """Properties that can be changed on an existing load balancer."""

    name: Optional[str] = None
    resource_type: Optional[ResourceType] = None
    resource_ids: Optional[List[str]] = None


class LoadBalancerRuleArguments(APIModel):
    """Properties used to create or overwrite a load balancer rule."""

    algorithm: RuleAlgorithm
    destination_port: int
    listen_port: int
    protocol: Protocol
    proxy_protocol: Optional[bool] = None
    check_enabled: Optional[bool] = None
    check_fall: Optional[int] = None
    check_interval: Optional[int] = None
    check_path: Optional[str] = None
    check_protocol: Optional[Protocol] = None
    check_rise: Optional[int] = None
    check_timeout: Optional[int] = None
