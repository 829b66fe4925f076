"""
Kubernetes object types consumed by the load balancer provider.

Only the fields the provider reads are modelled. Instances are treated as
read-only input.
"""

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass(frozen=True)
class ServicePort:
    """A port exposed by a service."""

    port: int
    node_port: int
    name: Optional[str] = None
    protocol: str = "TCP"


@dataclass(frozen=True)
class Service:
    """Desired state of a LoadBalancer service."""

    name: str
    namespace: str = "default"
    uid: str = ""
    ports: List[ServicePort] = field(default_factory=list)


@dataclass(frozen=True)
class Node:
    """A cluster node. Passed through by callers, not used for targeting."""

    name: str


@dataclass
class LoadBalancerIngress:
    """An ingress point of a load balancer."""

    ip: str


@dataclass
class LoadBalancerStatus:
    """Observed status of a load balancer, as reported back to the service."""

    ingress: List[LoadBalancerIngress] = field(default_factory=list)

    @classmethod
    def for_ip(cls, ip: str) -> "LoadBalancerStatus":
        return cls(ingress=[LoadBalancerIngress(ip=ip)])
