"""
Load Balancer Manager - Reconciles Katapult load balancers for services.

Each LoadBalancer service owns one Katapult load balancer, found by a name
derived from the cluster and service. Its rules are converged towards the
service ports on every call: missing rules are created, existing rules are
overwritten with the full rule policy, and rules for ports the service no
longer exposes are deleted. Nothing is cached between calls; every operation
starts from a fresh listing of the remote state.

Concurrent ensure calls for the same service are not serialized. Two calls
that both find no load balancer will both create one.
"""

import logging
from typing import List, Optional, Sequence, Tuple

from config import LoadBalancerConfig
from katapult.base import LoadBalancerAPI, LoadBalancerRuleAPI
from katapult.models import (
    LoadBalancer,
    LoadBalancerCreateArguments,
    LoadBalancerRule,
    LoadBalancerRuleArguments,
    Protocol,
    ResourceType,
    RuleAlgorithm,
)
from naming import load_balancer_name
from pagination import list_all
from service import LoadBalancerStatus, Node, Service, ServicePort

logger = logging.getLogger(__name__)

# Health check policy applied to every rule
CHECK_TIMEOUT = 5
CHECK_INTERVAL = 10
CHECK_RISE = 1
CHECK_FALL = 1


class LoadBalancerNotFound(Exception):
    """Raised when no load balancer with the given name exists."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"load balancer {name!r} not found")


def rule_arguments(port: ServicePort) -> LoadBalancerRuleArguments:
    """
    Build the rule properties for a service port.

    Every field is set on both create and update so that an update fully
    overwrites the remote rule.
    """
    return LoadBalancerRuleArguments(
        algorithm=RuleAlgorithm.ROUND_ROBIN,
        destination_port=port.node_port,
        listen_port=port.port,
        protocol=Protocol.TCP,
        proxy_protocol=False,
        check_enabled=True,
        check_protocol=Protocol.TCP,
        check_timeout=CHECK_TIMEOUT,
        check_interval=CHECK_INTERVAL,
        check_rise=CHECK_RISE,
        check_fall=CHECK_FALL,
    )


class LoadBalancerManager:
    """
    Manages the Katapult load balancers backing LoadBalancer services.

    Implements the load balancer capability of the cloud provider: get,
    ensure, update and ensure-deleted. Load balancers target the configured
    node tag, so node lists passed in by the caller are not used.
    """

    def __init__(
        self,
        config: LoadBalancerConfig,
        load_balancers: LoadBalancerAPI,
        load_balancer_rules: LoadBalancerRuleAPI,
    ):
        self.config = config
        self.load_balancers = load_balancers
        self.load_balancer_rules = load_balancer_rules

    # Remote state

    async def list_load_balancers(self) -> List[LoadBalancer]:
        """List every load balancer in the configured organization."""
        org = self.config.org_ref()
        return await list_all(lambda opts: self.load_balancers.list(org, opts))

    async def list_load_balancer_rules(
        self, balancer: LoadBalancer
    ) -> List[LoadBalancerRule]:
        """List every rule of a load balancer."""
        return await list_all(
            lambda opts: self.load_balancer_rules.list(balancer, opts)
        )

    async def get_load_balancer(self, name: str) -> LoadBalancer:
        """
        Find a load balancer by name.

        Args:
            name: The load balancer name

        Returns:
            The first load balancer with a matching name

        Raises:
            LoadBalancerNotFound: If no load balancer has this name
        """
        for balancer in await self.list_load_balancers():
            if balancer.name == name:
                return balancer

        raise LoadBalancerNotFound(name)

    # Rules

    async def ensure_load_balancer_rules(
        self, service: Service, balancer: LoadBalancer
    ) -> None:
        """
        Create or update a rule for every port of the service.

        Rules are matched to ports on their listen port. Matching rules are
        always updated, even when they already carry the right values.
        """
        rules = await self.list_load_balancer_rules(balancer)

        for port in service.ports:
            found: Optional[LoadBalancerRule] = next(
                (rule for rule in rules if rule.listen_port == port.port), None
            )
            args = rule_arguments(port)

            if found is None:
                logger.info(
                    f"Creating load balancer rule: lb={balancer.id} "
                    f"service={service.uid} port={port.port}"
                )
                await self.load_balancer_rules.create(balancer, args)
            else:
                logger.info(
                    f"Updating load balancer rule: lb={balancer.id} "
                    f"rule={found.id} service={service.uid} port={port.port}"
                )
                await self.load_balancer_rules.update(found, args)

    async def tidy_load_balancer_rules(
        self, service: Service, balancer: LoadBalancer
    ) -> None:
        """Delete rules whose listen port is no longer exposed by the service."""
        rules = await self.list_load_balancer_rules(balancer)
        ports = {port.port for port in service.ports}

        for rule in rules:
            if rule.listen_port in ports:
                continue

            logger.info(
                f"Deleting load balancer rule: lb={balancer.id} "
                f"rule={rule.id} service={service.uid} port={rule.listen_port}"
            )
            await self.load_balancer_rules.delete(rule)

    # Load balancer capability

    def get_load_balancer_name(self, cluster_name: str, service: Service) -> str:
        """Return the name of the load balancer owned by the service."""
        return load_balancer_name(cluster_name, service.namespace, service.name)

    async def get_load_balancer_status(
        self, cluster_name: str, service: Service
    ) -> Tuple[Optional[LoadBalancerStatus], bool]:
        """
        Return whether the service's load balancer exists, and its status.

        Returns:
            Tuple of (status, exists). Status is None when it does not exist.
        """
        name = self.get_load_balancer_name(cluster_name, service)
        try:
            balancer = await self.get_load_balancer(name)
        except LoadBalancerNotFound:
            return None, False

        return LoadBalancerStatus.for_ip(balancer.address), True

    async def ensure_load_balancer(
        self,
        cluster_name: str,
        service: Service,
        nodes: Optional[Sequence[Node]] = None,
    ) -> LoadBalancerStatus:
        """
        Create the service's load balancer if needed and converge its rules.

        Rules are created and updated before stale rules are deleted, so a
        port that moves to a new mapping never goes without a rule.

        Args:
            cluster_name: Name of the cluster
            service: The service to reconcile
            nodes: Ignored, load balancers target the configured node tag

        Returns:
            The status of the load balancer
        """
        name = self.get_load_balancer_name(cluster_name, service)
        try:
            balancer = await self.get_load_balancer(name)
        except LoadBalancerNotFound:
            logger.info(f"Creating load balancer {name} for service {service.uid}")
            balancer = await self.load_balancers.create(
                self.config.org_ref(),
                LoadBalancerCreateArguments(
                    name=name,
                    data_center=self.config.dc_ref(),
                    resource_type=ResourceType.TAGS,
                    resource_ids=[self.config.node_tag_id],
                ),
            )

        await self.ensure_load_balancer_rules(service, balancer)
        await self.tidy_load_balancer_rules(service, balancer)

        return LoadBalancerStatus.for_ip(balancer.address)

    async def update_load_balancer(
        self,
        cluster_name: str,
        service: Service,
        nodes: Optional[Sequence[Node]] = None,
    ) -> None:
        """
        Update the hosts behind a load balancer.

        Does nothing: load balancers target a node tag, so node membership is
        tracked by Katapult.
        """
        return None

    async def ensure_load_balancer_deleted(
        self, cluster_name: str, service: Service
    ) -> None:
        """Delete the service's load balancer if it exists."""
        name = self.get_load_balancer_name(cluster_name, service)
        try:
            balancer = await self.get_load_balancer(name)
        except LoadBalancerNotFound:
            return

        logger.info(f"Deleting load balancer {name} ({balancer.id})")
        await self.load_balancers.delete(balancer)
