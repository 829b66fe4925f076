"""Pytest configuration and fixtures."""

import asyncio
import math
from typing import List, Optional

import pytest

from config import LoadBalancerConfig
from katapult.base import KatapultError, LoadBalancerAPI, LoadBalancerRuleAPI
from katapult.models import (
    IPAddress,
    ListOptions,
    LoadBalancer,
    LoadBalancerRule,
    Pagination,
)
from loadbalancer import LoadBalancerManager
from service import Service, ServicePort


def _page(items: list, options: Optional[ListOptions], default_per_page: int):
    """Slice a page out of items, failing on any item with ID 'error'."""
    per_page = default_per_page
    page = 1
    if options is not None:
        per_page = options.per_page or per_page
        page = options.page or page

    start = (page - 1) * per_page
    end = min(page * per_page, len(items))
    paged = []
    for i in range(start, end):
        if items[i].id == "error":
            raise KatapultError(f"error from {i}")
        paged.append(items[i])

    return paged, Pagination(
        current_page=page,
        per_page=per_page,
        total_pages=math.ceil(len(items) / per_page),
        total=len(items),
    )


class FakeLoadBalancerAPI(LoadBalancerAPI):
    """In-memory load balancer collection, two items per page by default."""

    def __init__(self, items: Optional[List[LoadBalancer]] = None, per_page=2):
        self.items = list(items or [])
        self.per_page = per_page
        self.calls = []
        self.list_options = []
        self._created = 0

    async def list(self, organization, options=None):
        self.calls.append(("list", organization.id))
        self.list_options.append(options)
        page = _page(self.items, options, self.per_page)
        # Yield to the loop like a real request, after reading the items
        await asyncio.sleep(0)
        return page

    async def create(self, organization, args):
        self.calls.append(("create", args))
        self._created += 1
        balancer = LoadBalancer(
            id=f"lb_new{self._created}",
            name=args.name,
            resource_type=args.resource_type,
            resource_ids=args.resource_ids,
            data_center=args.data_center,
            ip_address=IPAddress(address=f"192.0.2.{self._created}"),
        )
        self.items.append(balancer)
        return balancer

    async def update(self, balancer, args):
        raise NotImplementedError

    async def delete(self, balancer):
        self.calls.append(("delete", balancer.id))
        for i, item in enumerate(self.items):
            if item.id == balancer.id:
                return self.items.pop(i)
        raise KatapultError("tried to delete non-existent element")


class FakeLoadBalancerRuleAPI(LoadBalancerRuleAPI):
    """In-memory rule collection for a single load balancer."""

    def __init__(self, items: Optional[List[LoadBalancerRule]] = None, per_page=2):
        self.items = list(items or [])
        self.per_page = per_page
        self.calls = []
        self.fail_on = {}
        self._created = 0

    def _maybe_fail(self, operation: str, port: int) -> None:
        error = self.fail_on.get((operation, port))
        if error is not None:
            raise error

    async def list(self, balancer, options=None):
        self.calls.append(("list", balancer.id))
        page = _page(self.items, options, self.per_page)
        # Yield to the loop like a real request, after reading the items
        await asyncio.sleep(0)
        return page

    async def create(self, balancer, args):
        self.calls.append(("create", args))
        self._maybe_fail("create", args.listen_port)
        self._created += 1
        rule = LoadBalancerRule(id=f"lbrule_new{self._created}", **args.model_dump())
        self.items.append(rule)
        return rule

    async def update(self, rule, args):
        self.calls.append(("update", rule.id, args))
        self._maybe_fail("update", args.listen_port)
        for i, item in enumerate(self.items):
            if item.id == rule.id:
                self.items[i] = item.model_copy(update=args.model_dump())
                return self.items[i]
        raise KatapultError("tried to update non-existent element")

    async def delete(self, rule):
        self.calls.append(("delete", rule.id))
        self._maybe_fail("delete", rule.listen_port)
        for i, item in enumerate(self.items):
            if item.id == rule.id:
                return self.items.pop(i)
        raise KatapultError("tried to delete non-existent element")

    def calls_of(self, operation: str) -> list:
        return [call for call in self.calls if call[0] == operation]

    def listen_ports(self) -> List[int]:
        return sorted(rule.listen_port for rule in self.items)


SERVICE_UID = "b5216b07-2cb4-4429-8294-23883301a01e"


@pytest.fixture
def make_service():
    """Factory for services exposing (port, node_port) pairs."""

    def _make(*ports, name=SERVICE_UID, namespace="default"):
        return Service(
            name=name,
            namespace=namespace,
            uid=SERVICE_UID,
            ports=[
                ServicePort(port=port, node_port=node_port)
                for port, node_port in ports
            ],
        )

    return _make


@pytest.fixture
def lb_config():
    """Load balancer configuration for testing."""
    return LoadBalancerConfig(
        organization_id="org_fake",
        data_center_id="dc_atlantis",
        node_tag_id="tag_nodes",
    )


@pytest.fixture
def lb_api():
    return FakeLoadBalancerAPI()


@pytest.fixture
def rule_api():
    return FakeLoadBalancerRuleAPI()


@pytest.fixture
def manager(lb_config, lb_api, rule_api):
    """Load balancer manager wired to in-memory collections."""
    return LoadBalancerManager(
        config=lb_config,
        load_balancers=lb_api,
        load_balancer_rules=rule_api,
    )


@pytest.fixture
def balancer():
    """An existing load balancer."""
    return LoadBalancer(
        id="lb_existing",
        name="k8s-test-b5216b07-2cb4-4429-8294-23883301a01e",
        ip_address=IPAddress(address="10.0.0.1"),
    )
