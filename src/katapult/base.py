"""
Collaborator contracts for the Katapult load balancer collections.

The load balancer manager only talks to the remote API through these two
interfaces. Every method raises KatapultError when the remote call fails.
"""

from abc import ABC, abstractmethod
from typing import List, Optional, Tuple

from katapult.models import (
    ListOptions,
    LoadBalancer,
    LoadBalancerCreateArguments,
    LoadBalancerRule,
    LoadBalancerRuleArguments,
    LoadBalancerUpdateArguments,
    Organization,
    Pagination,
)


class KatapultError(Exception):
    """Raised when a call to the Katapult API fails."""

    def __init__(
        self,
        message: str,
        status: Optional[int] = None,
        code: Optional[str] = None,
    ):
        self.message = message
        self.status = status
        self.code = code
        super().__init__(message)


class LoadBalancerAPI(ABC):
    """Load balancers of an organization."""

    @abstractmethod
    async def list(
        self, organization: Organization, options: Optional[ListOptions] = None
    ) -> Tuple[List[LoadBalancer], Pagination]:
        """
        List one page of load balancers.

        Args:
            organization: The organization that owns the load balancers
            options: Page selection, or None for the first page

        Returns:
            Tuple of (load balancers on the page, pagination metadata)
        """
        pass

    @abstractmethod
    async def create(
        self, organization: Organization, args: LoadBalancerCreateArguments
    ) -> LoadBalancer:
        pass

    @abstractmethod
    async def update(
        self, balancer: LoadBalancer, args: LoadBalancerUpdateArguments
    ) -> LoadBalancer:
        pass

    @abstractmethod
    async def delete(self, balancer: LoadBalancer) -> LoadBalancer:
        pass


class LoadBalancerRuleAPI(ABC):
    """Rules of a single load balancer."""

    @abstractmethod
    async def list(
        self, balancer: LoadBalancer, options: Optional[ListOptions] = None
    ) -> Tuple[List[LoadBalancerRule], Pagination]:
        """
        List one page of rules for a load balancer.

        Args:
            balancer: The load balancer owning the rules
            options: Page selection, or None for the first page

        Returns:
            Tuple of (rules on the page, pagination metadata)
        """
        pass

    @abstractmethod
    async def create(
        self, balancer: LoadBalancer, args: LoadBalancerRuleArguments
    ) -> LoadBalancerRule:
        pass

    @abstractmethod
    async def update(
        self, rule: LoadBalancerRule, args: LoadBalancerRuleArguments
    ) -> LoadBalancerRule:
        pass

    @abstractmethod
    async def delete(self, rule: LoadBalancerRule) -> LoadBalancerRule:
        pass
