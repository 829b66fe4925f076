"""
Katapult API client.

Async client for the load balancer endpoints of the Katapult core v1 API,
implementing the LoadBalancerAPI and LoadBalancerRuleAPI contracts.
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional, Tuple

import aiohttp

from katapult.base import KatapultError, LoadBalancerAPI, LoadBalancerRuleAPI
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

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.katapult.io"
DEFAULT_USER_AGENT = "kce-ccm"


def error_from_response(status: int, payload: Any) -> KatapultError:
    """
    Build a KatapultError from an API error response.

    Katapult error bodies look like
    {"error": {"code": "...", "description": "...", "detail": {...}}}.
    """
    code = None
    description = None
    if isinstance(payload, dict) and isinstance(payload.get("error"), dict):
        code = payload["error"].get("code")
        description = payload["error"].get("description")

    message = f"katapult: {status}"
    if code:
        message += f" {code}"
    if description:
        message += f": {description}"

    return KatapultError(message, status=status, code=code)


def _list_params(
    key: str, ref_id: Optional[str], options: Optional[ListOptions]
) -> Dict[str, Any]:
    params: Dict[str, Any] = {f"{key}[id]": ref_id}
    if options is not None:
        params.update(options.model_dump(exclude_none=True))
    return params


class KatapultClient:
    """
    HTTP client for the Katapult API.

    The underlying aiohttp session is created on first use and closed by
    close() or when leaving an ``async with`` block.
    """

    def __init__(
        self,
        api_token: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout: int = 30,
        user_agent: str = DEFAULT_USER_AGENT,
    ):
        self.api_token = api_token
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.user_agent = user_agent
        self._session: Optional[aiohttp.ClientSession] = None

        self.load_balancers = LoadBalancersClient(self)
        self.load_balancer_rules = LoadBalancerRulesClient(self)

    async def __aenter__(self) -> "KatapultClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    def _get_headers(self) -> Dict[str, str]:
        """Get HTTP headers for Katapult API requests."""
        headers = {
            "Accept": "application/json",
            "User-Agent": self.user_agent,
        }
        if self.api_token:
            headers["Authorization"] = f"Bearer {self.api_token}"
        return headers

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                headers=self._get_headers(),
                timeout=aiohttp.ClientTimeout(total=self.timeout),
            )
        return self._session

    async def close(self) -> None:
        """Close the HTTP session."""
        if self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None

    async def request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        body: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """
        Perform an API request and return the decoded JSON body.

        Args:
            method: HTTP method
            path: Path below the base URL, e.g. '/core/v1/load_balancers/_'
            params: Query string parameters
            body: JSON request body

        Returns:
            The decoded response body

        Raises:
            KatapultError: On any transport failure or non-2xx response
        """
        url = f"{self.base_url}{path}"
        logger.debug(f"Katapult request: {method} {path} params={params}")

        try:
            async with self._get_session().request(
                method, url, params=params, json=body
            ) as response:
                try:
                    payload = await response.json(content_type=None)
                except ValueError:
                    payload = None

                if response.status >= 400:
                    raise error_from_response(response.status, payload)

                return payload or {}
        except aiohttp.ClientError as e:
            raise KatapultError(f"katapult: request failed: {e}") from e
        except asyncio.TimeoutError as e:
            raise KatapultError(
                f"katapult: request timed out after {self.timeout}s"
            ) from e


class LoadBalancersClient(LoadBalancerAPI):
    """Load balancer endpoints."""

    def __init__(self, client: KatapultClient):
        self.client = client

    async def list(
        self, organization: Organization, options: Optional[ListOptions] = None
    ) -> Tuple[List[LoadBalancer], Pagination]:
        data = await self.client.request(
            "GET",
            "/core/v1/organizations/_/load_balancers",
            params=_list_params("organization", organization.id, options),
        )
        items = [LoadBalancer(**item) for item in data.get("load_balancers", [])]
        return items, Pagination(**data.get("pagination", {}))

    async def create(
        self, organization: Organization, args: LoadBalancerCreateArguments
    ) -> LoadBalancer:
        data = await self.client.request(
            "POST",
            "/core/v1/organizations/_/load_balancers",
            body={
                "organization": {"id": organization.id},
                "properties": args.model_dump(exclude_none=True),
            },
        )
        return LoadBalancer(**data["load_balancer"])

    async def update(
        self, balancer: LoadBalancer, args: LoadBalancerUpdateArguments
    ) -> LoadBalancer:
        data = await self.client.request(
            "PATCH",
            "/core/v1/load_balancers/_",
            body={
                "load_balancer": {"id": balancer.id},
                "properties": args.model_dump(exclude_none=True),
            },
        )
        return LoadBalancer(**data["load_balancer"])

    async def delete(self, balancer: LoadBalancer) -> LoadBalancer:
        data = await self.client.request(
            "DELETE",
            "/core/v1/load_balancers/_",
            params={"load_balancer[id]": balancer.id},
        )
        return LoadBalancer(**data["load_balancer"])


class LoadBalancerRulesClient(LoadBalancerRuleAPI):
    """Load balancer rule endpoints."""

    def __init__(self, client: KatapultClient):
        self.client = client

    async def list(
        self, balancer: LoadBalancer, options: Optional[ListOptions] = None
    ) -> Tuple[List[LoadBalancerRule], Pagination]:
        data = await self.client.request(
            "GET",
            "/core/v1/load_balancers/_/rules",
            params=_list_params("load_balancer", balancer.id, options),
        )
        items = [
            LoadBalancerRule(**item) for item in data.get("load_balancer_rules", [])
        ]
        return items, Pagination(**data.get("pagination", {}))

    async def create(
        self, balancer: LoadBalancer, args: LoadBalancerRuleArguments
    ) -> LoadBalancerRule:
        data = await self.client.request(
            "POST",
            "/core/v1/load_balancers/_/rules",
            body={
                "load_balancer": {"id": balancer.id},
                "properties": args.model_dump(exclude_none=True),
            },
        )
        return LoadBalancerRule(**data["load_balancer_rule"])

    async def update(
        self, rule: LoadBalancerRule, args: LoadBalancerRuleArguments
    ) -> LoadBalancerRule:
        data = await self.client.request(
            "PATCH",
            "/core/v1/load_balancers/rules/_",
            body={
                "load_balancer_rule": {"id": rule.id},
                "properties": args.model_dump(exclude_none=True),
            },
        )
        return LoadBalancerRule(**data["load_balancer_rule"])

    async def delete(self, rule: LoadBalancerRule) -> LoadBalancerRule:
        data = await self.client.request(
            "DELETE",
            "/core/v1/load_balancers/rules/_",
            params={"load_balancer_rule[id]": rule.id},
        )
        return LoadBalancerRule(**data["load_balancer_rule"])
