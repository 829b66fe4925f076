"""Unit tests for the providers package - Cloud provider and registry."""

import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from config import Config, KatapultConfig, LoggingConfig, ProviderConfig
from katapult.client import KatapultClient
from loadbalancer import LoadBalancerManager
from providers import registry as registry_module
from providers.base import Capability, CloudProvider
from providers.kce import KCEProvider
from providers.registry import (
    ProviderRegistry,
    get_registry,
    register_builtin_providers,
    reset_registry,
)


@pytest.fixture
def full_config(lb_config):
    return Config(
        katapult=KatapultConfig(api_token="token"),
        load_balancer=lb_config,
        logging=LoggingConfig(),
        provider=ProviderConfig(),
    )


class DummyProvider(CloudProvider):
    """Provider without any capabilities."""

    PROVIDER_NAME = "dummy"

    def __init__(self):
        self.initialized = False
        self.closed = False

    @classmethod
    def from_config(cls, config):
        return cls()

    @property
    def name(self):
        return self.PROVIDER_NAME

    def capabilities(self):
        return {}

    async def initialize(self):
        self.initialized = True

    async def close(self):
        self.closed = True


class TestCloudProvider:
    """Tests for the CloudProvider base class."""

    def test_unsupported_capability(self):
        provider = DummyProvider()
        assert provider.get(Capability.LOAD_BALANCER) is None
        assert provider.supports(Capability.LOAD_BALANCER) is False

    def test_has_cluster_id_default(self):
        assert DummyProvider().has_cluster_id is True

    def test_from_config_not_implemented(self):
        with pytest.raises(NotImplementedError):
            CloudProvider.from_config(None)


class TestKCEProvider:
    """Tests for KCEProvider."""

    def test_capabilities(self, manager):
        provider = KCEProvider(load_balancer=manager)

        assert provider.name == "kce"
        assert provider.get(Capability.LOAD_BALANCER) is manager
        assert provider.supports(Capability.LOAD_BALANCER)
        for capability in [
            Capability.INSTANCES,
            Capability.INSTANCES_V2,
            Capability.ZONES,
            Capability.CLUSTERS,
            Capability.ROUTES,
        ]:
            assert provider.get(capability) is None
            assert not provider.supports(capability)

    def test_from_config(self, full_config):
        provider = KCEProvider.from_config(full_config)

        assert isinstance(provider.client, KatapultClient)
        assert provider.client.base_url == "https://api.katapult.io"
        manager = provider.get(Capability.LOAD_BALANCER)
        assert isinstance(manager, LoadBalancerManager)
        assert manager.config is full_config.load_balancer
        assert manager.load_balancers is provider.client.load_balancers
        assert manager.load_balancer_rules is provider.client.load_balancer_rules

    def test_from_config_warns_on_host_override(self, full_config, caplog):
        full_config.katapult.api_host = "https://api.example.com"

        with caplog.at_level("WARNING"):
            provider = KCEProvider.from_config(full_config)

        assert provider.client.base_url == "https://api.example.com"
        assert "api.example.com" in caplog.text

    @pytest.mark.asyncio
    async def test_close(self, manager):
        client = MagicMock()
        client.close = AsyncMock()
        provider = KCEProvider(load_balancer=manager, client=client)

        await provider.close()

        client.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_close_without_client(self, manager):
        await KCEProvider(load_balancer=manager).close()


class TestProviderRegistry:
    """Tests for ProviderRegistry."""

    def test_register_provider(self):
        registry = ProviderRegistry()
        registry.register_provider(DummyProvider)

        assert registry.has_provider("dummy")
        assert registry.list_providers() == ["dummy"]

    def test_register_under_custom_name(self):
        registry = ProviderRegistry()
        registry.register_provider(DummyProvider, name="other")

        assert registry.list_providers() == ["other"]

    def test_register_without_name_raises(self):
        class Nameless(DummyProvider):
            PROVIDER_NAME = None

        with pytest.raises(ValueError, match="Nameless"):
            ProviderRegistry().register_provider(Nameless)

    def test_register_overwrite_warns(self, caplog):
        registry = ProviderRegistry()
        registry.register_provider(DummyProvider)

        with caplog.at_level("WARNING"):
            registry.register_provider(DummyProvider)

        assert "Overwriting existing provider: dummy" in caplog.text

    @pytest.mark.asyncio
    async def test_get_provider_initializes_once(self):
        registry = ProviderRegistry()
        registry.register_provider(DummyProvider)

        first = await registry.get_provider("dummy", None)
        second = await registry.get_provider("dummy", None)

        assert first is second
        assert first.initialized is True

    @pytest.mark.asyncio
    async def test_get_unknown_provider(self):
        registry = ProviderRegistry()
        registry.register_provider(DummyProvider)

        with pytest.raises(ValueError, match="Available providers: dummy"):
            await registry.get_provider("aws", None)

    @pytest.mark.asyncio
    async def test_close(self):
        registry = ProviderRegistry()
        registry.register_provider(DummyProvider)
        provider = await registry.get_provider("dummy", None)

        await registry.close()

        assert provider.closed is True
        assert await registry.get_provider("dummy", None) is not provider

    @pytest.mark.asyncio
    async def test_close_continues_after_error(self):
        registry = ProviderRegistry()
        registry.register_provider(DummyProvider, name="a")
        registry.register_provider(DummyProvider, name="b")
        failing = await registry.get_provider("a", None)
        failing.close = AsyncMock(side_effect=RuntimeError("boom"))
        other = await registry.get_provider("b", None)

        await registry.close()

        assert other.closed is True


class TestGlobalRegistry:
    """Tests for the registry singleton and built-in registration."""

    def setup_method(self):
        reset_registry()

    def teardown_method(self):
        reset_registry()

    def test_singleton(self):
        assert get_registry() is get_registry()

    def test_register_builtin_providers(self):
        with patch.object(registry_module, "entry_points", return_value=[]):
            register_builtin_providers()

        assert get_registry().list_providers() == ["kce"]

    def test_entry_point_providers(self):
        ep = MagicMock()
        ep.name = "dummy"
        ep.load.return_value = DummyProvider

        with patch.object(registry_module, "entry_points", return_value=[ep]):
            register_builtin_providers()

        assert get_registry().list_providers() == ["kce", "dummy"]

    def test_broken_entry_point_skipped(self, caplog):
        ep = MagicMock()
        ep.name = "broken"
        ep.load.side_effect = ImportError("no module")

        with patch.object(registry_module, "entry_points", return_value=[ep]):
            with caplog.at_level("WARNING"):
                register_builtin_providers()

        assert get_registry().list_providers() == ["kce"]
        assert "Could not load cloud provider broken" in caplog.text
