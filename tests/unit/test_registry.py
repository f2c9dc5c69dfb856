"""
Tests for the provider registry and the default catalog.
"""

import asyncio

import pytest

from conftest import TestData

from mediahub.core.capabilities import CLOUDFLARE_BYPASS, Capabilities
from mediahub.core.config_manager import ConfigManager
from mediahub.core.exceptions import ConfigurationError, ProviderNotFoundError, UpstreamError
from mediahub.core.models import AnimeResult, MediaFamily, SearchResult
from mediahub.core.registry import ProviderRegistry
from mediahub.providers import BUILTIN_PROVIDERS, KickAssAnime, build_default_registry


class StubProvider:
    """Duck-typed provider: the registry only needs family, name and search."""

    def __init__(self, name, family=MediaFamily.ANIME, error=None, delay=0.0, tracker=None):
        self.name = name
        self.family = family
        self.error = error
        self.delay = delay
        self.tracker = tracker if tracker is not None else {"active": 0, "peak": 0}
        self.closed = False

    async def search(self, query, page=1):
        self.tracker["active"] += 1
        self.tracker["peak"] = max(self.tracker["peak"], self.tracker["active"])
        try:
            await asyncio.sleep(self.delay)
            if self.error is not None:
                raise self.error
            return SearchResult.single_page([AnimeResult(id=f"{self.name}-1", title=query, url="https://x/1")])
        finally:
            self.tracker["active"] -= 1

    async def close(self):
        self.closed = True


class TestProviderRegistry:
    """Tests for two-level lookup and fan-out search."""

    def test_register_and_get(self):
        registry = ProviderRegistry()
        provider = StubProvider("Alpha")
        registry.register(provider)

        assert registry.get(MediaFamily.ANIME, "alpha") is provider
        assert registry.get("anime", "ALPHA") is provider
        assert (MediaFamily.ANIME, "Alpha") in registry
        assert (MediaFamily.MANGA, "Alpha") not in registry
        assert ("nonsense", "Alpha") not in registry
        assert len(registry) == 1

    def test_unknown_provider_lists_available(self):
        registry = ProviderRegistry()
        registry.register(StubProvider("Alpha"))

        with pytest.raises(ProviderNotFoundError) as exc_info:
            registry.get(MediaFamily.ANIME, "Beta")

        assert "Alpha" in str(exc_info.value)
        assert exc_info.value.name == "Beta"

    def test_unknown_family(self):
        with pytest.raises(ProviderNotFoundError):
            ProviderRegistry().get("podcasts", "Alpha")

    def test_duplicate_and_anonymous(self):
        registry = ProviderRegistry()
        registry.register(StubProvider("Alpha"))

        with pytest.raises(ConfigurationError):
            registry.register(StubProvider("alpha"))
        with pytest.raises(ConfigurationError):
            registry.register(StubProvider(""))
        with pytest.raises(ConfigurationError):
            registry.register(StubProvider("Gamma", family="ANIME"))

    def test_same_name_in_different_families(self):
        registry = ProviderRegistry()
        registry.register(StubProvider("Shared", MediaFamily.ANIME))
        registry.register(StubProvider("Shared", MediaFamily.MANGA))

        assert registry.families() == [MediaFamily.ANIME, MediaFamily.MANGA]
        assert [family for family, _ in registry] == [MediaFamily.ANIME, MediaFamily.MANGA]

    def test_unregister(self):
        registry = ProviderRegistry()
        provider = StubProvider("Alpha")
        registry.register(provider)

        assert registry.unregister(MediaFamily.ANIME, "Alpha") is provider
        assert registry.families() == []
        with pytest.raises(ProviderNotFoundError):
            registry.unregister(MediaFamily.ANIME, "Alpha")

    def test_invalid_concurrency(self):
        with pytest.raises(ConfigurationError):
            ProviderRegistry(max_concurrent=0)

    async def test_search_all_reports_failures_separately(self):
        registry = ProviderRegistry()
        failure = UpstreamError("[Beta] failed to search for 'q': boom")
        registry.register(StubProvider("Alpha"))
        registry.register(StubProvider("Beta", error=failure))

        outcome = await registry.search_all(MediaFamily.ANIME, "q")

        assert list(outcome.results) == ["Alpha"]
        assert outcome.errors == {"Beta": failure}
        assert outcome.total_results == 1

    async def test_search_all_is_bounded(self):
        registry = ProviderRegistry(max_concurrent=2)
        tracker = {"active": 0, "peak": 0}
        for i in range(5):
            registry.register(StubProvider(f"P{i}", delay=0.01, tracker=tracker))

        outcome = await registry.search_all(MediaFamily.ANIME, "q")

        assert len(outcome.results) == 5
        assert tracker["peak"] == 2

    async def test_search_all_empty_family(self):
        outcome = await ProviderRegistry().search_all(MediaFamily.BOOKS, "q")
        assert outcome.results == {} and outcome.errors == {}

    async def test_close_all(self):
        registry = ProviderRegistry()
        providers = [StubProvider("Alpha"), StubProvider("Beta", MediaFamily.MANGA)]
        for provider in providers:
            registry.register(provider)

        await registry.close_all()
        assert all(p.closed for p in providers)


class TestDefaultRegistry:
    """Tests for build_default_registry."""

    def test_builtin_catalog(self):
        assert BUILTIN_PROVIDERS == {"KickAssAnime": KickAssAnime}

    def test_with_bypass(self, kickass_capabilities):
        registry = build_default_registry(capabilities=kickass_capabilities)

        provider = registry.get(MediaFamily.ANIME, "KickAssAnime")
        assert isinstance(provider, KickAssAnime)
        assert [s.class_path for s in registry.stats()] == ["ANIME.KickAssAnime"]

    def test_without_bypass_skips_provider(self):
        skipped = []
        registry = build_default_registry(capabilities=Capabilities(), skipped=skipped)

        assert len(registry) == 0
        assert len(skipped) == 1
        assert skipped[0].startswith("KickAssAnime: ")
        assert CLOUDFLARE_BYPASS in skipped[0]

    def test_strict_raises(self):
        with pytest.raises(ConfigurationError) as exc_info:
            build_default_registry(capabilities=Capabilities(), strict=True)
        assert exc_info.value.capability == CLOUDFLARE_BYPASS

    def test_disabled_provider(self, config_dir, kickass_capabilities):
        manager = ConfigManager(config_dir)
        manager.disable_provider("KickAssAnime")

        registry = build_default_registry(manager, kickass_capabilities)
        assert (MediaFamily.ANIME, "KickAssAnime") not in registry

    def test_unknown_configured_provider_is_ignored(self, config_dir, kickass_capabilities):
        manager = ConfigManager(config_dir)
        manager.update_provider_config("NotARealSite", {"enabled": True, "priority": 2})

        registry = build_default_registry(manager, kickass_capabilities)
        assert len(registry) == 1

    async def test_settings_reach_provider(self, config_dir, kickass_capabilities, kickass_bypass):
        manager = ConfigManager(config_dir)
        manager.update_provider_config("KickAssAnime", {"base_url": "https://mirror.example.com"})
        manager.update_setting("network.max_concurrent_providers", 5)
        kickass_bypass.replies["https://mirror.example.com/api/fsearch"] = TestData.KICKASS_SEARCH

        registry = build_default_registry(manager, kickass_capabilities)
        provider = registry.get(MediaFamily.ANIME, "KickAssAnime")
        envelope = await provider.search("Overlord")

        assert registry.max_concurrent == 5
        assert provider.base_url == "https://mirror.example.com"
        assert envelope.results[0].image.startswith("https://mirror.example.com/image/poster/")
