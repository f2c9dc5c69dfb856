"""
Tests for capability injection and the per-operation protocols.
"""

import pytest

from mediahub.core.capabilities import (
    CLOUDFLARE_BYPASS,
    ChildEnumerable,
    Capabilities,
    Identifiable,
    InfoFetchable,
    Searchable,
    SourceResolvable,
)
from mediahub.core.exceptions import ConfigurationError
from mediahub.providers import KickAssAnime


class TestCapabilities:
    """Tests for the read-only capability mapping."""

    def test_mapping_behaviour(self):
        marker = object()
        caps = Capabilities({"a": marker}, b=None)

        assert caps["a"] is marker
        assert "b" not in caps
        assert len(caps) == 1
        assert list(caps) == ["a"]

    def test_require_names_the_missing_capability(self):
        with pytest.raises(ConfigurationError) as exc_info:
            Capabilities().require(CLOUDFLARE_BYPASS, owner="KickAssAnime")

        error = exc_info.value
        assert error.capability == CLOUDFLARE_BYPASS
        assert "KickAssAnime" in str(error)
        assert CLOUDFLARE_BYPASS in str(error)

    def test_with_entries_copies(self):
        base = Capabilities(a=1)
        extended = base.with_entries(b=2)

        assert dict(extended) == {"a": 1, "b": 2}
        assert "b" not in base


class TestProtocols:
    """Providers satisfy the small protocols structurally."""

    def test_kickassanime_protocols(self, kickass_capabilities):
        provider = KickAssAnime(capabilities=kickass_capabilities)

        for protocol in (Identifiable, Searchable, InfoFetchable, ChildEnumerable, SourceResolvable):
            assert isinstance(provider, protocol)

    def test_plain_object_is_not_searchable(self):
        assert not isinstance(object(), Searchable)
