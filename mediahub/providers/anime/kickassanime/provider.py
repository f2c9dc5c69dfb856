"""
KickAssAnime Provider - Anime source backed by the kaas.am JSON API.

The site sits behind a Cloudflare challenge, so the provider cannot be
built without the ``cloudflare_bypass`` capability. Search and info are
supported; the site's players are not wired to any extractor, so episode
sources and servers are reported as unsupported.
"""

import logging
from typing import Any, Dict, Mapping, Optional

from pydantic import ValidationError as PydanticValidationError

from mediahub.core.capabilities import CLOUDFLARE_BYPASS, Capabilities, SourceResolution, Transport
from mediahub.core.exceptions import ConfigurationError
from mediahub.core.models import AnimeInfo, AnimeResult, MediaFormat, SearchResult
from mediahub.core.normalization import InfoNormalizer, format_release_date, rule, to_int
from mediahub.extractors.registry import ExtractorRegistry
from mediahub.providers.parsers import AnimeParser

from .api import KickAssAnimeAPI
from .config import DEFAULT_BASE_URL, KickAssAnimeConfig, merge_with_defaults


logger = logging.getLogger(__name__)


class KickAssAnime(AnimeParser):
    """
    KickAssAnime provider.

    Example:
        caps = Capabilities(cloudflare_bypass=CloudscraperBypass())
        async with KickAssAnime(capabilities=caps) as provider:
            page = await provider.search("Overlord IV")
            info = await provider.fetch_anime_info(page.results[0].id)
    """

    name = "KickAssAnime"
    base_url = DEFAULT_BASE_URL
    logo = "https://user-images.githubusercontent.com/65111632/95666535-4f6dba80-0ba6-11eb-8583-e3a2074590e9.png"
    class_path = "ANIME.KickAssAnime"
    required_capabilities = frozenset({CLOUDFLARE_BYPASS})
    source_resolution = SourceResolution.UNSUPPORTED

    def __init__(
        self,
        transport: Optional[Transport] = None,
        capabilities: Optional[Capabilities] = None,
        config: Optional[Dict[str, Any]] = None,
        extractors: Optional[ExtractorRegistry] = None,
    ):
        """
        Initialize the provider.

        Args:
            transport: Unused by the API calls but kept for the common signature
            capabilities: Must contain ``cloudflare_bypass``
            config: Overrides for KickAssAnimeConfig fields
            extractors: Extractor registry (unused while sources are unsupported)

        Raises:
            ConfigurationError: If the bypass capability is missing or the
                configuration is invalid
        """
        merged_config = merge_with_defaults(config)
        try:
            self.provider_config = KickAssAnimeConfig(**merged_config)
        except PydanticValidationError as e:
            raise ConfigurationError(f"Invalid KickAssAnime configuration: {e}", details=merged_config)

        merged_config["base_url"] = self.provider_config.base_url
        super().__init__(transport=transport, capabilities=capabilities, config=merged_config, extractors=extractors)

        self.api = KickAssAnimeAPI(
            self.capabilities[CLOUDFLARE_BYPASS],
            base_url=self.base_url,
            user_agent=self.provider_config.api_user_agent,
            timeout=self.provider_config.timeout,
        )
        self.normalizer = InfoNormalizer(AnimeInfo, [
            rule("title", "title"),
            rule("image", "poster.hq", transform=lambda hq: self._image_url("poster", hq)),
            rule("cover", "banner.hq", transform=lambda hq: self._image_url("banner", hq)),
            rule("release_date", "start_date", transform=format_release_date),
            rule("start_date", "start_date"),
            rule("end_date", "end_date"),
            rule("description", "synopsis"),
            rule("type", "type", transform=MediaFormat.from_upstream, default=MediaFormat.TV),
            rule("status", "status"),
            rule("genres", "genres"),
            rule("season", "season"),
            rule("synonyms", "title_en", "title_original", collect=True),
            rule("total_episodes", "episode_count", transform=to_int),
        ])

    def _image_url(self, kind: str, hq: Any) -> Optional[str]:
        if not hq:
            return None
        return f"{self.base_url}/image/{kind}/{hq}.{self.provider_config.poster_format}"

    def _to_result(self, item: Mapping[str, Any]) -> AnimeResult:
        slug = item.get("slug")
        watch_uri = item.get("watch_uri")
        poster = item.get("poster") or {}
        return AnimeResult(
            id=slug,
            title=item.get("title") or slug,
            url=f"{self.base_url}/api{watch_uri}" if watch_uri else f"{self.base_url}/{slug}",
            image=self._image_url("poster", poster.get("hq")),
            release_date=item.get("year"),
            type=MediaFormat.from_upstream(item["type"]) if item.get("type") else None,
        )

    async def _search(self, query: str, page: int) -> SearchResult[AnimeResult]:
        data = await self.api.search(query, page)
        results = [self._to_result(item) for item in data["result"]]
        return SearchResult.paginate(results, page=page, total_pages=to_int(data.get("maxPage")))

    async def _fetch_anime_info(self, anime_id: str) -> AnimeInfo:
        raw = await self.api.show(anime_id)
        return self.normalizer.normalize(raw, id=anime_id, url=f"{self.base_url}/api/show/{anime_id}")
