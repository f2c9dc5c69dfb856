"""
Family Parsers - Operation contracts for each media family.

Each family fixes the signatures of its operations (info fetch, child
enumeration, content/source resolution) and leaves the implementation to
concrete providers through underscored hooks. Info hooks are abstract;
content hooks default to UnsupportedOperationError so a provider only
implements what its source offers.

Every family also exposes the generic capability names ``fetch_info``,
``fetch_children`` and ``fetch_content`` so callers can treat providers of
different families through the protocols in ``mediahub.core.capabilities``.
"""

from abc import abstractmethod
from typing import Any, Dict, FrozenSet, List, Optional, Sequence, Type, TypeVar

from pydantic import BaseModel

from mediahub.core.capabilities import SourceResolution
from mediahub.core.exceptions import UnsupportedOperationError
from mediahub.core.models import (
    AnimeEpisode,
    AnimeInfo,
    AnimeResult,
    BookDownloadLinks,
    BookInfo,
    BookResult,
    ChildRecord,
    ComicDownloadLinks,
    ComicInfo,
    ComicResult,
    EpisodeServer,
    LightNovelChapter,
    LightNovelChapterContent,
    LightNovelInfo,
    LightNovelResult,
    MangaChapter,
    MangaChapterPage,
    MangaInfo,
    MangaResult,
    MediaFamily,
    MovieEpisode,
    MovieInfo,
    MovieResult,
    SearchResult,
    Source,
    TvType,
)
from mediahub.extractors.registry import ExtractorRegistry, default_extractor_registry
from mediahub.extractors.resolver import resolve_episode_sources
from mediahub.providers.base import BaseParser


ModelT = TypeVar("ModelT", bound=BaseModel)


def _coerce(model: Type[ModelT], value: Any) -> ModelT:
    """Accept either a model instance or a dict shaped like one."""
    if isinstance(value, model):
        return value
    return model.model_validate(value)


def _coerce_list(model: Type[ModelT], values: Optional[Sequence[Any]]) -> List[ModelT]:
    return [_coerce(model, value) for value in values or ()]


class _FamilyParser(BaseParser):
    """Shared plumbing for the family contracts below."""

    def _unsupported(self, operation: str) -> UnsupportedOperationError:
        return UnsupportedOperationError(
            f"{self.name} does not support {operation}",
            provider=self.name,
            operation=operation,
        )

    async def _call(self, operation: str, hook, *args: Any, **kwargs: Any) -> Any:
        self.logger.debug(f"{self.name}: {operation} {args}")
        with self._operation(operation):
            return await hook(*args, **kwargs)


class _StreamingParser(_FamilyParser):
    """
    Families whose episodes resolve to video sources (anime, movies).

    ``source_resolution`` is the per-provider flag: INLINE providers override
    ``_fetch_episode_sources``; SERVERS providers override
    ``_fetch_episode_servers`` and get sources through the extractor registry.
    """

    source_resolution: SourceResolution = SourceResolution.UNSUPPORTED

    def __init__(self, *args: Any, extractors: Optional[ExtractorRegistry] = None, **kwargs: Any):
        super().__init__(*args, **kwargs)
        self._owns_extractors = extractors is None
        self.extractors = extractors or default_extractor_registry()

    async def close(self) -> None:
        """Release the transport and, when built here, the extractor registry."""
        try:
            await super().close()
        finally:
            if self._owns_extractors:
                await self.extractors.close()

    async def _episode_sources(self, episode_id: str, server: Optional[str], **kwargs: Any) -> Source:
        episode_id = self._require_id(episode_id, "episode_id")
        result = await self._call(
            "fetch episode sources", self._fetch_episode_sources, episode_id, server, **kwargs
        )
        with self._operation("fetch episode sources"):
            return _coerce(Source, result)

    async def _episode_servers(self, episode_id: str, **kwargs: Any) -> List[EpisodeServer]:
        episode_id = self._require_id(episode_id, "episode_id")
        result = await self._call("fetch episode servers", self._fetch_episode_servers, episode_id, **kwargs)
        with self._operation("fetch episode servers"):
            return _coerce_list(EpisodeServer, result)

    async def resolve_sources(
        self,
        episode_id: str,
        server: Optional[str] = None,
        extractors: Optional[ExtractorRegistry] = None,
        **kwargs: Any,
    ) -> Source:
        """
        Playable sources for an episode, whichever path this provider uses.

        Args:
            episode_id: Episode id from the info record
            server: Preferred server name (SERVERS providers only)
            extractors: Registry overriding the provider's own
        """
        return await resolve_episode_sources(
            self, episode_id, extractors or self.extractors, server=server, **kwargs
        )

    async def _fetch_episode_sources(self, episode_id: str, server: Optional[str] = None, **kwargs: Any) -> Source:
        """Provider hook; the default routes SERVERS providers through extractors."""
        if self.source_resolution is SourceResolution.SERVERS:
            return await resolve_episode_sources(self, episode_id, self.extractors, server=server, **kwargs)
        raise self._unsupported("fetch_episode_sources")

    async def _fetch_episode_servers(self, episode_id: str, **kwargs: Any) -> Sequence[EpisodeServer]:
        """Provider hook for server enumeration."""
        raise self._unsupported("fetch_episode_servers")


class AnimeParser(_StreamingParser):
    """Contract for anime providers."""

    family = MediaFamily.ANIME

    async def fetch_anime_info(self, anime_id: str) -> AnimeInfo:
        """
        Full info record, including the episode list.

        Args:
            anime_id: Id exactly as returned by ``search``

        Raises:
            UpstreamError: "failed to fetch anime info: <cause>" on any failure
        """
        anime_id = self._require_id(anime_id, "anime_id")
        result = await self._call("fetch anime info", self._fetch_anime_info, anime_id)
        with self._operation("fetch anime info"):
            return _coerce(AnimeInfo, result)

    async def fetch_episode_sources(self, episode_id: str, server: Optional[str] = None) -> Source:
        """
        Directly playable sources for an episode.

        Raises:
            UnsupportedOperationError: If this provider cannot produce sources
            ExtractionError: If server-mediated extraction fails
            UpstreamError: If the source cannot be reached or parsed
        """
        return await self._episode_sources(episode_id, server)

    async def fetch_episode_servers(self, episode_id: str) -> List[EpisodeServer]:
        """Alternative hosts for an episode, in upstream order; may be empty."""
        return await self._episode_servers(episode_id)

    async def fetch_info(self, media_id: str) -> AnimeInfo:
        return await self.fetch_anime_info(media_id)

    async def fetch_children(self, media_id: str) -> List[AnimeEpisode]:
        info = await self.fetch_anime_info(media_id)
        return list(info.episodes)

    async def fetch_content(self, child_id: str) -> Source:
        return await self.fetch_episode_sources(child_id)

    @abstractmethod
    async def _search(self, query: str, page: int) -> SearchResult[AnimeResult]:
        """Provider hook for ``search``."""

    @abstractmethod
    async def _fetch_anime_info(self, anime_id: str) -> AnimeInfo:
        """Provider hook for ``fetch_anime_info``."""


class MovieParser(_StreamingParser):
    """Contract for movie / TV providers."""

    family = MediaFamily.MOVIES
    supported_types: FrozenSet[TvType] = frozenset({TvType.MOVIE, TvType.TVSERIES})

    async def fetch_media_info(self, media_id: str) -> MovieInfo:
        """Full info record; movies expose a single episode."""
        media_id = self._require_id(media_id, "media_id")
        result = await self._call("fetch media info", self._fetch_media_info, media_id)
        with self._operation("fetch media info"):
            return _coerce(MovieInfo, result)

    async def fetch_episode_sources(
        self,
        episode_id: str,
        media_id: Optional[str] = None,
        server: Optional[str] = None,
    ) -> Source:
        """Playable sources for an episode of ``media_id``."""
        return await self._episode_sources(episode_id, server, **self._media_kwargs(media_id))

    async def fetch_episode_servers(self, episode_id: str, media_id: Optional[str] = None) -> List[EpisodeServer]:
        """Alternative hosts for an episode of ``media_id``."""
        return await self._episode_servers(episode_id, **self._media_kwargs(media_id))

    @staticmethod
    def _media_kwargs(media_id: Optional[str]) -> Dict[str, str]:
        return {"media_id": media_id} if media_id else {}

    async def fetch_info(self, media_id: str) -> MovieInfo:
        return await self.fetch_media_info(media_id)

    async def fetch_children(self, media_id: str) -> List[MovieEpisode]:
        info = await self.fetch_media_info(media_id)
        return list(info.episodes)

    async def fetch_content(self, child_id: str) -> Source:
        return await self.fetch_episode_sources(child_id)

    @abstractmethod
    async def _search(self, query: str, page: int) -> SearchResult[MovieResult]:
        """Provider hook for ``search``."""

    @abstractmethod
    async def _fetch_media_info(self, media_id: str) -> MovieInfo:
        """Provider hook for ``fetch_media_info``."""


class MangaParser(_FamilyParser):
    """Contract for manga providers."""

    family = MediaFamily.MANGA

    async def fetch_manga_info(self, manga_id: str) -> MangaInfo:
        """Full info record, including the chapter list."""
        manga_id = self._require_id(manga_id, "manga_id")
        result = await self._call("fetch manga info", self._fetch_manga_info, manga_id)
        with self._operation("fetch manga info"):
            return _coerce(MangaInfo, result)

    async def fetch_chapter_pages(self, chapter_id: str) -> List[MangaChapterPage]:
        """Page images of a chapter, in reading order."""
        chapter_id = self._require_id(chapter_id, "chapter_id")
        result = await self._call("fetch chapter pages", self._fetch_chapter_pages, chapter_id)
        with self._operation("fetch chapter pages"):
            return sorted(_coerce_list(MangaChapterPage, result), key=lambda p: p.page)

    async def fetch_info(self, media_id: str) -> MangaInfo:
        return await self.fetch_manga_info(media_id)

    async def fetch_children(self, media_id: str) -> List[MangaChapter]:
        info = await self.fetch_manga_info(media_id)
        return list(info.chapters)

    async def fetch_content(self, child_id: str) -> List[MangaChapterPage]:
        return await self.fetch_chapter_pages(child_id)

    @abstractmethod
    async def _search(self, query: str, page: int) -> SearchResult[MangaResult]:
        """Provider hook for ``search``."""

    @abstractmethod
    async def _fetch_manga_info(self, manga_id: str) -> MangaInfo:
        """Provider hook for ``fetch_manga_info``."""

    async def _fetch_chapter_pages(self, chapter_id: str) -> Sequence[MangaChapterPage]:
        raise self._unsupported("fetch_chapter_pages")


class LightNovelParser(_FamilyParser):
    """Contract for light novel providers."""

    family = MediaFamily.LIGHT_NOVELS

    async def fetch_light_novel_info(self, novel_id: str) -> LightNovelInfo:
        """Full info record, including the chapter list."""
        novel_id = self._require_id(novel_id, "novel_id")
        result = await self._call("fetch light novel info", self._fetch_light_novel_info, novel_id)
        with self._operation("fetch light novel info"):
            return _coerce(LightNovelInfo, result)

    async def fetch_chapter_content(self, chapter_id: str) -> LightNovelChapterContent:
        """Text of one chapter."""
        chapter_id = self._require_id(chapter_id, "chapter_id")
        result = await self._call("fetch chapter content", self._fetch_chapter_content, chapter_id)
        with self._operation("fetch chapter content"):
            return _coerce(LightNovelChapterContent, result)

    async def fetch_info(self, media_id: str) -> LightNovelInfo:
        return await self.fetch_light_novel_info(media_id)

    async def fetch_children(self, media_id: str) -> List[LightNovelChapter]:
        info = await self.fetch_light_novel_info(media_id)
        return list(info.chapters)

    async def fetch_content(self, child_id: str) -> LightNovelChapterContent:
        return await self.fetch_chapter_content(child_id)

    @abstractmethod
    async def _search(self, query: str, page: int) -> SearchResult[LightNovelResult]:
        """Provider hook for ``search``."""

    @abstractmethod
    async def _fetch_light_novel_info(self, novel_id: str) -> LightNovelInfo:
        """Provider hook for ``fetch_light_novel_info``."""

    async def _fetch_chapter_content(self, chapter_id: str) -> LightNovelChapterContent:
        raise self._unsupported("fetch_chapter_content")


class ComicParser(_FamilyParser):
    """Contract for comic providers; the terminal payload is a link set."""

    family = MediaFamily.COMICS

    async def fetch_comic_info(self, comic_id: str) -> ComicInfo:
        """Full info record, including the issue list."""
        comic_id = self._require_id(comic_id, "comic_id")
        result = await self._call("fetch comic info", self._fetch_comic_info, comic_id)
        with self._operation("fetch comic info"):
            return _coerce(ComicInfo, result)

    async def fetch_comic_links(self, issue_id: str) -> ComicDownloadLinks:
        """Download/read URLs for one issue."""
        issue_id = self._require_id(issue_id, "issue_id")
        result = await self._call("fetch comic links", self._fetch_comic_links, issue_id)
        with self._operation("fetch comic links"):
            return _coerce(ComicDownloadLinks, result)

    async def fetch_info(self, media_id: str) -> ComicInfo:
        return await self.fetch_comic_info(media_id)

    async def fetch_children(self, media_id: str) -> List[ChildRecord]:
        info = await self.fetch_comic_info(media_id)
        return list(info.chapters)

    async def fetch_content(self, child_id: str) -> ComicDownloadLinks:
        return await self.fetch_comic_links(child_id)

    @abstractmethod
    async def _search(self, query: str, page: int) -> SearchResult[ComicResult]:
        """Provider hook for ``search``."""

    @abstractmethod
    async def _fetch_comic_info(self, comic_id: str) -> ComicInfo:
        """Provider hook for ``fetch_comic_info``."""

    async def _fetch_comic_links(self, issue_id: str) -> ComicDownloadLinks:
        raise self._unsupported("fetch_comic_links")


class BookParser(_FamilyParser):
    """Contract for book providers; the terminal payload is a link set."""

    family = MediaFamily.BOOKS

    async def fetch_book_info(self, book_id: str) -> BookInfo:
        """Full book record."""
        book_id = self._require_id(book_id, "book_id")
        result = await self._call("fetch book info", self._fetch_book_info, book_id)
        with self._operation("fetch book info"):
            return _coerce(BookInfo, result)

    async def fetch_download_links(self, book_id: str) -> BookDownloadLinks:
        """Download mirrors and read-online URL for a book."""
        book_id = self._require_id(book_id, "book_id")
        result = await self._call("fetch download links", self._fetch_download_links, book_id)
        with self._operation("fetch download links"):
            return _coerce(BookDownloadLinks, result)

    async def fetch_info(self, media_id: str) -> BookInfo:
        return await self.fetch_book_info(media_id)

    async def fetch_children(self, media_id: str) -> List[BookDownloadLinks]:
        # A book has no chapters; its single child is the link set
        return [await self.fetch_download_links(media_id)]

    async def fetch_content(self, child_id: str) -> BookDownloadLinks:
        return await self.fetch_download_links(child_id)

    @abstractmethod
    async def _search(self, query: str, page: int) -> SearchResult[BookResult]:
        """Provider hook for ``search``."""

    @abstractmethod
    async def _fetch_book_info(self, book_id: str) -> BookInfo:
        """Provider hook for ``fetch_book_info``."""

    async def _fetch_download_links(self, book_id: str) -> BookDownloadLinks:
        raise self._unsupported("fetch_download_links")


__all__ = [
    "AnimeParser",
    "MovieParser",
    "MangaParser",
    "LightNovelParser",
    "ComicParser",
    "BookParser",
]
