"""
Core Data Models - Pydantic models shared by every provider family.

This module defines the normalized entity model returned by all providers:
search envelopes, per-family result/info/child records, streaming servers,
sources and subtitles. Every model is frozen; once a provider returns a
record the caller owns it and nothing in mediahub mutates it again.
"""

from datetime import date
from enum import Enum
from typing import Any, Dict, Generic, Optional, Tuple, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


# Placeholder used for descriptive string fields the upstream did not provide
NOT_AVAILABLE = "N/A"


class MediaStatus(str, Enum):
    """Publication / airing status of a title."""

    ONGOING = "Ongoing"
    COMPLETED = "Completed"
    HIATUS = "Hiatus"
    CANCELLED = "Cancelled"
    NOT_YET_AIRED = "Not yet aired"
    UNKNOWN = "Unknown"

    def __str__(self) -> str:
        return self.value


class MediaFormat(str, Enum):
    """Release format reported by anime/manga sources."""

    TV = "TV"
    TV_SHORT = "TV_SHORT"
    MOVIE = "MOVIE"
    SPECIAL = "SPECIAL"
    OVA = "OVA"
    ONA = "ONA"
    MUSIC = "MUSIC"
    MANGA = "MANGA"
    NOVEL = "NOVEL"
    ONE_SHOT = "ONE_SHOT"
    UNKNOWN = "UNKNOWN"

    @classmethod
    def from_upstream(cls, value: Any) -> "MediaFormat":
        """Map a free-form upstream type string, degrading to UNKNOWN."""
        if not isinstance(value, str) or not value.strip():
            return cls.UNKNOWN
        key = value.strip().upper().replace(" ", "_").replace("-", "_")
        try:
            return cls(key)
        except ValueError:
            return cls.UNKNOWN


class SubOrDub(str, Enum):
    """Audio/subtitle track availability."""

    SUB = "sub"
    DUB = "dub"
    BOTH = "both"


class TvType(str, Enum):
    """Kind of title served by movie providers."""

    TVSERIES = "TV Series"
    MOVIE = "Movie"
    ANIME = "Anime"


class StreamingServers(str, Enum):
    """Well-known video hosts; used as extractor registry keys."""

    ASIANLOAD = "asianload"
    GOGOCDN = "gogocdn"
    STREAMSB = "streamsb"
    MIXDROP = "mixdrop"
    MP4UPLOAD = "mp4upload"
    UPCLOUD = "upcloud"
    VIDCLOUD = "vidcloud"
    STREAMTAPE = "streamtape"
    VIZCLOUD = "vizcloud"
    MYCLOUD = "mycloud"
    FILEMOON = "filemoon"
    VIDSTREAMING = "vidstreaming"
    STREAMWISH = "streamwish"
    DIRECT = "direct"


class MediaFamily(str, Enum):
    """Media domains; first level of the provider registry."""

    ANIME = "ANIME"
    MANGA = "MANGA"
    MOVIES = "MOVIES"
    LIGHT_NOVELS = "LIGHT_NOVELS"
    COMICS = "COMICS"
    BOOKS = "BOOKS"


class FuzzyDate(BaseModel):
    """
    Calendar date where any component may be missing.

    Comparisons only look at components populated on both sides, so
    ``FuzzyDate(year=2022)`` matches ``FuzzyDate(year=2022, month=7)``.
    Structural ``==`` stays the regular pydantic field equality.
    """

    model_config = ConfigDict(frozen=True)

    year: Optional[int] = Field(None, ge=1, le=9999)
    month: Optional[int] = Field(None, ge=1, le=12)
    day: Optional[int] = Field(None, ge=1, le=31)

    @property
    def is_empty(self) -> bool:
        return self.year is None and self.month is None and self.day is None

    def _shared(self, other: "FuzzyDate") -> Tuple[Tuple[int, int], ...]:
        pairs = []
        for mine, theirs in ((self.year, other.year), (self.month, other.month), (self.day, other.day)):
            if mine is not None and theirs is not None:
                pairs.append((mine, theirs))
        return tuple(pairs)

    def matches(self, other: "FuzzyDate") -> bool:
        """True when every component populated on both sides agrees."""
        return all(mine == theirs for mine, theirs in self._shared(other))

    def compare(self, other: "FuzzyDate") -> Optional[int]:
        """
        Three-way comparison over shared components.

        Returns -1, 0 or 1, or None when the two dates share no populated
        component and cannot be ordered.
        """
        shared = self._shared(other)
        if not shared:
            return None
        for mine, theirs in shared:
            if mine != theirs:
                return -1 if mine < theirs else 1
        return 0

    def to_date(self) -> Optional[date]:
        """Convert to ``datetime.date`` when every component is known."""
        if self.year is None or self.month is None or self.day is None:
            return None
        try:
            return date(self.year, self.month, self.day)
        except ValueError:
            return None

    def __str__(self) -> str:
        parts = [f"{self.year:04d}" if self.year else "????"]
        if self.month:
            parts.append(f"{self.month:02d}")
            if self.day:
                parts.append(f"{self.day:02d}")
        return "-".join(parts)


DateValue = Union[FuzzyDate, str]

T = TypeVar("T")


class SearchResult(BaseModel, Generic[T]):
    """
    Paginated envelope around an ordered sequence of results.

    When ``total_pages`` is known (> 0), ``has_next_page`` must equal
    ``current_page < total_pages``; otherwise ``total_pages`` is 0 and
    ``has_next_page`` is the provider's best guess.
    """

    model_config = ConfigDict(frozen=True)

    current_page: int = Field(1, ge=1, description="1-based page number")
    has_next_page: bool = Field(False, description="Whether another page exists")
    total_pages: int = Field(0, ge=0, description="Total pages, 0 when unknown")
    results: Tuple[T, ...] = Field(default_factory=tuple, description="Results in upstream order")

    @model_validator(mode='after')
    def validate_pagination(self) -> 'SearchResult':
        """Keep has_next_page consistent with a known page count."""
        if self.total_pages > 0 and self.has_next_page != (self.current_page < self.total_pages):
            raise ValueError(
                f"has_next_page={self.has_next_page} contradicts "
                f"page {self.current_page} of {self.total_pages}"
            )
        return self

    @classmethod
    def paginate(
        cls,
        results: Any,
        page: int = 1,
        total_pages: Optional[int] = None,
        has_next_page: Optional[bool] = None,
    ) -> "SearchResult":
        """
        Build an envelope, deriving has_next_page from total_pages when known.

        Args:
            results: Iterable of result records, in upstream order
            page: Current page number
            total_pages: Upstream page count, None/0 when unknown
            has_next_page: Heuristic used only when the page count is unknown
        """
        total = int(total_pages or 0)
        if total > 0:
            has_next = page < total
        else:
            has_next = bool(has_next_page)
        return cls(current_page=page, has_next_page=has_next, total_pages=total, results=tuple(results))

    @classmethod
    def single_page(cls, results: Any) -> "SearchResult":
        """Envelope for sources without any notion of pages."""
        return cls(current_page=1, has_next_page=False, total_pages=0, results=tuple(results))

    def __len__(self) -> int:
        return len(self.results)


class MediaResult(BaseModel):
    """Summary record returned inside every family's search envelope."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1, description="Opaque source-defined id")
    title: str = Field(..., description="Display title")
    url: str = Field(..., min_length=1, description="Canonical URL of the title")
    image: Optional[str] = Field(None, description="Poster image URL")
    release_date: Optional[str] = Field(None, description="Display release date/year")

    @field_validator('release_date', mode='before')
    @classmethod
    def coerce_release_date(cls, v: Any) -> Optional[str]:
        """Upstreams frequently send the year as an integer."""
        if v is None:
            return None
        return str(v)

    def __str__(self) -> str:
        return f"{self.title} [{self.id}]"


class ChildRecord(BaseModel):
    """Common shape of episodes and chapters."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1, description="Opaque episode/chapter id")
    number: float = Field(..., ge=0, description="Episode/chapter number")
    title: Optional[str] = Field(None, description="Episode/chapter title")
    url: str = Field(..., min_length=1, description="Episode/chapter URL")

    def __str__(self) -> str:
        number = int(self.number) if float(self.number).is_integer() else self.number
        return f"#{number}: {self.title or NOT_AVAILABLE}"


def _ascending(children: Any) -> Any:
    """Stable sort of episode/chapter records by number."""
    if isinstance(children, (list, tuple)) and all(isinstance(c, ChildRecord) for c in children):
        return tuple(sorted(children, key=lambda c: c.number))
    return children


class MediaInfo(MediaResult):
    """
    Full info record. String fields are never absent: they carry a real
    value or ``NOT_AVAILABLE``.
    """

    title: str = NOT_AVAILABLE
    image: str = NOT_AVAILABLE
    release_date: str = NOT_AVAILABLE
    cover: str = NOT_AVAILABLE
    description: str = NOT_AVAILABLE
    genres: Tuple[str, ...] = Field(default_factory=tuple)
    status: MediaStatus = MediaStatus.UNKNOWN
    start_date: DateValue = NOT_AVAILABLE
    end_date: DateValue = NOT_AVAILABLE
    synonyms: Tuple[str, ...] = Field(default_factory=tuple)

    @field_validator('title', 'image', 'release_date', 'cover', 'description', mode='before')
    @classmethod
    def fill_missing_text(cls, v: Any) -> str:
        """Replace missing/blank descriptive text with the placeholder."""
        if v is None:
            return NOT_AVAILABLE
        text = str(v).strip()
        return text or NOT_AVAILABLE

    @field_validator('start_date', 'end_date', mode='before')
    @classmethod
    def fill_missing_date(cls, v: Any) -> DateValue:
        if v is None or (isinstance(v, str) and not v.strip()):
            return NOT_AVAILABLE
        if isinstance(v, FuzzyDate) and v.is_empty:
            return NOT_AVAILABLE
        return v

    @field_validator('genres', 'synonyms', mode='before')
    @classmethod
    def dedupe_strings(cls, v: Any) -> Tuple[str, ...]:
        """Drop nulls/blanks and duplicates while keeping first-seen order."""
        if v is None:
            return ()
        if isinstance(v, str):
            v = [v]
        seen = []
        for item in v:
            if item is None:
                continue
            text = str(item).strip()
            if text and text not in seen:
                seen.append(text)
        return tuple(seen)


# ---------------------------------------------------------------- anime

class AnimeResult(MediaResult):
    """Anime search result."""

    type: Optional[MediaFormat] = None
    sub_or_dub: Optional[SubOrDub] = None


class AnimeEpisode(ChildRecord):
    """Anime episode entry."""

    image: Optional[str] = None
    release_date: Optional[str] = None
    is_filler: bool = False


class AnimeInfo(MediaInfo):
    """Anime info record with its episode list."""

    type: MediaFormat = MediaFormat.UNKNOWN
    season: str = NOT_AVAILABLE
    sub_or_dub: Optional[SubOrDub] = None
    total_episodes: int = Field(0, ge=0)
    episodes: Tuple[AnimeEpisode, ...] = Field(default_factory=tuple)

    @field_validator('episodes')
    @classmethod
    def sort_episodes(cls, v: Any) -> Any:
        return _ascending(v)

    @field_validator('season', mode='before')
    @classmethod
    def fill_missing_season(cls, v: Any) -> str:
        if v is None or not str(v).strip():
            return NOT_AVAILABLE
        return str(v).strip().upper()


# ---------------------------------------------------------------- streaming

class EpisodeServer(BaseModel):
    """Opaque pointer to a video host; only a matching extractor understands ``url``."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1)
    url: str = Field(..., min_length=1)


class Video(BaseModel):
    """A single playable stream."""

    model_config = ConfigDict(frozen=True)

    url: str = Field(..., min_length=1)
    quality: Optional[str] = None
    is_m3u8: bool = False
    size: Optional[int] = Field(None, ge=0, description="Size in bytes when known")

    @model_validator(mode='before')
    @classmethod
    def detect_m3u8(cls, data: Any) -> Any:
        """Default is_m3u8 from the URL when the extractor did not say."""
        if isinstance(data, dict) and data.get('is_m3u8') is None and isinstance(data.get('url'), str):
            data = {**data, 'is_m3u8': '.m3u8' in data['url'].lower()}
        return data


class Subtitle(BaseModel):
    """A subtitle track."""

    model_config = ConfigDict(frozen=True)

    url: str = Field(..., min_length=1)
    lang: str = Field(..., min_length=1)


class TimeRange(BaseModel):
    """Intro/outro marker in seconds."""

    model_config = ConfigDict(frozen=True)

    start: float = Field(..., ge=0)
    end: float = Field(..., ge=0)


class Source(BaseModel):
    """Playable sources and subtitles for one episode."""

    model_config = ConfigDict(frozen=True)

    sources: Tuple[Video, ...] = Field(default_factory=tuple)
    subtitles: Tuple[Subtitle, ...] = Field(default_factory=tuple)
    headers: Dict[str, str] = Field(default_factory=dict, description="Headers the player must send")
    intro: Optional[TimeRange] = None
    outro: Optional[TimeRange] = None
    download: Optional[str] = None

    @property
    def best(self) -> Optional[Video]:
        """Highest numeric quality, falling back to the first source."""
        ranked = [v for v in self.sources if v.quality and v.quality.rstrip('p').isdigit()]
        if ranked:
            return max(ranked, key=lambda v: int(v.quality.rstrip('p')))
        return self.sources[0] if self.sources else None


# ---------------------------------------------------------------- manga

class MangaResult(MediaResult):
    """Manga search result."""

    alt_titles: Tuple[str, ...] = Field(default_factory=tuple)


class MangaChapter(ChildRecord):
    """Manga chapter entry."""

    volume: Optional[float] = None
    pages: Optional[int] = Field(None, ge=0)
    release_date: Optional[str] = None


class MangaChapterPage(BaseModel):
    """One page image of a manga chapter."""

    model_config = ConfigDict(frozen=True)

    page: int = Field(..., ge=1)
    img: str = Field(..., min_length=1)
    header_for_image: Dict[str, str] = Field(default_factory=dict)


class MangaInfo(MediaInfo):
    """Manga info record with its chapter list."""

    authors: Tuple[str, ...] = Field(default_factory=tuple)
    total_chapters: int = Field(0, ge=0)
    chapters: Tuple[MangaChapter, ...] = Field(default_factory=tuple)

    @field_validator('chapters')
    @classmethod
    def sort_chapters(cls, v: Any) -> Any:
        return _ascending(v)


# ---------------------------------------------------------------- light novels

class LightNovelResult(MediaResult):
    """Light novel search result."""


class LightNovelChapter(ChildRecord):
    """Light novel chapter entry."""


class LightNovelChapterContent(BaseModel):
    """Text of a single light novel chapter."""

    model_config = ConfigDict(frozen=True)

    novel_title: str = NOT_AVAILABLE
    chapter_title: str = NOT_AVAILABLE
    text: str = ""


class LightNovelInfo(MediaInfo):
    """Light novel info record with its chapter list."""

    authors: Tuple[str, ...] = Field(default_factory=tuple)
    rating: Optional[float] = None
    total_chapters: int = Field(0, ge=0)
    chapters: Tuple[LightNovelChapter, ...] = Field(default_factory=tuple)

    @field_validator('chapters')
    @classmethod
    def sort_chapters(cls, v: Any) -> Any:
        return _ascending(v)


# ---------------------------------------------------------------- movies

class MovieResult(MediaResult):
    """Movie / TV search result."""

    type: Optional[TvType] = None


class MovieEpisode(ChildRecord):
    """Movie or series episode; movies expose a single episode."""

    season: Optional[int] = Field(None, ge=0)
    release_date: Optional[str] = None


class MovieInfo(MediaInfo):
    """Movie / TV info record with its episode list."""

    type: Optional[TvType] = None
    duration: str = NOT_AVAILABLE
    rating: Optional[float] = None
    casts: Tuple[str, ...] = Field(default_factory=tuple)
    total_episodes: int = Field(0, ge=0)
    episodes: Tuple[MovieEpisode, ...] = Field(default_factory=tuple)

    @field_validator('episodes')
    @classmethod
    def sort_episodes(cls, v: Any) -> Any:
        return _ascending(v)


# ---------------------------------------------------------------- comics & books

class ComicResult(MediaResult):
    """Comic search result."""

    publisher: Optional[str] = None
    size: Optional[str] = None
    excerpt: Optional[str] = None


class ComicInfo(MediaInfo):
    """Comic info record; issues are the enumerable children."""

    publisher: str = NOT_AVAILABLE
    size: str = NOT_AVAILABLE
    total_chapters: int = Field(0, ge=0)
    chapters: Tuple[ChildRecord, ...] = Field(default_factory=tuple)

    @field_validator('chapters')
    @classmethod
    def sort_chapters(cls, v: Any) -> Any:
        return _ascending(v)


class ComicDownloadLinks(BaseModel):
    """Download/read URL set for a comic issue."""

    model_config = ConfigDict(frozen=True)

    download: Optional[str] = None
    read_online: Optional[str] = None
    mirrors: Dict[str, str] = Field(default_factory=dict, description="Mirror host -> URL")

    @property
    def all_links(self) -> Tuple[str, ...]:
        links = [link for link in (self.download, self.read_online) if link]
        links.extend(self.mirrors.values())
        return tuple(links)


class BookResult(MediaResult):
    """Book search result."""

    authors: Tuple[str, ...] = Field(default_factory=tuple)
    publisher: Optional[str] = None
    language: Optional[str] = None
    extension: Optional[str] = None
    size: Optional[str] = None
    isbn: Tuple[str, ...] = Field(default_factory=tuple)


class BookInfo(MediaInfo):
    """Book info record."""

    authors: Tuple[str, ...] = Field(default_factory=tuple)
    publisher: str = NOT_AVAILABLE
    language: str = NOT_AVAILABLE
    extension: str = NOT_AVAILABLE
    size: str = NOT_AVAILABLE
    isbn: Tuple[str, ...] = Field(default_factory=tuple)
    pages: int = Field(0, ge=0)


class BookDownloadLinks(BaseModel):
    """Download/read URL set for a book."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    links: Tuple[str, ...] = Field(default_factory=tuple, description="Mirrors in upstream order")
    read_online: Optional[str] = None

    @property
    def all_links(self) -> Tuple[str, ...]:
        return self.links + ((self.read_online,) if self.read_online else ())


# ---------------------------------------------------------------- discovery

class ProviderStats(BaseModel):
    """Identity listing of a registered provider."""

    model_config = ConfigDict(frozen=True)

    name: str
    base_url: str
    logo: str = ""
    class_path: str
    family: MediaFamily
    languages: Tuple[str, ...] = ("en",)
    is_nsfw: bool = False
    is_working: bool = True


# Export all models and types
__all__ = [
    "NOT_AVAILABLE",
    "MediaStatus",
    "MediaFormat",
    "SubOrDub",
    "TvType",
    "StreamingServers",
    "MediaFamily",
    "FuzzyDate",
    "DateValue",
    "SearchResult",
    "MediaResult",
    "ChildRecord",
    "MediaInfo",
    "AnimeResult",
    "AnimeEpisode",
    "AnimeInfo",
    "EpisodeServer",
    "Video",
    "Subtitle",
    "TimeRange",
    "Source",
    "MangaResult",
    "MangaChapter",
    "MangaChapterPage",
    "MangaInfo",
    "LightNovelResult",
    "LightNovelChapter",
    "LightNovelChapterContent",
    "LightNovelInfo",
    "MovieResult",
    "MovieEpisode",
    "MovieInfo",
    "ComicResult",
    "ComicInfo",
    "ComicDownloadLinks",
    "BookResult",
    "BookInfo",
    "BookDownloadLinks",
    "ProviderStats",
]
