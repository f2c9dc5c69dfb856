"""
Direct File Extractor - Servers that already point at a media file or playlist.

Some providers list plain ``.mp4`` / ``.m3u8`` links as servers. Nothing
has to be fetched: the URL itself is the source, and its quality is read
from the URL the same way quality labels are read elsewhere.
"""

import re
from typing import List, Optional
from urllib.parse import parse_qs, urlparse

from mediahub.core.models import Source, StreamingServers, Subtitle, Video
from mediahub.extractors.base import VideoExtractor


MEDIA_EXTENSIONS = ('.m3u8', '.mp4', '.mkv', '.webm', '.mpd')

QUALITY_PATTERNS = (
    ('2160p', (r'2160p?', r'\b4k\b', r'\buhd\b')),
    ('1440p', (r'1440p?', r'\b2k\b')),
    ('1080p', (r'1080p?', r'\bfhd\b', r'full.?hd')),
    ('720p', (r'720p?', r'\bhd\b')),
    ('480p', (r'480p?', r'\bsd\b')),
    ('360p', (r'360p?',)),
)


def quality_from_text(text: str) -> Optional[str]:
    """Best quality label mentioned in a URL or label, if any."""
    lowered = text.lower()
    for label, patterns in QUALITY_PATTERNS:
        if any(re.search(pattern, lowered) for pattern in patterns):
            return label
    return None


class DirectFileExtractor(VideoExtractor):
    """Passes through direct media URLs, including subtitle hints in the query."""

    server_name = StreamingServers.DIRECT.value

    def supports(self, url: str) -> bool:
        if not super().supports(url):
            return False
        return urlparse(url).path.lower().endswith(MEDIA_EXTENSIONS)

    async def _extract(self, url: str) -> Source:
        path = urlparse(url).path.lower()
        is_m3u8 = path.endswith('.m3u8')
        quality = quality_from_text(url) or ('auto' if is_m3u8 else 'default')

        return Source(
            sources=(Video(url=url, quality=quality, is_m3u8=is_m3u8),),
            subtitles=tuple(self._subtitles_from_query(url)),
        )

    @staticmethod
    def _subtitles_from_query(url: str) -> List[Subtitle]:
        # Players commonly pass ``sub=<url>`` / ``sub_<lang>=<url>``
        subtitles = []
        for key, values in parse_qs(urlparse(url).query).items():
            if key != 'sub' and not key.startswith('sub_'):
                continue
            lang = key[4:] or 'default'
            subtitles.extend(Subtitle(url=value, lang=lang) for value in values if value)
        return subtitles


__all__ = ["DirectFileExtractor", "quality_from_text", "MEDIA_EXTENSIONS"]
