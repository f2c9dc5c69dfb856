"""
HTML5 Page Extractor - Embed pages that carry a plain ``<video>`` player.

Reads ``<video src>``, ``<video><source src>`` and ``<track>`` elements,
then falls back to ``file: "..."`` entries of inline player setups. A page
without any of these is an extraction failure, not an empty result.
"""

import re
from typing import List
from urllib.parse import urljoin

from mediahub.core.exceptions import ExtractionError
from mediahub.core.html import HTMLDocument
from mediahub.core.models import Source, Subtitle, Video
from mediahub.extractors.base import VideoExtractor
from mediahub.extractors.direct import quality_from_text


_PLAYER_FILE = re.compile(
    r'["\']?file["\']?\s*:\s*["\']([^"\']+\.(?:m3u8|mp4)(?:\?[^"\']*)?)["\']',
    re.IGNORECASE,
)

_HLS_TYPES = ('application/x-mpegurl', 'application/vnd.apple.mpegurl')


class Html5PageExtractor(VideoExtractor):
    """Generic extractor for pages embedding an HTML5 video element."""

    server_name = "html5"

    async def _extract(self, url: str) -> Source:
        response = await self.transport.request("GET", url, headers={"Referer": url})
        document = HTMLDocument(response.text, base_url=url)

        videos = self._videos(document)
        if not videos:
            videos = [
                self._video(urljoin(url, match), label="")
                for match in dict.fromkeys(_PLAYER_FILE.findall(response.text))
            ]
        if not videos:
            raise ExtractionError(f"No playable video found on {url}", server=self.server_name, url=url)

        self.logger.debug(f"Found {len(videos)} videos on {url}")
        return Source(
            sources=tuple(videos),
            subtitles=tuple(self._subtitles(document)),
            headers={"Referer": url},
        )

    @staticmethod
    def _video(src: str, label: str, mime: str = "") -> Video:
        is_m3u8 = mime.lower() in _HLS_TYPES or '.m3u8' in src.lower()
        quality = quality_from_text(label) or quality_from_text(src) or ('auto' if is_m3u8 else 'default')
        return Video(url=src, quality=quality, is_m3u8=is_m3u8)

    def _videos(self, document: HTMLDocument) -> List[Video]:
        videos: List[Video] = []
        seen = set()
        for element in document.select('video[src], video source[src]'):
            src = document.attr(element, 'src')
            if not src or src in seen or src.startswith('blob:'):
                continue
            seen.add(src)
            label = " ".join(filter(None, (
                document.attr(element, 'label'),
                document.attr(element, 'size'),
                document.attr(element, 'res'),
            )))
            videos.append(self._video(src, label, document.attr(element, 'type') or ""))
        return videos

    @staticmethod
    def _subtitles(document: HTMLDocument) -> List[Subtitle]:
        subtitles = []
        for element in document.select('track[src]'):
            kind = (document.attr(element, 'kind') or 'subtitles').lower()
            if kind not in ('subtitles', 'captions'):
                continue
            lang = document.attr(element, 'label') or document.attr(element, 'srclang') or 'default'
            subtitles.append(Subtitle(url=document.attr(element, 'src'), lang=lang))
        return subtitles


__all__ = ["Html5PageExtractor"]
