"""
Normalization - Declarative mapping from raw upstream payloads to info records.

Providers describe *where* each field lives in their upstream payload with
a list of ``FieldRule`` entries; ``InfoNormalizer`` applies the same
default policy to every provider of a family: "N/A" for missing text,
closed status translation, fuzzy dates, deduplicated synonyms and
ascending child lists.
"""

import logging
import re
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Type, TypeVar

from mediahub.core.models import NOT_AVAILABLE, FuzzyDate, MediaInfo, MediaStatus


logger = logging.getLogger(__name__)

InfoT = TypeVar("InfoT", bound=MediaInfo)

_MONTHS = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)

_ISO_DATE = re.compile(r'^\s*(\d{4})(?:-(\d{1,2})(?:-(\d{1,2}))?)?')


class StatusTable:
    """
    Closed translation table from upstream status strings to MediaStatus.

    Keys are matched case-insensitively with spaces and hyphens folded to
    underscores. Anything not in the table resolves to UNKNOWN.
    """

    def __init__(self, mapping: Mapping[str, MediaStatus]):
        self._mapping = {self._key(k): v for k, v in mapping.items()}

    @staticmethod
    def _key(value: str) -> str:
        return re.sub(r'[\s\-]+', '_', value.strip().lower())

    def resolve(self, value: Any) -> MediaStatus:
        """Translate an upstream value; never raises."""
        if isinstance(value, MediaStatus):
            return value
        if not isinstance(value, str) or not value.strip():
            return MediaStatus.UNKNOWN
        return self._mapping.get(self._key(value), MediaStatus.UNKNOWN)

    def known_values(self) -> Tuple[str, ...]:
        return tuple(self._mapping)

    def extend(self, mapping: Mapping[str, MediaStatus]) -> "StatusTable":
        """Return a new table with extra entries; the original is untouched."""
        merged: Dict[str, MediaStatus] = dict(self._mapping)
        merged.update({self._key(k): v for k, v in mapping.items()})
        return StatusTable(merged)

    def __contains__(self, value: object) -> bool:
        return isinstance(value, str) and self._key(value) in self._mapping

    def __len__(self) -> int:
        return len(self._mapping)


DEFAULT_STATUS_TABLE = StatusTable({
    "finished_airing": MediaStatus.COMPLETED,
    "finished": MediaStatus.COMPLETED,
    "completed": MediaStatus.COMPLETED,
    "currently_airing": MediaStatus.ONGOING,
    "releasing": MediaStatus.ONGOING,
    "ongoing": MediaStatus.ONGOING,
    "hiatus": MediaStatus.HIATUS,
    "on_hiatus": MediaStatus.HIATUS,
    "cancelled": MediaStatus.CANCELLED,
    "canceled": MediaStatus.CANCELLED,
    "discontinued": MediaStatus.CANCELLED,
    "not_yet_aired": MediaStatus.NOT_YET_AIRED,
    "not_yet_released": MediaStatus.NOT_YET_AIRED,
    "upcoming": MediaStatus.NOT_YET_AIRED,
})


def to_int(value: Any) -> Optional[int]:
    """Best-effort integer conversion; None for anything unusable."""
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(float(value))
    except (TypeError, ValueError):
        return None


def to_float(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def parse_fuzzy_date(value: Any) -> Optional[FuzzyDate]:
    """
    Parse a possibly partial date.

    Accepts ``FuzzyDate``, ``date``/``datetime``, dicts with year/month/day
    keys, integers (a year) and strings starting with ``YYYY[-MM[-DD]]``.
    Returns None when nothing usable is found.
    """
    if value is None:
        return None
    if isinstance(value, FuzzyDate):
        return None if value.is_empty else value
    if isinstance(value, datetime):
        value = value.date()
    if isinstance(value, date):
        return FuzzyDate(year=value.year, month=value.month, day=value.day)
    if isinstance(value, Mapping):
        parts = {k: to_int(value.get(k)) for k in ("year", "month", "day")}
        return _safe_fuzzy(**parts)
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return _safe_fuzzy(year=int(value))
    if isinstance(value, str):
        match = _ISO_DATE.match(value)
        if not match:
            return None
        year, month, day = (to_int(g) for g in match.groups())
        return _safe_fuzzy(year=year, month=month, day=day)
    return None


def _safe_fuzzy(year: Optional[int] = None, month: Optional[int] = None, day: Optional[int] = None) -> Optional[FuzzyDate]:
    if month is not None and not 1 <= month <= 12:
        month = day = None
    if day is not None and not 1 <= day <= 31:
        day = None
    if year is not None and not 1 <= year <= 9999:
        year = None
    candidate = FuzzyDate(year=year, month=month, day=day)
    return None if candidate.is_empty else candidate


def format_release_date(value: Any) -> str:
    """Render a date as ``January 5, 2022`` (or the partial equivalent)."""
    fuzzy = parse_fuzzy_date(value)
    if fuzzy is None or fuzzy.year is None:
        return NOT_AVAILABLE
    if fuzzy.month is None:
        return str(fuzzy.year)
    month = _MONTHS[fuzzy.month - 1]
    if fuzzy.day is None:
        return f"{month} {fuzzy.year}"
    return f"{month} {fuzzy.day}, {fuzzy.year}"


def dedupe(values: Optional[Iterable[Any]]) -> List[str]:
    """Filter out nulls/blanks and duplicates, keeping first-seen order."""
    result: List[str] = []
    for value in values or ():
        if value is None:
            continue
        text = str(value).strip()
        if text and text not in result:
            result.append(text)
    return result


def _number_of(child: Any) -> float:
    number = child.get("number") if isinstance(child, Mapping) else getattr(child, "number", None)
    converted = to_float(number)
    return converted if converted is not None else float("inf")


def sort_children(children: Iterable[Any]) -> List[Any]:
    """Ascending by number; Python's sort is stable so ties keep upstream order."""
    return sorted(children, key=_number_of)


def pick(raw: Any, path: str) -> Any:
    """
    Look up a dotted path (``poster.hq``, ``titles.0``) in nested dicts/lists.

    Missing keys, wrong types and out-of-range indexes all yield None.
    """
    current = raw
    for part in path.split("."):
        if current is None:
            return None
        if isinstance(current, Mapping):
            current = current.get(part)
        elif isinstance(current, Sequence) and not isinstance(current, str) and part.isdigit():
            index = int(part)
            current = current[index] if index < len(current) else None
        else:
            return None
    return current


@dataclass(frozen=True)
class FieldRule:
    """
    Where one info field comes from.

    Attributes:
        target: Field name on the info model
        paths: Dotted lookup paths tried in order; first non-None wins
        transform: Optional conversion applied to the found value
        default: Value used when nothing is found or the transform returns None
        collect: Gather every non-None path value into a list instead of
            stopping at the first one
    """

    target: str
    paths: Tuple[str, ...] = ()
    transform: Optional[Callable[[Any], Any]] = None
    default: Any = None
    collect: bool = False

    def resolve(self, raw: Any) -> Any:
        if self.collect:
            found = [pick(raw, path) for path in self.paths]
            values = [v for v in found if v is not None]
            if self.transform is not None:
                values = self.transform(values)
            return values if values else self.default
        for path in self.paths:
            value = pick(raw, path)
            if value is None:
                continue
            if self.transform is not None:
                value = self.transform(value)
            if value is not None:
                return value
        return self.default


def rule(
    target: str,
    *paths: str,
    transform: Optional[Callable[[Any], Any]] = None,
    default: Any = None,
    collect: bool = False,
) -> FieldRule:
    """Shorthand for building a FieldRule."""
    return FieldRule(target=target, paths=paths, transform=transform, default=default, collect=collect)


_CHILD_FIELDS = (("episodes", "total_episodes"), ("chapters", "total_chapters"))


class InfoNormalizer:
    """
    Applies a provider's field rules plus the family-wide default policy.

    The policy is the same for every provider: status goes through the
    status table, dates become FuzzyDate values when parseable, synonyms
    and genres are deduplicated, child lists are sorted by number and the
    total count falls back to the list length.
    """

    def __init__(
        self,
        model: Type[InfoT],
        rules: Sequence[FieldRule],
        status_table: StatusTable = DEFAULT_STATUS_TABLE,
    ):
        self.model = model
        self.rules = tuple(rules)
        self.status_table = status_table

    def normalize(self, raw: Any, **fixed: Any) -> InfoT:
        """
        Build an info record from a raw payload.

        Args:
            raw: Decoded upstream payload (usually a dict)
            **fixed: Values known without looking at the payload (id, url, ...)

        Raises:
            pydantic.ValidationError: If structural fields (id, url) are unusable
        """
        values: Dict[str, Any] = {}
        for field_rule in self.rules:
            value = field_rule.resolve(raw)
            if value is not None:
                values[field_rule.target] = value
        values.update({k: v for k, v in fixed.items() if v is not None})
        return self.model.model_validate(self.apply_policy(values))

    def apply_policy(self, values: Dict[str, Any]) -> Dict[str, Any]:
        fields = self.model.model_fields

        if "status" in fields:
            values["status"] = self.status_table.resolve(values.get("status"))

        for date_field in ("start_date", "end_date"):
            if date_field in fields and date_field in values and not isinstance(values[date_field], FuzzyDate):
                parsed = parse_fuzzy_date(values[date_field])
                values[date_field] = parsed if parsed is not None else NOT_AVAILABLE

        for list_field in ("synonyms", "genres"):
            if list_field in fields and list_field in values:
                raw_list = values[list_field]
                if isinstance(raw_list, (str, bytes)):
                    raw_list = [raw_list]
                values[list_field] = dedupe(raw_list)

        for children_field, total_field in _CHILD_FIELDS:
            if children_field not in fields:
                continue
            children = sort_children(values.get(children_field) or ())
            values[children_field] = children
            if total_field in fields:
                total = to_int(values.get(total_field))
                if total is None or total < 0:
                    total = len(children)
                values[total_field] = total

        return values


__all__ = [
    "StatusTable",
    "DEFAULT_STATUS_TABLE",
    "FieldRule",
    "InfoNormalizer",
    "rule",
    "pick",
    "to_int",
    "to_float",
    "parse_fuzzy_date",
    "format_release_date",
    "dedupe",
    "sort_children",
    "NOT_AVAILABLE",
]
