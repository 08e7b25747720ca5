"""
Projections of Sonarr API records into printable lines.

Missing or null fields render as empty strings (titles) or "??" (numbers)
rather than raising, so one malformed record never hides the rest.
"""
from typing import Any, Dict, Iterable, List


def pad2(value: Any) -> str:
    """Zero-pad to two digits without truncating: 2 -> '02', 103 -> '103'."""
    if value is None:
        return "??"
    return str(value).zfill(2)


def episode_code(season: Any, episode: Any) -> str:
    return f"S{pad2(season)}E{pad2(episode)}"


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def format_missing_record(record: Dict[str, Any]) -> str:
    """'<series title> - S01E02 - <episode title>' for one wanted/missing record."""
    series = record.get("series") or {}
    return (f"{_text(series.get('title'))} - "
            f"{episode_code(record.get('seasonNumber'), record.get('episodeNumber'))} - "
            f"{_text(record.get('title'))}")


def series_lines(series: Iterable[Dict[str, Any]]) -> List[str]:
    """'<id>\\t<title>' per series, sorted by title."""
    rows = sorted(series, key=lambda s: _text(s.get("title")))
    return [f"{_text(s.get('id'))}\t{_text(s.get('title'))}" for s in rows]


def missing_lines(page: Dict[str, Any]) -> List[str]:
    return [format_missing_record(r) for r in page.get("records") or []]


def health_lines(issues: Iterable[Dict[str, Any]]) -> List[str]:
    return [f"{_text(i.get('type'))}: {_text(i.get('message'))}" for i in issues]
