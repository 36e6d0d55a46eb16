"""URL → report source classification."""

from __future__ import annotations

from drc.constants import URL_SOURCE_MARKERS, ReportSource

# Sources whose page chrome is not pruned before capture.
UNPRUNED_SOURCES = frozenset({ReportSource.OTHER, ReportSource.DISCOVER})


def classify_report_source(url: str) -> ReportSource:
    """Return the source of the first marker found in ``url``, else ``Other``."""
    for marker, source in URL_SOURCE_MARKERS:
        if marker in url:
            return source
    return ReportSource.OTHER


def should_prune(source: ReportSource) -> bool:
    return source not in UNPRUNED_SOURCES
