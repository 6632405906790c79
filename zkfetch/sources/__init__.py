# zkfetch/sources/__init__.py
"""
Extraction registry.

Maps a source kind to the fixed request the attestation service should make
and the patterns it should extract from the response. Pattern bodies are
opaque strings in the attestation service's regex dialect (JavaScript style
`(?<name>...)` groups); nothing here parses them.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping

from zkfetch.errors import UnknownSourceKind

BROWSER_HEADERS = MappingProxyType({
    "User-Agent": (
        "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/124.0 Safari/537.36"
    ),
    "Accept-Language": "en-US,en;q=0.9",
})


@dataclass(frozen=True)
class SourceSpec:
    kind: str
    title: str
    url: str
    response_matches: tuple
    method: str = "GET"
    headers: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    response_redactions: tuple = ()
    fields: tuple = ()

    def public_options(self) -> dict:
        opts = {"method": self.method}
        if self.headers:
            opts["headers"] = dict(self.headers)
        return opts

    def private_options(self) -> dict:
        opts = {
            "responseMatches": [
                {"type": "regex", "value": pattern} for pattern in self.response_matches
            ],
        }
        if self.response_redactions:
            opts["responseRedactions"] = [
                {"regex": pattern} for pattern in self.response_redactions
            ]
        return opts


# Imported late: the source modules need SourceSpec.
from zkfetch.sources import (  # noqa: E402
    economic_indicators,
    live_scores,
    price_feed,
    rankings,
    weather,
)

SOURCES = {
    spec.kind: spec
    for spec in (
        price_feed.SOURCE,
        economic_indicators.SOURCE,
        rankings.SOURCE,
        weather.SOURCE,
        live_scores.SOURCE,
    )
}

# Command names used by earlier releases of the CLI
ALIASES = {
    "stellar": "price-feed",
    "trading-economics": "economic-indicators",
    "forbes": "rankings",
    "accuweather": "weather",
    "goal": "live-scores",
}


def source_kinds() -> tuple:
    return tuple(SOURCES)


def get_source(kind: str) -> SourceSpec:
    """Return the SourceSpec for `kind` (or one of its legacy aliases)."""
    if isinstance(kind, str):
        key = ALIASES.get(kind, kind)
        if key in SOURCES:
            return SOURCES[key]
    raise UnknownSourceKind(kind, SOURCES)
