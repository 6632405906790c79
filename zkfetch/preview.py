# zkfetch/preview.py
"""
Source preview.

Fetches a registered source directly and runs its extraction patterns locally,
so a pattern can be checked against the live page before paying for an
attestation. Nothing here is attested or signed.

Patterns use the attestation service's `(?<name>...)` group syntax; they are
translated to Python's `(?P<name>...)` for the local match. Unmatched optional
groups are left out of the result.
"""

import re

import requests

from zkfetch.errors import PreviewFailure
from zkfetch.sources import get_source

TIMEOUT = 15

_NAMED_GROUP = re.compile(r"\(\?<(?![=!])")


def to_python_pattern(pattern: str) -> str:
    return _NAMED_GROUP.sub("(?P<", pattern)


def extract_values(text: str, patterns) -> dict:
    """Apply every pattern to `text`; return the sparse mapping of named groups."""
    values = {}
    for pattern in patterns:
        try:
            regex = re.compile(to_python_pattern(pattern))
        except re.error as e:
            raise PreviewFailure(f"Pattern does not compile: {e}") from e
        m = regex.search(text)
        if m is None:
            continue
        for name, value in m.groupdict().items():
            if value is not None:
                values[name] = value
    return values


def fetch_source(source, session=None) -> str:
    http = session or requests
    try:
        r = http.request(
            source.method,
            source.url,
            headers=dict(source.headers),
            timeout=TIMEOUT,
        )
        r.raise_for_status()
    except requests.RequestException as e:
        raise PreviewFailure(f"[{source.kind}] fetch failed: {e}") from e
    return r.text


def preview_source(kind: str, session=None) -> dict:
    source = get_source(kind)
    text = fetch_source(source, session=session)
    values = extract_values(text, source.response_matches)
    if not values:
        raise PreviewFailure(f"[{source.kind}] no pattern matched {source.url}")
    return values


# === CLI test ===

if __name__ == "__main__":
    import sys

    kind = sys.argv[1] if len(sys.argv) > 1 else "price-feed"
    print(f"Previewing {kind}...\n")
    for name, value in preview_source(kind).items():
        print(f"  {name:15s} {value}")
