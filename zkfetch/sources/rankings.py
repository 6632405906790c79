# zkfetch/sources/rankings.py
"""
Rankings: Forbes real-time billionaires.

The JSON API returns the list in rank order:

    {"personList":{"personsLists":[{"rank":1,"personName":"...","finalWorth":123.4}, ...]}}

One pattern captures up to five rank/name/worth triples. Only the first triple
is mandatory; the remaining four are optional groups, so fewer entries in the
response still produce a valid (sparse) extraction.
"""

from types import MappingProxyType

from zkfetch.sources import SourceSpec

URL = (
    "https://www.forbes.com/forbesapi/person/rtb/0/-estWorthPrev/true.json"
    "?fields=rank,personName,finalWorth"
)

MAX_ENTRIES = 5


def _entry(i):
    return (
        rf'\{{"rank":(?<rank{i}>\d+),'
        rf'"personName":"(?<name{i}>[^"]+)",'
        rf'"finalWorth":(?<worth{i}>[\d\.]+)\}}'
    )


def _pattern():
    body = _entry(1)
    for i in range(2, MAX_ENTRIES + 1):
        body += r"(?:,\s*" + _entry(i) + ")?"
    return body


RANKINGS_PATTERN = _pattern()

SOURCE = SourceSpec(
    kind="rankings",
    title="Forbes real-time billionaires (top 5)",
    url=URL,
    headers=MappingProxyType({"Accept": "application/json"}),
    response_matches=(RANKINGS_PATTERN,),
    fields=tuple(
        name
        for i in range(1, MAX_ENTRIES + 1)
        for name in (f"rank{i}", f"name{i}", f"worth{i}")
    ),
)
