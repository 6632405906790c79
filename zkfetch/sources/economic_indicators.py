# zkfetch/sources/economic_indicators.py
"""
Economic indicators: GDP by country from the Trading Economics front page.

The page lists countries in a table; each row links the country name and is
followed by a GDP cell in billions of USD. Only the first row (the largest
economy) is required; the next two are optional so a reshuffled page still
attests.
"""

from zkfetch.sources import BROWSER_HEADERS, SourceSpec

URL = "https://tradingeconomics.com/"

MAX_ROWS = 3


def _row(i):
    return (
        r'<td[^>]*>\s*<a[^>]*href="/[a-z-]+/gdp"[^>]*>\s*'
        rf"(?<country{i}>[A-Za-z .'-]+?)\s*</a>\s*</td>\s*"
        rf"<td[^>]*>\s*(?<gdp{i}>[\d,\.]+)\s*</td>"
    )


def _pattern():
    body = _row(1)
    for i in range(2, MAX_ROWS + 1):
        body += r"(?:[\s\S]*?" + _row(i) + ")?"
    return body


GDP_PATTERN = _pattern()
ROW_REDACTION = r'<td[^>]*>\s*<a[^>]*href="/[a-z-]+/gdp"[\s\S]*?</td>\s*<td[^>]*>[^<]*</td>'

SOURCE = SourceSpec(
    kind="economic-indicators",
    title="Trading Economics GDP by country",
    url=URL,
    headers=BROWSER_HEADERS,
    response_matches=(GDP_PATTERN,),
    response_redactions=(ROW_REDACTION,),
    fields=tuple(
        name
        for i in range(1, MAX_ROWS + 1)
        for name in (f"country{i}", f"gdp{i}")
    ),
)
