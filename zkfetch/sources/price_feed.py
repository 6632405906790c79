# zkfetch/sources/price_feed.py
"""
Price feed: Stellar (XLM) spot price in USD from CoinGecko.

Response body is tiny and fully public, so the whole document is matched and
nothing is redacted:

    {"stellar":{"usd":0.1234}}
"""

from types import MappingProxyType

from zkfetch.sources import SourceSpec

URL = "https://api.coingecko.com/api/v3/simple/price?ids=stellar&vs_currencies=usd"

PRICE_PATTERN = r'\{"stellar":\{"usd":(?<price>[\d\.]+)\}\}'

SOURCE = SourceSpec(
    kind="price-feed",
    title="CoinGecko XLM/USD spot price",
    url=URL,
    headers=MappingProxyType({"Accept": "application/json"}),
    response_matches=(PRICE_PATTERN,),
    fields=("price",),
)
