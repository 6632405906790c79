# zkfetch/sources/weather.py
"""
Weather: current conditions for New York City from AccuWeather.

Two independent patterns: the temperature block and the short condition
phrase that follows it on the forecast page.
"""

from zkfetch.sources import BROWSER_HEADERS, SourceSpec

URL = "https://www.accuweather.com/en/us/new-york/10021/weather-forecast/349727"

TEMPERATURE_PATTERN = (
    r'<div class="temp">\s*(?<temperature>-?\d+)&#xB0;'
    r'\s*<span class="after-temp">\s*(?<unit>[CF])\s*</span>'
)
CONDITION_PATTERN = r'<span class="phrase">\s*(?<condition>[^<]+?)\s*</span>'

SOURCE = SourceSpec(
    kind="weather",
    title="AccuWeather New York current conditions",
    url=URL,
    headers=BROWSER_HEADERS,
    response_matches=(TEMPERATURE_PATTERN, CONDITION_PATTERN),
    response_redactions=(
        r'<div class="temp">[\s\S]*?</span>',
        r'<span class="phrase">[^<]*</span>',
    ),
    fields=("temperature", "unit", "condition"),
)
