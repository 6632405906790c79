# zkfetch/sources/live_scores.py
"""
Live scores: first fixture listed on Goal.com live scores.

The page embeds its match list as JSON; the pattern pins the two team names
and the running score of the first match in that payload.
"""

from zkfetch.sources import BROWSER_HEADERS, SourceSpec

URL = "https://www.goal.com/en-in/live-scores"

MATCH_PATTERN = (
    r'"teamA":\{[^{}]*?"name":"(?<homeTeam>[^"]+)"[^{}]*\},'
    r'\s*"teamB":\{[^{}]*?"name":"(?<awayTeam>[^"]+)"[^{}]*\}'
    r'[\s\S]*?"score":\{"teamA":(?<homeScore>\d+),"teamB":(?<awayScore>\d+)\}'
)

SOURCE = SourceSpec(
    kind="live-scores",
    title="Goal.com live scores (first fixture)",
    url=URL,
    headers=BROWSER_HEADERS,
    response_matches=(MATCH_PATTERN,),
    response_redactions=(r'"teamA":\{[\s\S]*?"score":\{[^}]*\}',),
    fields=("homeTeam", "awayTeam", "homeScore", "awayScore"),
)
