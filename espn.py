import logging
from typing import Any, Dict, List, Optional

import httpx
from rapidfuzz import fuzz, process

from config import Config
from models.pick import GameContext

logger = logging.getLogger("espn")

LEAGUE_ENDPOINTS = {
    "NFL": "https://site.api.espn.com/apis/site/v2/sports/football/nfl/scoreboard",
    "NBA": "https://site.api.espn.com/apis/site/v2/sports/basketball/nba/scoreboard",
    "MLB": "https://site.api.espn.com/apis/site/v2/sports/baseball/mlb/scoreboard",
    "NHL": "https://site.api.espn.com/apis/site/v2/sports/hockey/nhl/scoreboard",
    "Soccer": "https://site.api.espn.com/apis/site/v2/sports/soccer/{comp}/scoreboard",
}

LEAGUE_SPORTS = {
    "NFL": "football",
    "NBA": "basketball",
    "MLB": "baseball",
    "NHL": "hockey",
    "Soccer": "soccer",
}


def scoreboard_urls(config: Config, league: str) -> List[str]:
    url = LEAGUE_ENDPOINTS.get(league)
    if not url:
        return []
    if league == "Soccer":
        return [url.format(comp=comp.lower()) for comp in config.soccer_competitions]
    return [url]


async def fetch_scoreboard(
    config: Config, league: str, client: Optional[httpx.AsyncClient] = None
) -> Dict[str, Any]:
    """Fetch scoreboard events for a league.

    Soccer merges every configured competition and skips the ones that fail;
    a single-league fetch raises httpx.HTTPError to the caller.
    """
    urls = scoreboard_urls(config, league)
    if not urls:
        return {"events": []}

    own_client = client is None
    if own_client:
        client = httpx.AsyncClient(timeout=config.http_timeout)
    events: List[Dict[str, Any]] = []
    try:
        for url in urls:
            try:
                r = await client.get(url)
                r.raise_for_status()
            except httpx.HTTPError as e:
                if len(urls) == 1:
                    raise
                logger.debug(f"Scoreboard fetch failed for {url}: {e}")
                continue
            events.extend(r.json().get("events", []))
    finally:
        if own_client:
            await client.aclose()
    return {"events": events}


async def game_for(
    config: Config, league: str, teams_str: str, client: Optional[httpx.AsyncClient] = None
) -> Optional[GameContext]:
    """Look up today's game for free text like "Warriors @ Lakers"."""
    try:
        data = await fetch_scoreboard(config, league, client)
    except httpx.HTTPError as e:
        logger.warning(f"Scoreboard unavailable for {league}: {e}")
        return None
    return find_game(teams_str, data.get("events", []), league)


def game_context_from_event(event: Dict[str, Any], league: str) -> Optional[GameContext]:
    """Build the home/away/sport context the resolver needs from one ESPN event."""
    comps = event.get("competitions", [])
    if not comps:
        return None
    competitors = comps[0].get("competitors", [])
    if len(competitors) < 2:
        return None

    home = next((c for c in competitors if c.get("homeAway") == "home"), competitors[0])
    away = next((c for c in competitors if c is not home), None)
    home_name = home.get("team", {}).get("displayName", "")
    away_name = away.get("team", {}).get("displayName", "") if away else ""
    if not home_name or not away_name:
        return None
    return GameContext(
        home_team=home_name,
        away_team=away_name,
        sport=LEAGUE_SPORTS.get(league, league.lower()),
        game_id=str(event["id"]) if event.get("id") is not None else None,
    )


def find_game(teams_str: str, events: List[Dict[str, Any]], league: str) -> Optional[GameContext]:
    """Fuzzy match free text like "Lakers vs Warriors" to one scoreboard event."""
    if not teams_str or not events:
        return None

    candidates = []
    for ev in events:
        ctx = game_context_from_event(ev, league)
        if ctx is not None:
            candidates.append(ctx)
    if not candidates:
        return None

    labels = [f"{c.away_team} @ {c.home_team}" for c in candidates]
    match = process.extractOne(teams_str, labels, scorer=fuzz.token_set_ratio)
    if match and match[1] >= 80:
        return candidates[match[2]]
    logger.debug(f"No scoreboard game matched {teams_str!r}")
    return None
