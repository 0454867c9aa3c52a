"""Collect developer activity signals from GitHub"""
import logging

logger = logging.getLogger(__name__)

import asyncio
import httpx
from datetime import datetime, timedelta, timezone
from typing import List, Dict

from collectors.http_cache import get_json
from config import FORTNIGHT_DAYS, GITHUB_MAX_QUERIES, GITHUB_REQUEST_DELAY, MAX_REPOS

SEARCH_URL = "https://api.github.com/search/repositories"

SOLANA_GITHUB_QUERIES = [
    "solana",
    "anchor-lang",
    "solana-program",
    "solana defi",
    "solana nft",
    "solana blink",
    "solana ai agent",
    "solana depin",
    "solana payments",
]


def _headers(token: str) -> Dict:
    headers = {"Accept": "application/vnd.github.v3+json"}
    if token:
        headers["Authorization"] = f"token {token}"
    return headers


def _to_repo(item: Dict) -> Dict:
    return {
        "name": item.get("name", ""),
        "full_name": item["full_name"],
        "description": item.get("description") or "",
        "stars": item.get("stargazers_count") or 0,
        "stars_change": 0,
        "forks": item.get("forks_count") or 0,
        "language": item.get("language") or "Unknown",
        "url": item.get("html_url", ""),
        "topics": item.get("topics") or [],
        "updated_at": item.get("updated_at", ""),
    }


async def fetch_solana_github_activity(
    token: str = "",
    days_back: int = FORTNIGHT_DAYS,
    max_queries: int = GITHUB_MAX_QUERIES,
    delay: float = GITHUB_REQUEST_DELAY,
) -> List[Dict]:
    """Solana repos pushed in the last N days, deduplicated across keyword queries.

    Queries run one after another with a pause in between to stay under
    the search rate limit. A failed query is skipped, not fatal.
    """
    since = (datetime.now(timezone.utc) - timedelta(days=days_back)).strftime("%Y-%m-%d")
    headers = _headers(token)
    seen = set()
    repos = []

    try:
        async with httpx.AsyncClient() as client:
            for query in SOLANA_GITHUB_QUERIES[:max_queries]:
                try:
                    data = await get_json(
                        client,
                        SEARCH_URL,
                        params={"q": f"{query} pushed:>{since}", "sort": "stars", "order": "desc", "per_page": 10},
                        headers=headers,
                    )
                    for item in (data or {}).get("items") or []:
                        full_name = item.get("full_name")
                        if not full_name or full_name in seen:
                            continue
                        seen.add(full_name)
                        repos.append(_to_repo(item))
                except Exception as e:
                    logger.warning("GitHub query %r failed: %s", query, e)
                    continue

                if delay:
                    await asyncio.sleep(delay)
    except Exception as e:
        logger.warning("GitHub collector error: %s", e)

    repos.sort(key=lambda r: r["stars"], reverse=True)
    logger.info("GitHub: %d unique repos", len(repos))
    return repos[:MAX_REPOS]
