"""Collect Solana ecosystem market data from CoinGecko (no API key needed)"""
import logging

logger = logging.getLogger(__name__)

import httpx
from typing import List, Dict

from collectors.http_cache import get_json

MARKETS_URL = "https://api.coingecko.com/api/v3/coins/markets"
SOLANA_COIN_URL = "https://api.coingecko.com/api/v3/coins/solana"

EMPTY_ONCHAIN_STATS = {
    "price": 0,
    "price_change_7d": 0,
    "market_cap": 0,
    "volume_24h": 0,
    "developer_score": 0,
    "community_score": 0,
}


async def fetch_solana_ecosystem_tokens() -> List[Dict]:
    """Top 50 solana-ecosystem tokens by market cap. Empty list on failure."""
    try:
        async with httpx.AsyncClient(timeout=15) as client:
            tokens = await get_json(
                client,
                MARKETS_URL,
                params={
                    "vs_currency": "usd",
                    "category": "solana-ecosystem",
                    "order": "market_cap_desc",
                    "per_page": 50,
                    "sparkline": "false",
                    "price_change_percentage": "7d",
                },
                headers={"Accept": "application/json"},
            )
        # Rate-limited responses come back as an error object
        if not isinstance(tokens, list):
            return []

        result = [
            {
                "id": t.get("id", ""),
                "name": t.get("name") or "",
                "symbol": t.get("symbol") or "",
                "current_price": t.get("current_price") or 0,
                "market_cap": t.get("market_cap") or 0,
                "price_change_7d": t.get("price_change_percentage_7d_in_currency") or 0,
            }
            for t in tokens
            if isinstance(t, dict)
        ]
        logger.info("CoinGecko: %d ecosystem tokens", len(result))
        return result
    except httpx.TimeoutException:
        logger.warning("CoinGecko markets timeout")
        return []
    except Exception as e:
        logger.warning("CoinGecko markets error: %s", e)
        return []


async def fetch_solana_onchain_stats() -> Dict:
    """SOL price, market cap and CoinGecko scores. Zeros on failure."""
    try:
        async with httpx.AsyncClient(timeout=15) as client:
            data = await get_json(client, SOLANA_COIN_URL, headers={"Accept": "application/json"})
        if not isinstance(data, dict):
            return dict(EMPTY_ONCHAIN_STATS)

        market = data.get("market_data") or {}
        return {
            "price": (market.get("current_price") or {}).get("usd") or 0,
            "price_change_7d": market.get("price_change_percentage_7d") or 0,
            "market_cap": (market.get("market_cap") or {}).get("usd") or 0,
            "volume_24h": (market.get("total_volume") or {}).get("usd") or 0,
            "developer_score": data.get("developer_score") or 0,
            "community_score": data.get("community_score") or 0,
        }
    except httpx.TimeoutException:
        logger.warning("CoinGecko SOL stats timeout")
        return dict(EMPTY_ONCHAIN_STATS)
    except Exception as e:
        logger.warning("CoinGecko SOL stats error: %s", e)
        return dict(EMPTY_ONCHAIN_STATS)
