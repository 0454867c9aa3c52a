"""Collect chain TVL and protocol listings from DeFiLlama"""
import logging

logger = logging.getLogger(__name__)

import httpx
from typing import List, Dict

from collectors.http_cache import get_json
from config import MIN_PROTOCOL_TVL, MAX_PROTOCOLS

CHAINS_URL = "https://api.llama.fi/v2/chains"
PROTOCOLS_URL = "https://api.llama.fi/protocols"

# Not DeFi: exchanges, bridges and chain-level entries
EXCLUDED_CATEGORIES = {
    "CEX", "Chain", "Bridge", "Cross Chain", "Payments",
    "Centralized Exchange", "CeFi", "Infrastructure",
}
EXCLUDED_NAMES = {
    "Binance", "OKX", "Bybit", "Bitget", "Gate.io", "KuCoin",
    "Coinbase", "Kraken", "Huobi", "HTX", "MEXC", "Crypto.com",
    "Binance CEX", "OKX CEX",
}

EMPTY_TVL = {"tvl": 0, "change_24h": 0}


async def fetch_solana_tvl() -> Dict:
    """Current Solana chain TVL and its 24h change. Zeros on failure."""
    try:
        async with httpx.AsyncClient() as client:
            chains = await get_json(client, CHAINS_URL)
        if not isinstance(chains, list):
            return dict(EMPTY_TVL)

        solana = next(
            (c for c in chains
             if isinstance(c, dict) and (c.get("name") == "Solana" or c.get("gecko_id") == "solana")),
            None,
        )
        if not solana:
            logger.warning("DeFiLlama: Solana missing from chains listing")
            return dict(EMPTY_TVL)

        return {
            "tvl": solana.get("tvl") or 0,
            "change_24h": solana.get("change_1d") or 0,
        }
    except Exception as e:
        logger.warning("DeFiLlama chain TVL error: %s", e)
        return dict(EMPTY_TVL)


def _is_solana_defi(p: Dict) -> bool:
    return (
        "Solana" in (p.get("chains") or [])
        and (p.get("tvl") or 0) > MIN_PROTOCOL_TVL
        and p.get("category") not in EXCLUDED_CATEGORIES
        and p.get("name") not in EXCLUDED_NAMES
    )


async def fetch_solana_protocols() -> List[Dict]:
    """Largest Solana DeFi protocols by TVL. Empty list on failure."""
    try:
        async with httpx.AsyncClient() as client:
            protocols = await get_json(client, PROTOCOLS_URL)
        if not isinstance(protocols, list):
            return []

        solana_protocols = [p for p in protocols if isinstance(p, dict) and _is_solana_defi(p)]
        solana_protocols.sort(key=lambda p: p.get("tvl") or 0, reverse=True)

        result = [
            {
                "name": p.get("name", ""),
                "tvl": p.get("tvl") or 0,
                "tvl_change_7d": p.get("change_7d") or 0,
                "category": p.get("category") or "Unknown",
                "chain": "Solana",
            }
            for p in solana_protocols[:MAX_PROTOCOLS]
        ]
        logger.info("DeFiLlama: %d Solana protocols", len(result))
        return result
    except Exception as e:
        logger.warning("DeFiLlama protocols error: %s", e)
        return []
