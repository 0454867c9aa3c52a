"""Gather raw signals from every data source concurrently"""
import asyncio
import logging
from typing import Dict

logger = logging.getLogger(__name__)

from collectors.defillama_collector import EMPTY_TVL, fetch_solana_tvl, fetch_solana_protocols
from collectors.github_collector import fetch_solana_github_activity
from collectors.coingecko_collector import (
    EMPTY_ONCHAIN_STATS, fetch_solana_ecosystem_tokens, fetch_solana_onchain_stats,
)


async def gather_signals(github_token: str = "") -> Dict:
    """Run all collectors at once and join their results.

    Each collector returns a safe default instead of raising, so the join
    always completes with a full RawSignals dict.
    """
    tvl_data, protocols, github_repos, tokens, onchain_stats = await asyncio.gather(
        fetch_solana_tvl(),
        fetch_solana_protocols(),
        fetch_solana_github_activity(token=github_token),
        fetch_solana_ecosystem_tokens(),
        fetch_solana_onchain_stats(),
    )
    logger.info(
        "Gathered signals: %d protocols, %d repos, %d tokens",
        len(protocols), len(github_repos), len(tokens),
    )
    return {
        "tvl_data": tvl_data,
        "protocols": protocols,
        "github_repos": github_repos,
        "tokens": tokens,
        "onchain_stats": onchain_stats,
    }


def empty_signals() -> Dict:
    """RawSignals as they look when every source is down."""
    return {
        "tvl_data": dict(EMPTY_TVL),
        "protocols": [],
        "github_repos": [],
        "tokens": [],
        "onchain_stats": dict(EMPTY_ONCHAIN_STATS),
    }
