"""Report pipeline: gather → detect narratives → assemble report"""
import logging
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional

logger = logging.getLogger(__name__)

from config import FORTNIGHT_DAYS, TOP_N_METRICS
from engine.signals import gather_signals
from engine.narrative_engine import detect_narratives

METHODOLOGY_TEMPLATE = """Solana Narrative Radar combines several public data sources to surface emerging narratives in the Solana ecosystem.

**Data Sources:**
1. **DeFi Llama**: chain TVL plus the {protocol_count} largest Solana DeFi protocols and their weekly TVL change
2. **GitHub API**: developer activity across {repo_count} repositories pushed in the last {days} days that match Solana keywords
3. **CoinGecko**: market data for {token_count} Solana ecosystem tokens
4. **SOL market stats**: price, volume and CoinGecko developer/community scores

**Signal Detection:**
- Repositories are classified into narratives by topic tags and description keywords
- Protocols in DeFi categories growing more than 5% a week count as DeFi growth signals
- Token names and symbols are matched against narrative themes

**Narrative Ranking:**
- Each narrative has a fixed base score raised per matching signal, capped below 100
- {narrative_count} narratives detected this period, sorted by signal strength
- Trend labels (emerging, accelerating, peaking, declining) are assigned per narrative
- Build ideas are curated suggestions attached to each narrative

**Refresh Cycle:** Fortnightly window; upstream data is cached for one hour to respect API limits."""


def build_methodology(raw: Dict, narratives: List[Dict]) -> str:
    return METHODOLOGY_TEMPLATE.format(
        protocol_count=len(raw.get("protocols") or []),
        repo_count=len(raw.get("github_repos") or []),
        token_count=len(raw.get("tokens") or []),
        narrative_count=len(narratives),
        days=FORTNIGHT_DAYS,
    )


def build_metrics(raw: Dict) -> Dict:
    tvl_data = raw.get("tvl_data") or {}
    return {
        "total_tvl": tvl_data.get("tvl") or 0,
        "tvl_change_24h": tvl_data.get("change_24h") or 0,
        # No source feeds these yet
        "active_addresses": 0,
        "daily_transactions": 0,
        "new_programs": 0,
        "top_github_repos": (raw.get("github_repos") or [])[:TOP_N_METRICS],
        "top_protocols": (raw.get("protocols") or [])[:TOP_N_METRICS],
        "sol_market": raw.get("onchain_stats") or {},
    }


def build_report(raw: Dict, now: Optional[datetime] = None) -> Dict:
    """Assemble an AnalysisReport from already gathered signals."""
    now = now or datetime.now(timezone.utc)
    narratives = detect_narratives(raw, now=now)
    return {
        "generated_at": now.isoformat(),
        "fortnight_start": (now - timedelta(days=FORTNIGHT_DAYS)).strftime("%Y-%m-%d"),
        "fortnight_end": now.strftime("%Y-%m-%d"),
        "narratives": narratives,
        "metrics": build_metrics(raw),
        "methodology": build_methodology(raw, narratives),
    }


async def generate_report(github_token: str = "", now: Optional[datetime] = None) -> Dict:
    """Gather live signals and build a fresh report. Nothing is persisted."""
    raw = await gather_signals(github_token=github_token)
    report = build_report(raw, now=now)
    logger.info(
        "Report generated: %d narratives (%s)",
        len(report["narratives"]),
        ", ".join(f"{n['id']}={n['signal_strength']}" for n in report["narratives"]),
    )
    return report
