"""Narrative templates: what each narrative matches, how it scores, what it says.

Each template is plain data. Adding or dropping a narrative means editing
NARRATIVE_TEMPLATES, not the classifier. Templates with ``always_on`` set
are emitted on every report; the rest only when ``is_active`` passes.

Score = min(cap, base + sum(weight * len(matches[key]))), clamped to 0..100.
"""
from typing import Dict, Iterable, List, Optional

TRENDS = ("emerging", "accelerating", "peaking", "declining")
CATEGORIES = ("defi", "infrastructure", "consumer", "depin", "ai", "payments", "gaming", "social")
SIGNAL_TYPES = ("onchain", "github", "social", "market")
DIFFICULTIES = ("beginner", "intermediate", "advanced")
POTENTIALS = ("high", "medium", "low")

DEFI_CATEGORIES = {"Dexes", "Lending", "Yield", "Liquid Staking", "CDP", "Derivatives"}
DEFI_GROWTH_THRESHOLD = 5  # percent weekly TVL change

MAX_EXAMPLES = 3


# ── Matchers ──

def _lower(value) -> str:
    return str(value or "").lower()


def match_repos(
    repos: Iterable[Dict],
    topics: Iterable[str] = (),
    description: Iterable[str] = (),
    name: Iterable[str] = (),
) -> List[Dict]:
    """Repos with a listed topic tag, or a keyword in description or name."""
    topics = set(topics)
    matched = []
    for r in repos or []:
        repo_topics = {_lower(t) for t in (r.get("topics") or [])}
        desc = _lower(r.get("description"))
        repo_name = _lower(r.get("name"))
        if (
            repo_topics & topics
            or any(kw in desc for kw in description)
            or any(kw in repo_name for kw in name)
        ):
            matched.append(r)
    return matched


def match_tokens(tokens: Iterable[Dict], name: Iterable[str] = (), symbol: Iterable[str] = ()) -> List[Dict]:
    """Tokens whose name or symbol contains one of the substrings."""
    matched = []
    for t in tokens or []:
        token_name = _lower(t.get("name"))
        token_symbol = _lower(t.get("symbol"))
        if any(kw in token_name for kw in name) or any(kw in token_symbol for kw in symbol):
            matched.append(t)
    return matched


def growing_defi_protocols(protocols: Iterable[Dict]) -> List[Dict]:
    return [
        p for p in protocols or []
        if p.get("category") in DEFI_CATEGORIES and (p.get("tvl_change_7d") or 0) > DEFI_GROWTH_THRESHOLD
    ]


# ── Signal helpers ──

def signal(
    type: str,
    description: str,
    metric: Optional[str] = None,
    value: Optional[str] = None,
    change: Optional[str] = None,
    url: Optional[str] = None,
) -> Dict:
    s = {"type": type, "description": description}
    for key, val in (("metric", metric), ("value", value), ("change", change), ("url", url)):
        if val is not None:
            s[key] = val
    return s


def _repo_signal(repo: Dict) -> Dict:
    desc = (repo.get("description") or "")[:100]
    return signal(
        "github",
        f"{repo.get('full_name', '')}: {desc}",
        metric="stars",
        value=str(repo.get("stars") or 0),
        url=repo.get("url") or None,
    )


def _billions(usd) -> str:
    return f"${(usd or 0) / 1e9:.2f}B"


def _millions(usd) -> str:
    return f"${(usd or 0) / 1e6:.1f}M"


# ── Per-narrative matches and signals ──

def _ai_matches(raw: Dict) -> Dict:
    return {
        "repos": match_repos(
            raw.get("github_repos"),
            topics=("ai", "agent", "llm", "gpt", "autonomous", "ai-agent"),
            description=("ai agent", "autonomous"),
            name=("agent",),
        ),
        "tokens": match_tokens(raw.get("tokens"), name=("ai",), symbol=("ai",)),
    }


def _ai_signals(raw: Dict, matches: Dict) -> List[Dict]:
    repos, tokens = matches["repos"], matches["tokens"]
    signals = [signal("github", f"{len(repos)} active AI+Solana repos found in last 14 days", "repos", str(len(repos)))]
    signals.extend(_repo_signal(r) for r in repos[:MAX_EXAMPLES])
    if tokens:
        signals.append(signal("market", f"{len(tokens)} AI-themed Solana tokens in top 50", "tokens", str(len(tokens))))
    return signals


def _defi_matches(raw: Dict) -> Dict:
    return {"protocols": growing_defi_protocols(raw.get("protocols"))}


def _defi_signals(raw: Dict, matches: Dict) -> List[Dict]:
    growing = matches["protocols"]
    tvl_data = raw.get("tvl_data") or {}
    total = _billions(tvl_data.get("tvl"))
    signals = [
        signal("onchain", f"{len(growing)} DeFi protocols with >5% weekly TVL growth", "protocols", str(len(growing))),
    ]
    for p in growing[:MAX_EXAMPLES]:
        change = p.get("tvl_change_7d") or 0
        signals.append(signal(
            "onchain",
            f"{p.get('name', '')} ({p.get('category', '')}): TVL {_millions(p.get('tvl'))}, +{change:.1f}% 7d",
            metric="TVL",
            value=_millions(p.get("tvl")),
            change=f"+{change:.1f}%",
        ))
    signals.append(signal(
        "onchain",
        f"Total Solana TVL: {total}",
        metric="TVL",
        value=total,
        change=f"{tvl_data.get('change_24h') or 0:.1f}%",
    ))
    return signals


def _depin_matches(raw: Dict) -> Dict:
    return {
        "repos": match_repos(
            raw.get("github_repos"),
            topics=("depin", "iot", "hardware", "sensor", "wireless"),
            description=("depin", "physical infrastructure"),
        ),
        "tokens": match_tokens(raw.get("tokens"), name=("depin", "helium", "render", "hivemapper")),
    }


def _depin_signals(raw: Dict, matches: Dict) -> List[Dict]:
    repos, tokens = matches["repos"], matches["tokens"]
    return [
        signal("github", f"{len(repos)} DePIN-related repos active recently", "repos", str(len(repos))),
        *(_repo_signal(r) for r in repos[:MAX_EXAMPLES]),
        signal("market", "DePIN tokens showing resilience in Solana ecosystem", "presence", str(len(tokens))),
        signal("social", "Increasing discourse around DePIN use cases beyond connectivity", "trend", "growing"),
    ]


def _payments_matches(raw: Dict) -> Dict:
    return {
        "repos": match_repos(
            raw.get("github_repos"),
            topics=("payments", "stablecoin", "pay", "commerce", "checkout"),
            description=("payment", "stablecoin"),
        ),
    }


def _payments_signals(raw: Dict, matches: Dict) -> List[Dict]:
    repos = matches["repos"]
    return [
        signal("github", f"{len(repos)} payment-related repos active", "repos", str(len(repos))),
        *(_repo_signal(r) for r in repos[:MAX_EXAMPLES]),
        signal("onchain", "PYUSD supply on Solana growing steadily", "stablecoin", "growing"),
        signal("social", "Solana Pay and Blinks gaining merchant adoption", "adoption", "increasing"),
    ]


def _consumer_matches(raw: Dict) -> Dict:
    return {
        "repos": match_repos(
            raw.get("github_repos"),
            topics=("social", "consumer", "mobile", "gaming", "nft"),
            description=("social", "consumer"),
        ),
    }


def _consumer_signals(raw: Dict, matches: Dict) -> List[Dict]:
    repos = matches["repos"]
    return [
        signal("github", f"{len(repos)} consumer/social repos found", "repos", str(len(repos))),
        *(_repo_signal(r) for r in repos[:MAX_EXAMPLES]),
        signal("social", "Growing discussion around consumer crypto UX on Solana", "discourse", "increasing"),
        signal("onchain", "Compressed NFT minting costs enabling mass adoption use cases", "cost", "<$0.001/NFT"),
    ]


def _idea(title, description, difficulty, potential, key_features) -> Dict:
    return {
        "title": title,
        "description": description,
        "difficulty": difficulty,
        "potential": potential,
        "key_features": key_features,
    }


# ── Templates, in evaluation order ──

NARRATIVE_TEMPLATES: List[Dict] = [
    {
        "id": "ai-agents-solana",
        "title": "AI Agents on Solana",
        "summary": (
            "Autonomous AI agents are increasingly built on Solana, using its throughput and low fees "
            "for agent-to-agent transactions, DeFi automation and on-chain decision making. Developer "
            "activity in AI+Solana repos has surged, with new frameworks letting agents call Solana "
            "programs directly."
        ),
        "trend": "accelerating",
        "category": "ai",
        "sources": ["GitHub API", "CoinGecko"],
        "always_on": False,
        "match": _ai_matches,
        "is_active": lambda m: len(m["repos"]) >= 2 or len(m["tokens"]) >= 1,
        "score": {"base": 60, "cap": 95, "weights": {"repos": 5, "tokens": 3}},
        "signals": _ai_signals,
        "build_ideas": [
            _idea(
                "AI Agent Wallet SDK",
                "A TypeScript SDK that gives AI agents scoped access to Solana wallets. Agents can swap, "
                "manage positions and use DeFi protocols inside risk limits set by the wallet owner.",
                "advanced", "high",
                ["Scoped transaction permissions", "Risk parameter guardrails", "Multi-agent coordination", "Audit trail logging"],
            ),
            _idea(
                "Agent-to-Agent Marketplace",
                "A marketplace where AI agents discover, negotiate with and pay other agents for services "
                "in SPL tokens, with reputation scores kept on-chain.",
                "advanced", "high",
                ["On-chain reputation system", "Escrow-based payments", "Service discovery protocol", "Agent authentication via NFTs"],
            ),
            _idea(
                "AI Portfolio Rebalancer",
                "An agent that watches your Solana DeFi positions, spots yield opportunities and rebalances "
                "to your risk profile, routing through Jupiter.",
                "intermediate", "medium",
                ["Cross-protocol monitoring", "Jupiter DEX integration", "Risk-adjusted rebalancing", "Telegram alerts"],
            ),
        ],
    },
    {
        "id": "defi-renaissance",
        "title": "Solana DeFi Renaissance",
        "summary": (
            "Several Solana DeFi protocols are posting 5%+ weekly TVL growth. New yield strategies, "
            "better lending markets and novel DEX designs are pulling in capital, and the composable "
            "DeFi stack is enabling more sophisticated financial products."
        ),
        "trend": "accelerating",
        "category": "defi",
        "sources": ["DeFi Llama", "Protocol Data"],
        "always_on": False,
        "match": _defi_matches,
        "is_active": lambda m: len(m["protocols"]) >= 3,
        "score": {"base": 50, "cap": 90, "weights": {"protocols": 5}},
        "signals": _defi_signals,
        "build_ideas": [
            _idea(
                "Intent-Based Order Flow Aggregator",
                "Users state the outcome they want (swap 100 SOL for max USDC within 30 seconds) and "
                "solvers compete to fill it, using Solana's speed for real-time solver auctions.",
                "advanced", "high",
                ["Solver network with staking", "MEV-resistant execution", "Cross-DEX routing", "Partial fill support"],
            ),
            _idea(
                "Yield Strategy Vault Platform",
                "A no-code builder for composing and sharing automated yield strategies from building "
                "blocks (lend on Kamino, stake LP, add leverage); authors earn fees when others copy them.",
                "intermediate", "high",
                ["Visual strategy builder", "Backtesting engine", "Auto-compounding", "Strategy marketplace with fees"],
            ),
            _idea(
                "Real-Time DeFi Risk Dashboard",
                "Live risk metrics across Solana DeFi: liquidation cascades, oracle deviations, protocol "
                "health and concentration risk for institutional participants.",
                "intermediate", "medium",
                ["Cross-protocol risk scoring", "Liquidation alerts", "Oracle health monitoring", "Portfolio stress testing"],
            ),
        ],
    },
    {
        "id": "depin-expansion",
        "title": "DePIN Expansion & Maturation",
        "summary": (
            "Decentralized Physical Infrastructure Networks on Solana are growing past Helium and "
            "Render into compute, energy, mapping and environmental data. The story has moved from "
            "speculation to usage, with real data transfers and GPU workloads behind it."
        ),
        "trend": "emerging",
        "category": "depin",
        "sources": ["GitHub API", "CoinGecko", "Community Analysis"],
        "always_on": True,
        "match": _depin_matches,
        "is_active": None,
        "score": {"base": 55, "cap": 85, "weights": {"repos": 4, "tokens": 5}},
        "signals": _depin_signals,
        "build_ideas": [
            _idea(
                "DePIN Node Dashboard & Earnings Tracker",
                "One dashboard for node operators to track earnings, uptime and performance across "
                "Helium, Render, Hivemapper and others, with live rewards from their Solana wallets.",
                "intermediate", "high",
                ["Multi-network aggregation", "Earnings analytics", "Uptime monitoring", "Tax reporting exports"],
            ),
            _idea(
                "DePIN Network Launch Framework",
                "An open-source kit for launching DePIN networks on Solana: token distribution, "
                "proof-of-coverage checks, node registration and reward payout programs.",
                "advanced", "high",
                ["Anchor program templates", "Token economics toolkit", "Node registration system", "Proof verification modules"],
            ),
            _idea(
                "Energy Data Marketplace",
                "Buy and sell renewable energy data (solar output, grid demand, carbon offsets) gathered "
                "by DePIN sensors, with verified on-chain provenance.",
                "advanced", "medium",
                ["Sensor data verification", "Data NFTs for provenance", "Subscription pricing", "API access for enterprises"],
            ),
        ],
    },
    {
        "id": "solana-payments-mainstream",
        "title": "Solana Payments Going Mainstream",
        "summary": (
            "Sub-second finality and near-zero fees are making Solana a default chain for crypto "
            "payments. PYUSD on Solana, Shopify integrations and Solana Pay merchants are driving real "
            "volume, and Actions/Blinks turn a payment into a link click."
        ),
        "trend": "accelerating",
        "category": "payments",
        "sources": ["GitHub API", "On-chain Data", "News Analysis"],
        "always_on": True,
        "match": _payments_matches,
        "is_active": None,
        "score": {"base": 78, "cap": 78, "weights": {}},
        "signals": _payments_signals,
        "build_ideas": [
            _idea(
                "Blinks-Powered Storefront Builder",
                "Storefronts with Blinks checkout: customers pay by clicking a link, in USDC, PYUSD or "
                "SOL, and merchants off-ramp to fiat automatically.",
                "intermediate", "high",
                ["No-code store builder", "Blinks checkout flow", "Multi-token support", "Fiat off-ramp integration"],
            ),
            _idea(
                "Recurring Payment Protocol",
                "A Solana program for subscriptions via delegated token approvals, with a merchant SDK "
                "and a subscriber management dashboard.",
                "advanced", "high",
                ["Delegated token approval", "Flexible billing cycles", "Failed payment retry", "Merchant analytics"],
            ),
            _idea(
                "Cross-Border Remittance App",
                "A mobile-first USDC remittance app for corridors like US to Latin America, with instant "
                "settlement and local-currency off-ramps.",
                "intermediate", "high",
                ["Sub-second transfers", "Local currency off-ramps", "KYC/AML compliance", "WhatsApp integration"],
            ),
        ],
    },
    {
        "id": "consumer-crypto-solana",
        "title": "Consumer Crypto Apps on Solana",
        "summary": (
            "Consumer apps on Solana are moving past DeFi into social, gaming and lifestyle. "
            "Compressed NFTs make onboarding millions of users affordable and mobile-first "
            "distribution (Saga, dApp Store) cuts friction: apps that happen to use crypto."
        ),
        "trend": "emerging",
        "category": "consumer",
        "sources": ["GitHub API", "Community Analysis", "dApp Store Data"],
        "always_on": True,
        "match": _consumer_matches,
        "is_active": None,
        "score": {"base": 72, "cap": 72, "weights": {}},
        "signals": _consumer_signals,
        "build_ideas": [
            _idea(
                "Token-Gated Community Platform",
                "A Discord alternative gated by NFTs or tokens, with on-chain governance, tipping, "
                "reputation and DeFi-backed community treasuries.",
                "intermediate", "medium",
                ["Token-gated access", "On-chain reputation", "Built-in tipping", "Community treasury management"],
            ),
            _idea(
                "Loyalty Rewards Protocol",
                "White-label loyalty points as compressed NFTs, earned across merchants and tradeable "
                "or redeemable on a marketplace.",
                "intermediate", "high",
                ["Compressed NFT stamps", "Cross-merchant rewards", "Points marketplace", "Brand analytics dashboard"],
            ),
            _idea(
                "On-Chain Achievement System for Games",
                "Verifiable achievements that carry across Solana games as a portable player identity, "
                "integrated through an SDK.",
                "intermediate", "medium",
                ["Cross-game achievements", "Portable player identity", "Achievement marketplace", "Developer SDK"],
            ),
        ],
    },
]
