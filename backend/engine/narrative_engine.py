"""Template-driven narrative detection"""
import logging
from datetime import datetime, timezone
from typing import Dict, List, Optional

from engine.narrative_templates import NARRATIVE_TEMPLATES

logger = logging.getLogger(__name__)


def score_template(template: Dict, matches: Dict) -> int:
    """Capped linear score for one template, always within 0..100."""
    scoring = template["score"]
    raw = scoring["base"] + sum(
        weight * len(matches.get(key) or [])
        for key, weight in scoring.get("weights", {}).items()
    )
    return int(max(0, min(scoring["cap"], raw, 100)))


def is_template_active(template: Dict, matches: Dict) -> bool:
    if template.get("always_on"):
        return True
    predicate = template.get("is_active")
    return bool(predicate and predicate(matches))


def build_narrative(template: Dict, raw: Dict, matches: Dict, detected_at: str) -> Dict:
    title = template["title"]
    return {
        "id": template["id"],
        "title": title,
        "summary": template["summary"],
        "signal_strength": score_template(template, matches),
        "trend": template["trend"],
        "category": template["category"],
        "signals": template["signals"](raw, matches),
        "build_ideas": [
            {**idea, "narrative": title, "key_features": list(idea["key_features"])}
            for idea in template["build_ideas"]
        ],
        "detected_at": detected_at,
        "sources": list(template["sources"]),
    }


def detect_narratives(
    raw: Dict,
    now: Optional[datetime] = None,
    templates: Optional[List[Dict]] = None,
) -> List[Dict]:
    """Evaluate every template against the gathered signals.

    Conditional templates whose predicate fails are left out entirely.
    The result is sorted by signal_strength, highest first; ties keep
    template order.
    """
    if templates is None:
        templates = NARRATIVE_TEMPLATES
    detected_at = (now or datetime.now(timezone.utc)).isoformat()

    narratives = []
    for template in templates:
        matches = template["match"](raw)
        if not is_template_active(template, matches):
            logger.debug("Narrative %s not active", template["id"])
            continue
        narratives.append(build_narrative(template, raw, matches, detected_at))

    return sorted(narratives, key=lambda n: n["signal_strength"], reverse=True)
