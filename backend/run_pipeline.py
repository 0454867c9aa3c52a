"""CLI runner: generate one narrative report"""
import logging

logger = logging.getLogger(__name__)

import argparse
import asyncio
import json
import sys
import os

# Add parent dir to path
sys.path.insert(0, os.path.dirname(__file__))

from config import GITHUB_TOKEN
from logging_config import setup_logging
from engine.pipeline import generate_report


async def main(output: str = ""):
    logger.info("Solana Narrative Radar - Generating Report")
    logger.info("=" * 50)
    report = await generate_report(github_token=GITHUB_TOKEN)
    logger.info("=" * 50)
    logger.info("Window: %s to %s", report["fortnight_start"], report["fortnight_end"])
    logger.info("Narratives found: %s", len(report["narratives"]))
    for n in report["narratives"]:
        logger.info("%s [%s] - %s build ideas", n["title"], n["signal_strength"], len(n["build_ideas"]))

    text = json.dumps(report, indent=2)
    if output:
        with open(output, "w") as f:
            f.write(text)
        logger.info("Report saved to %s", output)
    else:
        print(text)


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Generate a Solana narrative report")
    parser.add_argument("--output", "-o", default="", help="write JSON here instead of stdout")
    args = parser.parse_args()
    setup_logging()
    asyncio.run(main(args.output))
