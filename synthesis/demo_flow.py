"""
demo_flow.py -- End-to-end demo of one generation request.

Runs the complete synthesis flow for a client profile:
1. Load the profile JSON (and session notes for clinical synthesis)
2. Build the generation request from the command line
3. Call Claude, or read saved provider text with --response-file
4. Extract sections, merge fallbacks, assemble the record
5. Print the record as camelCase JSON

Usage:
    python -m synthesis.demo_flow --profile profile.json --kind homework --days 7
    python -m synthesis.demo_flow --profile profile.json --kind narrative --response-file raw.txt
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import os
import sys
import time
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv
from pydantic import ValidationError

from synthesis.adapters.profile_json import load_profile, load_session_notes
from synthesis.client import AnthropicClient
from synthesis.config import load_settings
from synthesis.errors import GenerationError
from synthesis.models import GENERATION_KINDS, OutputRecord, ProfileContext
from synthesis.pipeline import parse_kind, synthesize, synthesize_from_text

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger("therasynth.demo")


def build_kind_payload(args: argparse.Namespace) -> dict[str, Any]:
    """Translate command-line options into a GenerationKind dict."""
    payload: dict[str, Any] = {"kind": args.kind}
    if args.kind == "narrative":
        payload["subtype"] = args.subtype
        if args.challenge:
            payload["specific_challenge"] = args.challenge
    elif args.kind == "role_play":
        payload["scenario_type"] = args.scenario
        payload["difficulty"] = args.difficulty
    elif args.kind == "clinical_synthesis":
        if not args.session_notes:
            raise ValueError("--session-notes is required for clinical_synthesis")
        payload["session_notes"] = load_session_notes(args.session_notes)
    elif args.kind == "homework":
        payload["homework_type"] = args.homework_type
        payload["duration_days"] = args.days
        payload["difficulty"] = args.difficulty
    elif args.kind == "content_asset":
        payload["asset_type"] = args.asset_type
        payload["topic"] = args.topic
        payload["word_count_target"] = args.word_count
        payload["tone"] = args.tone
    return payload


async def run_flow(
    profile: ProfileContext,
    kind: Any,
    response_file: Optional[str] = None,
) -> OutputRecord:
    """Generate one record, from Claude or from saved provider text."""
    start_time = time.monotonic()

    logger.info("=" * 60)
    logger.info("Generating %s for profile '%s'", kind.kind, profile.id or "anonymous")
    logger.info("=" * 60)

    if response_file:
        raw_text = Path(response_file).read_text(encoding="utf-8")
        logger.info("Using saved provider text from %s (%d chars)", response_file, len(raw_text))
        record = synthesize_from_text(kind, raw_text, profile)
    else:
        settings = load_settings()
        client = AnthropicClient(settings=settings)
        try:
            record = await synthesize(client, profile, kind, settings=settings)
        finally:
            await client.aclose()

    logger.info("Record %s assembled in %.2fs", record.id, time.monotonic() - start_time)
    return record


def main() -> None:
    parser = argparse.ArgumentParser(description="TheraSynth -- Demo Flow")
    parser.add_argument("--profile", type=str, required=True, help="Path to client profile JSON")
    parser.add_argument("--kind", type=str, required=True, choices=sorted(GENERATION_KINDS))
    parser.add_argument("--response-file", type=str, default=None, help="Saved provider text; skips the API call")
    parser.add_argument("--subtype", type=str, default="story", help="Narrative subtype")
    parser.add_argument("--challenge", type=str, default=None, help="Narrative focus challenge")
    parser.add_argument("--scenario", type=str, default="boundary setting", help="Role-play scenario type")
    parser.add_argument("--difficulty", type=str, default="intermediate")
    parser.add_argument("--session-notes", type=str, default=None, help="Session notes JSON for clinical synthesis")
    parser.add_argument("--homework-type", type=str, default="mindfulness")
    parser.add_argument("--days", type=int, default=7, help="Homework plan length in days")
    parser.add_argument("--asset-type", type=str, default="article")
    parser.add_argument("--topic", type=str, default="managing anxiety")
    parser.add_argument("--word-count", type=int, default=500)
    parser.add_argument("--tone", type=str, default="compassionate")
    args = parser.parse_args()

    env_path = Path(__file__).resolve().parent.parent / ".env"
    if env_path.exists():
        load_dotenv(env_path)
        logger.info("Loaded environment from %s", env_path)
    if not args.response_file and not os.environ.get("ANTHROPIC_API_KEY"):
        logger.error("ANTHROPIC_API_KEY not set. Set it in .env or use --response-file.")
        sys.exit(1)

    try:
        profile = load_profile(args.profile)
        kind = parse_kind(build_kind_payload(args))
    except (OSError, ValueError, ValidationError) as exc:
        logger.error("Invalid input: %s", exc)
        sys.exit(2)

    try:
        record = asyncio.run(run_flow(profile, kind, args.response_file))
    except GenerationError as exc:
        logger.error("Generation failed for %s: %s", exc.kind, exc.message)
        sys.exit(1)

    print(json.dumps(record.model_dump(mode="json", by_alias=True), indent=2, ensure_ascii=False))


if __name__ == "__main__":
    main()
