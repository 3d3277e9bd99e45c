"""Command-line interface for analyzing a single clip."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import mimetypes
import sys
from pathlib import Path

from sideline.config import build_candidates, default_settings, generation_timeout, get_candidates
from sideline.config_loader import RosterFile
from sideline.generation import AllCandidatesExhausted, FallbackPolicy, MediaPart, Orchestrator, configured_policy
from sideline.pipeline import ClipAnalysis, analyze_clip
from sideline.prompts import build_prompt_parts

# Clips at or under this size are sent inline; larger ones go through the file API.
_INLINE_LIMIT_BYTES = 20 * 1024 * 1024


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Generate a coaching report from a video clip")
    parser.add_argument("clip", type=Path, help="Path to the video clip")
    parser.add_argument("--roster", type=Path, default=None, help="Roster JSON to read and update")
    parser.add_argument("--message", default=None, help="Optional coach's note sent with the clip")
    parser.add_argument(
        "--candidate",
        action="append",
        default=[],
        help="Model candidate to try, in order (repeatable; defaults to configured list)",
    )
    parser.add_argument(
        "--policy",
        choices=[policy.value for policy in FallbackPolicy],
        default=None,
        help="Fallback policy for quota/billing failures",
    )
    parser.add_argument("--mime-type", default=None, help="Override the clip MIME type")
    parser.add_argument("--output", type=Path, default=None, help="Write the report JSON here")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


async def _run(args: argparse.Namespace) -> ClipAnalysis:
    from sideline.generation.gemini import GeminiBackend

    backend = GeminiBackend()
    policy = FallbackPolicy(args.policy) if args.policy else configured_policy()
    orchestrator = Orchestrator(backend, policy=policy, timeout=generation_timeout())
    candidates = build_candidates(args.candidate, settings=default_settings()) if args.candidate else get_candidates()

    mime_type = args.mime_type or mimetypes.guess_type(args.clip.name)[0] or "video/mp4"
    if args.clip.stat().st_size <= _INLINE_LIMIT_BYTES:
        clip = MediaPart(mime_type=mime_type, data=args.clip.read_bytes())
    else:
        clip = await backend.upload_media(args.clip, mime_type)

    roster_file = RosterFile.load(args.roster) if args.roster else RosterFile()
    prompt_parts = build_prompt_parts(clip, roster_file.roster, message=args.message)
    return await analyze_clip(prompt_parts, roster_file.roster, orchestrator=orchestrator, candidates=candidates)


def main(argv: list[str] | None = None) -> None:
    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if not args.clip.exists():
        raise SystemExit(f"clip not found: {args.clip}")

    try:
        analysis = asyncio.run(_run(args))
    except AllCandidatesExhausted as exc:
        raise SystemExit(f"Analysis failed: {exc.message}") from exc
    except RuntimeError as exc:
        raise SystemExit(str(exc)) from exc

    report_json = analysis.report.model_dump_json(indent=2)
    if args.output:
        args.output.write_text(report_json, encoding="utf-8")
    else:
        print(report_json)

    if not analysis.interpreted:
        print(f"warning: {analysis.extraction_error}", file=sys.stderr)
    elif args.roster:
        RosterFile(roster=analysis.roster).save(args.roster)
        print(json.dumps({"candidate": analysis.candidate_id, "players": len(analysis.roster)}), file=sys.stderr)


if __name__ == "__main__":
    main()
