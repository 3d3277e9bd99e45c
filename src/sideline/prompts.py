"""Prompt assembly for clip analysis."""

from __future__ import annotations

from typing import List, Sequence

from sideline.generation import MediaPart, PromptPart, TextPart
from sideline.models import PlayerProfile


ANALYST_PROMPT = """
You are an expert football coordinator. Analyze this clip for a scouting report.
CRITICAL: Output ONLY valid JSON. No markdown. No conversational text.

JSON FORMAT:
{
  "title": "Concept name (e.g. Duo, Mesh, Cover 3)",
  "formation": {"offense": "Offensive formation", "defense": "Defensive shell"},
  "scouting_report": {
    "summary": "Detailed technical breakdown of the play.",
    "timeline": [{"time": "0:02", "note": "What happens at this moment"}],
    "fix": "The single most important correction.",
    "drill": "A drill that trains the correction.",
    "coaching_tip": "A short cue for the sideline.",
    "grades": {"overall": "B", "execution": "B-", "technique": "C+", "decision_making": "B"}
  },
  "players_detected": [
    {"identifier": "Jersey number or name", "role": "Position", "grade": "Letter grade",
     "observation": "What this player did", "weakness": "Short weakness tag or null"}
  ]
}
"""

_MAX_CONTEXT_NOTES = 2


def roster_context(roster: Sequence[PlayerProfile]) -> str:
    """Summarize known players so the model reuses their identifiers."""

    if not roster:
        return ""
    lines = ["Players already tracked this session (reuse these identifiers when you see them):"]
    for profile in roster:
        detail = f"- {profile.identifier}"
        if profile.role:
            detail += f" ({profile.role})"
        if profile.grade:
            detail += f", last grade {profile.grade}"
        if profile.weaknesses:
            detail += f", weaknesses: {', '.join(profile.weaknesses)}"
        if profile.notes:
            detail += f", recent notes: {'; '.join(profile.notes[-_MAX_CONTEXT_NOTES:])}"
        lines.append(detail)
    return "\n".join(lines)


def build_prompt_parts(
    clip: MediaPart,
    roster: Sequence[PlayerProfile] = (),
    *,
    message: str | None = None,
) -> List[PromptPart]:
    parts: List[PromptPart] = [clip, TextPart(ANALYST_PROMPT)]
    context = roster_context(roster)
    if context:
        parts.append(TextPart(context))
    if message and message.strip():
        parts.append(TextPart(f"Coach's note: {message.strip()}"))
    return parts
