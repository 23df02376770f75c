"""Structured field extraction from free-form LLM output.

The system prompts ask the model to emit uppercase section labels
(``MVP_SCOPE``, ``HARD_TRUTH``...), a ``VALIDATION_SCORE: <n>`` token, numbered
``title | description`` step lines and, for insights, a JSON array that may be
wrapped in a markdown code fence. That output shape is an unversioned wire
format, so every regex that reads it lives here.

Extraction never raises on malformed text: a missing label is ``None``, a
missing score is ``None``, unparseable insights are an empty list.
"""

import json
import re
from dataclasses import dataclass, field
from typing import Any

import structlog

logger = structlog.get_logger(__name__)

# ---------------------------------------------------------------------------
# Label sets
# ---------------------------------------------------------------------------

ROADMAP_LABELS: tuple[str, ...] = ("MVP_SCOPE", "TECH_STACK", "BUILD_TIME", "FIRST_USER_PATH", "STEPS")
REVIEW_LABELS: tuple[str, ...] = (
    "WHAT_WORKED",
    "WHAT_DIDNT_WORK",
    "KEY_LEARNINGS",
    "NEXT_PRIORITIES",
    "HARD_TRUTH",
)

INSIGHT_REQUIRED_KEYS: tuple[str, ...] = ("type", "priority", "title", "description", "action")

# ---------------------------------------------------------------------------
# Compiled patterns
# ---------------------------------------------------------------------------

_SCORE_RE = re.compile(r"VALIDATION_SCORE:[\s*]*(\d+)", re.IGNORECASE)
_STEP_LINE_RE = re.compile(r"^\d+\.")
_STEP_PREFIX_RE = re.compile(r"^\d+\.\s*")
# A dangling list number left over from "1. MVP_SCOPE ... 2. TECH_STACK"
_TRAILING_ENUMERATOR_RE = re.compile(r"\n[\s*#]*\d+\.[\s*#]*\Z")
_LEADING_BOLD_RE = re.compile(r"^\*\*[:\s]*")
_JSON_FENCE_RE = re.compile(r"```(?:json)?\s*([\s\S]*?)```", re.IGNORECASE)


# ---------------------------------------------------------------------------
# Typed results
# ---------------------------------------------------------------------------


@dataclass
class ValidationResult:
    score: int | None
    reasoning: str


@dataclass
class RoadmapStepDraft:
    step_number: int
    title: str
    description: str | None = None


@dataclass
class RoadmapDraft:
    mvp_scope: str | None
    tech_stack: list[str]
    estimated_build_time: str | None
    first_user_path: str | None
    steps: list[RoadmapStepDraft] = field(default_factory=list)


@dataclass
class WeeklyReviewDraft:
    what_worked: str | None
    what_didnt_work: str | None
    key_learnings: str | None
    next_priorities: str | None
    hard_truth: str | None

    def is_empty(self) -> bool:
        return all(value is None for value in vars(self).values())


# ---------------------------------------------------------------------------
# Section extraction
# ---------------------------------------------------------------------------


def _section_pattern(label: str, labels: tuple[str, ...] | list[str]) -> re.Pattern:
    stops = "|".join(re.escape(other) for other in labels)
    return re.compile(
        rf"\b{re.escape(label)}\b[:\s]*([\s\S]*?)(?=\b(?:{stops})\b|\Z)",
        re.IGNORECASE,
    )


def _clean_body(body: str) -> str:
    body = body.strip()
    body = _TRAILING_ENUMERATOR_RE.sub("", body)
    body = _LEADING_BOLD_RE.sub("", body)
    return body.strip()


def extract_section(text: str, label: str, labels: tuple[str, ...] | list[str]) -> str | None:
    """Return the body following ``label`` up to the next label in ``labels``.

    Matching is case-insensitive and the label may be followed by ``:``.
    Returns None when the label is absent or its body is blank, so callers
    store NULL ("not generated") rather than an empty string.
    """
    match = _section_pattern(label, labels).search(text or "")
    if match is None:
        return None
    body = _clean_body(match.group(1))
    return body or None


def extract_sections(text: str, labels: tuple[str, ...] | list[str]) -> dict[str, str | None]:
    """Extract every label in ``labels``; keys are the lowercased labels."""
    return {label.lower(): extract_section(text, label, labels) for label in labels}


# ---------------------------------------------------------------------------
# Idea validation
# ---------------------------------------------------------------------------


def extract_validation_score(text: str) -> int | None:
    """Integer after ``VALIDATION_SCORE:``; None if the token is absent.

    Zero is a real (very low) score and is returned as 0. Values above 100
    are clamped so the stored score always lies in [0, 100].
    """
    match = _SCORE_RE.search(text or "")
    if match is None:
        return None
    return min(int(match.group(1)), 100)


def strip_validation_score(text: str) -> str:
    """Validation reasoning: the response with the score token removed."""
    return _SCORE_RE.sub("", text or "", count=1).strip()


def parse_validation(text: str) -> ValidationResult:
    return ValidationResult(
        score=extract_validation_score(text),
        reasoning=strip_validation_score(text),
    )


# ---------------------------------------------------------------------------
# MVP roadmap
# ---------------------------------------------------------------------------


def parse_tech_stack(section: str | None) -> list[str]:
    if not section:
        return []
    return [item.strip() for item in section.split(",") if item.strip()]


def parse_roadmap_steps(section: str | None) -> list[RoadmapStepDraft]:
    """Parse ``N. title | description`` lines.

    Steps are numbered 1..N by position; the digit the model wrote is not
    trusted for ordering. The description is optional.
    """
    if not section:
        return []

    steps: list[RoadmapStepDraft] = []
    for raw_line in section.split("\n"):
        line = raw_line.strip()
        if not _STEP_LINE_RE.match(line):
            continue
        title, sep, description = _STEP_PREFIX_RE.sub("", line).partition("|")
        title = title.strip().strip("*").strip()
        if not title:
            continue
        description = description.strip() if sep else ""
        steps.append(
            RoadmapStepDraft(
                step_number=len(steps) + 1,
                title=title,
                description=description or None,
            )
        )
    return steps


def parse_roadmap(text: str) -> RoadmapDraft:
    sections = extract_sections(text, ROADMAP_LABELS)
    return RoadmapDraft(
        mvp_scope=sections["mvp_scope"],
        tech_stack=parse_tech_stack(sections["tech_stack"]),
        estimated_build_time=sections["build_time"],
        first_user_path=sections["first_user_path"],
        steps=parse_roadmap_steps(sections["steps"]),
    )


# ---------------------------------------------------------------------------
# Weekly review
# ---------------------------------------------------------------------------


def parse_weekly_review(text: str) -> WeeklyReviewDraft:
    sections = extract_sections(text, REVIEW_LABELS)
    return WeeklyReviewDraft(
        what_worked=sections["what_worked"],
        what_didnt_work=sections["what_didnt_work"],
        key_learnings=sections["key_learnings"],
        next_priorities=sections["next_priorities"],
        hard_truth=sections["hard_truth"],
    )


# ---------------------------------------------------------------------------
# Proactive insights (JSON, possibly fenced)
# ---------------------------------------------------------------------------


def strip_json_fences(content: str) -> str:
    """Return the body of the first markdown code fence, or the trimmed text."""
    match = _JSON_FENCE_RE.search(content or "")
    if match:
        return match.group(1).strip()
    return (content or "").strip()


def parse_insights(content: str) -> list[dict[str, Any]]:
    """Parse the insights array; malformed output degrades to an empty list.

    Items that are not objects or lack a required key are dropped.
    """
    try:
        data = json.loads(strip_json_fences(content))
    except (json.JSONDecodeError, TypeError) as exc:
        logger.warning("insights_parse_failed", error=str(exc), content_preview=(content or "")[:200])
        return []

    if not isinstance(data, list):
        logger.warning("insights_not_a_list", content_type=type(data).__name__)
        return []

    insights: list[dict[str, Any]] = []
    for item in data:
        if not isinstance(item, dict):
            continue
        if any(not isinstance(item.get(key), str) for key in INSIGHT_REQUIRED_KEYS):
            continue
        insight = {key: item[key] for key in INSIGHT_REQUIRED_KEYS}
        if isinstance(item.get("dueInfo"), str):
            insight["dueInfo"] = item["dueInfo"]
        insights.append(insight)
    return insights
