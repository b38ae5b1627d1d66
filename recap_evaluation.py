"""
Evaluation labels for aggregated recap metrics.

Two lookups exist and they intentionally disagree on the upper bound:

- evaluation_label(): hours and task counts, min <= value < max
- habit_evaluation_label(): habit scores, min <= score <= max

Changing either policy changes the text emitted for boundary values.
"""

from dataclasses import dataclass, field

from recap_markers import contains_any

DEFAULT_LABEL = 'Some'
DEFAULT_HABIT_LABEL = 'Ok healthy habits this week'

DEFAULT_HABIT_SCORING = {
    'good': 1,
    'bad': -1,
    'not_great': 0,
}

# Checked in this order; the first bucket with a matching marker scores the line.
DEFAULT_HABIT_MARKERS = {
    'good': ['good', '✅'],
    'bad': ['bad', '❌'],
    'not_great': ['not great', '⚠️'],
}

HABIT_BUCKETS = ('good', 'bad', 'not_great')

SCORING_ALIASES = {
    'goodHabit': 'good',
    'badHabit': 'bad',
    'notGreat': 'not_great',
    'notGreatHabit': 'not_great',
    'not great': 'not_great',
}


@dataclass(frozen=True)
class EvaluationRange:
    min: float
    max: float
    label: str


@dataclass
class HabitScore:
    score: float
    evaluation: str
    lines: list[str] = field(default_factory=list)


def load_ranges(raw) -> list[EvaluationRange]:
    """Build ranges from config entries ({min, max, label} dicts or 3-tuples)."""
    ranges = []
    for entry in raw or []:
        if isinstance(entry, EvaluationRange):
            ranges.append(entry)
        elif isinstance(entry, dict):
            ranges.append(EvaluationRange(float(entry['min']), float(entry['max']), str(entry['label'])))
        else:
            low, high, label = entry
            ranges.append(EvaluationRange(float(low), float(high), str(label)))
    return ranges


def evaluation_label(value: float, ranges, default: str = DEFAULT_LABEL) -> str:
    """Label for hours/task counts. Upper bound is exclusive."""
    for r in load_ranges(ranges):
        if r.min <= value < r.max:
            return r.label
    return default


def habit_evaluation_label(score: float, ranges, default: str = DEFAULT_HABIT_LABEL) -> str:
    """Label for a habit score. Both bounds are inclusive."""
    for r in load_ranges(ranges):
        if r.min <= score <= r.max:
            return r.label
    return default


def normalize_scoring(scoring: dict | None) -> dict:
    """Accept camelCase keys (goodHabit, notGreat) alongside snake_case."""
    return {SCORING_ALIASES.get(k, k): v for k, v in (scoring or {}).items()}


def _habit_bucket(line: str, markers: dict) -> str | None:
    for bucket in HABIT_BUCKETS:
        if contains_any(line, markers.get(bucket) or []):
            return bucket
    return None


def habit_score(lines, scoring: dict | None = None, ranges=None,
                markers: dict | None = None, default: str = DEFAULT_HABIT_LABEL) -> HabitScore:
    """Score habit lines and label the total.

    Each line contributes the points of the first bucket (good, bad,
    not great) whose keyword or emoji it contains; other lines count zero.
    """
    scoring = {**DEFAULT_HABIT_SCORING, **normalize_scoring(scoring)}
    markers = normalize_scoring(markers) or DEFAULT_HABIT_MARKERS
    lines = [line for line in lines if line and line.strip()]

    total = 0
    for line in lines:
        bucket = _habit_bucket(line, markers)
        if bucket:
            total += scoring.get(bucket, 0)

    return HabitScore(
        score=total,
        evaluation=habit_evaluation_label(total, ranges or [], default),
        lines=lines,
    )
