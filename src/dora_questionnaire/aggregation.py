"""Aggregation adapter — maps answers into per-category summaries.

``derive_aggregate`` is a pure function of the answer/observation maps and
the questionnaire definition.  Its output is used twice:

  1. by the chart renderer, via :func:`chart_data` / :func:`chart_options`
  2. inside the :class:`SubmissionRecord` for downstream report generation

Unanswered questions are excluded from a category's mean (not counted as
zero).  A category with nothing answered gets ``mean = None``.
"""

from __future__ import annotations

from collections.abc import Mapping

from dora_questionnaire.localization import localize, message
from dora_questionnaire.models.aggregate import Aggregate, CategoryScore
from dora_questionnaire.models.question import Category, Question


def derive_aggregate(
    answers: Mapping[int, float],
    observations: Mapping[int, str],
    questions: list[Question],
    categories: list[Category],
    locale: str,
) -> Aggregate:
    """Summarise answers per category, in category declaration order."""
    by_category: dict[int, list[Question]] = {c.id: [] for c in categories}
    for q in questions:
        # Questions pointing at categories outside the given list are skipped
        if q.category_id in by_category:
            by_category[q.category_id].append(q)

    scores: list[CategoryScore] = []
    for category in categories:
        members = by_category[category.id]
        answered = [q for q in members if q.id in answers]

        mean = max_score = percentage = None
        if answered:
            mean = sum(answers[q.id] for q in answered) / len(answered)
            max_score = sum(q.max_score for q in answered) / len(answered)
            if max_score > 0:
                percentage = mean / max_score * 100

        notes = sum(1 for q in members if (observations.get(q.id) or "").strip())

        scores.append(CategoryScore(
            category_id=category.id,
            label=localize(category.name, locale),
            mean=mean,
            answered=len(answered),
            total=len(members),
            max_score=max_score,
            percentage=percentage,
            observations=notes,
        ))

    return Aggregate(locale=locale, categories=scores)


def chart_data(aggregate: Aggregate) -> dict:
    """Convert an aggregate into bar-chart data (labels + one dataset).

    No-data categories produce ``None`` bars so renderers leave a gap
    instead of drawing a zero.
    """
    return {
        "labels": [c.label for c in aggregate.categories],
        "datasets": [
            {
                "label": message(aggregate.locale, "chart_dataset"),
                "data": [c.mean for c in aggregate.categories],
            }
        ],
    }


def chart_options(locale: str, max_score: float | None = None) -> dict:
    """Localized bar-chart options.  ``max_score`` pins the value axis."""
    y_axis: dict = {"beginAtZero": True}
    if max_score is not None:
        y_axis["max"] = max_score
    return {
        "responsive": True,
        "plugins": {
            "legend": {"position": "top"},
            "title": {"display": True, "text": message(locale, "chart_title")},
        },
        "scales": {"y": y_axis},
    }


def questionnaire_max_score(questions: list[Question]) -> float | None:
    """Highest option score across all questions (None when empty)."""
    if not questions:
        return None
    return max(q.max_score for q in questions)
