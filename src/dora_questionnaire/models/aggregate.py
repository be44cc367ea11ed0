"""Aggregate models: per-category score summaries.

An ``Aggregate`` feeds both the chart renderer (via
``aggregation.chart_data``) and the submission payload.  A category with no
answered questions carries ``mean = None`` ("no data") rather than ``0`` or
``NaN``.
"""

from pydantic import BaseModel


class CategoryScore(BaseModel):
    """Summary of one category's answered questions."""

    category_id: int
    label: str
    # Mean score of the answered questions; None when nothing is answered
    mean: float | None = None
    answered: int = 0
    total: int = 0
    # Mean of the highest option score of each answered question
    max_score: float | None = None
    # mean / max_score * 100, when both are available and max_score > 0
    percentage: float | None = None
    # Number of non-empty observations recorded for the category
    observations: int = 0

    @property
    def has_data(self) -> bool:
        return self.mean is not None


class Aggregate(BaseModel):
    """Per-category summary in questionnaire category order."""

    locale: str
    categories: list[CategoryScore]

    def get(self, category_id: int) -> CategoryScore | None:
        """Return the score entry for ``category_id``, if present."""
        for c in self.categories:
            if c.category_id == category_id:
                return c
        return None
