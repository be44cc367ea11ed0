"""Question, category and questionnaire models.

These mirror the questionnaire YAML under ``questionnaires/``:

  - Option: a selectable answer with a localized label and a numeric score
  - Question: scored question belonging to one category (by id reference)
  - Category: grouping used for per-category score summaries
  - Questionnaire: the ordered question sequence plus its categories

All text fields are ``{locale: text}`` maps and must carry every supported
locale.  The models are frozen: a questionnaire is immutable for the
lifetime of the sessions that use it.
"""

from __future__ import annotations

from typing import Annotated

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, model_validator

from dora_questionnaire.constants import SUPPORTED_LOCALES


def _check_locales(value: dict[str, str]) -> dict[str, str]:
    missing = [loc for loc in SUPPORTED_LOCALES if not value.get(loc)]
    if missing:
        raise ValueError(f"missing text for locale(s): {', '.join(missing)}")
    return value


# A {locale: text} map carrying every supported locale.
LocalizedText = Annotated[dict[str, str], AfterValidator(_check_locales)]


class Option(BaseModel):
    """A selectable option with a localized label and its score."""

    model_config = ConfigDict(frozen=True)

    text: LocalizedText
    value: float


class Question(BaseModel):
    """A scored question.  ``id`` is unique and stable across sessions."""

    model_config = ConfigDict(frozen=True)

    id: int
    category_id: int
    text: LocalizedText
    options: list[Option] = Field(min_length=1)

    @property
    def max_score(self) -> float:
        """Highest score any option of this question can yield."""
        return max(o.value for o in self.options)


class Category(BaseModel):
    """Grouping of questions for aggregate scoring."""

    model_config = ConfigDict(frozen=True)

    id: int
    name: LocalizedText


class Questionnaire(BaseModel):
    """An ordered question sequence and the categories it references."""

    model_config = ConfigDict(frozen=True)

    title: LocalizedText = Field(
        default_factory=lambda: {"es": "Cuestionario DORA", "pt": "Questionário DORA"}
    )
    questions: list[Question] = Field(default_factory=list)
    categories: list[Category] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_references(self) -> "Questionnaire":
        qids = [q.id for q in self.questions]
        dupes = sorted({i for i in qids if qids.count(i) > 1})
        if dupes:
            raise ValueError(f"duplicate question id(s): {dupes}")

        cids = [c.id for c in self.categories]
        dupes = sorted({i for i in cids if cids.count(i) > 1})
        if dupes:
            raise ValueError(f"duplicate category id(s): {dupes}")

        known = set(cids)
        for q in self.questions:
            if q.category_id not in known:
                raise ValueError(
                    f"question {q.id} references unknown category {q.category_id}"
                )
        return self

    @property
    def question_ids(self) -> set[int]:
        return {q.id for q in self.questions}

    def get_question(self, question_id: int) -> Question:
        """Look up a question by id.

        Raises:
            KeyError: if no question has that id.
        """
        for q in self.questions:
            if q.id == question_id:
                return q
        raise KeyError(f"Unknown question id: {question_id}")

    def get_category(self, category_id: int) -> Category:
        """Look up a category by id.

        Raises:
            KeyError: if no category has that id.
        """
        for c in self.categories:
            if c.id == category_id:
                return c
        raise KeyError(f"Unknown category id: {category_id}")
