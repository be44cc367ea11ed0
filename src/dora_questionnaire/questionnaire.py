"""QuestionnaireStore — loads a questionnaire YAML file into typed models.

This is the question/category source for every session.  The store is loaded
once at startup; the resulting :class:`Questionnaire` is immutable.

Usage::

    store = QuestionnaireStore()        # defaults to questionnaires/dora.yaml
    store.load()

    q = store.questionnaire.get_question(3)
    store.localized_questions("pt")
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import ValidationError

from dora_questionnaire.localization import localize
from dora_questionnaire.models.question import Questionnaire

logger = logging.getLogger(__name__)

DEFAULT_QUESTIONNAIRE = "dora.yaml"


# ---------------------------------------------------------------------------
# Utility helpers
# ---------------------------------------------------------------------------

def find_repo_root(start: Optional[Path] = None) -> Path:
    """Walk upwards from *start* to find the repo root (dir with pyproject.toml or .git).

    Falls back to cwd if no marker is found.
    """
    p = (start or Path(__file__).resolve()).parent
    for parent in [p, *p.parents]:
        if (parent / "pyproject.toml").exists() or (parent / ".git").exists():
            return parent
    return Path.cwd()


def load_yaml(path: Path | str) -> Any:
    """Load a single YAML file and return the parsed contents."""
    if isinstance(path, str):
        path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Missing YAML file: {path}")
    with path.open("r", encoding="utf-8") as f:
        return yaml.safe_load(f)


# ---------------------------------------------------------------------------
# QuestionnaireStore
# ---------------------------------------------------------------------------

class QuestionnaireStore:
    """Loads one questionnaire YAML and provides localized lookups.

    Attributes populated after :meth:`load`:

        questionnaire — the validated :class:`Questionnaire`
    """

    def __init__(self, path: str | Path | None = None) -> None:
        if path is None:
            path = find_repo_root() / "questionnaires" / DEFAULT_QUESTIONNAIRE
        self._path = Path(path)
        self.questionnaire: Questionnaire = Questionnaire()

    @property
    def path(self) -> Path:
        return self._path

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def load(self) -> Questionnaire:
        """Parse the YAML file into a :class:`Questionnaire`.

        Raises:
            FileNotFoundError: if the file does not exist.
            ValueError: if the content is malformed (duplicate ids, unknown
                category references, missing locale text, ...).
        """
        raw = load_yaml(self._path)
        if not isinstance(raw, dict):
            raise ValueError(f"Questionnaire file must contain a mapping: {self._path}")
        try:
            self.questionnaire = Questionnaire(**raw)
        except ValidationError as exc:
            # ValidationError is a ValueError subclass; re-raise with the path
            raise ValueError(f"Invalid questionnaire {self._path}: {exc}") from exc

        logger.info(
            "QuestionnaireStore loaded %s: %d questions, %d categories",
            self._path.name,
            len(self.questionnaire.questions),
            len(self.questionnaire.categories),
        )
        return self.questionnaire

    # ------------------------------------------------------------------
    # Lookup helpers
    # ------------------------------------------------------------------

    def localized_categories(self, locale: str) -> list[dict]:
        """Return categories as ``{id, name}`` dicts for ``locale``."""
        return [
            {"id": c.id, "name": localize(c.name, locale)}
            for c in self.questionnaire.categories
        ]

    def localized_questions(self, locale: str) -> list[dict]:
        """Return questions as flat dicts for ``locale``.

        Placeholders in question text are left untouched; they are
        substituted per session by the controller.
        """
        return [
            {
                "id": q.id,
                "category_id": q.category_id,
                "text": localize(q.text, locale),
                "options": [
                    {"index": i, "label": localize(o.text, locale), "value": o.value}
                    for i, o in enumerate(q.options)
                ],
            }
            for q in self.questionnaire.questions
        ]
