"""Questionnaire reference endpoint.

Read-only: exposes the loaded questionnaire and the UI strings for one
locale, so clients can render labels without a live session.
"""

from fastapi import APIRouter, Depends, Query

from dora_questionnaire.constants import DEFAULT_LOCALE, Locale
from dora_questionnaire.localization import MESSAGES, localize
from dora_questionnaire.questionnaire import QuestionnaireStore

from dora_server.dependencies import get_store

router = APIRouter(tags=["questionnaire"])


@router.get("/questionnaire")
def get_questionnaire(
    locale: Locale = Query(DEFAULT_LOCALE),
    store: QuestionnaireStore = Depends(get_store),
) -> dict:
    """Return title, categories, questions and UI strings for ``locale``.

    Question text keeps its ``{providerName}`` / ``{financialEntityName}``
    placeholders; sessions substitute them.
    """
    return {
        "locale": locale,
        "title": localize(store.questionnaire.title, locale),
        "categories": store.localized_categories(locale),
        "questions": store.localized_questions(locale),
        "messages": MESSAGES[locale],
    }
