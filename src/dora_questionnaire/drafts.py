"""Draft lifecycle helpers — snapshot and restore of session state.

Both functions are pure with respect to their inputs: ``build_draft`` copies
the maps out of the state, ``restore_state`` builds a fresh
:class:`SessionState` instead of patching an existing one.
"""

from __future__ import annotations

import logging

from dora_questionnaire.models.question import Questionnaire
from dora_questionnaire.models.session import (
    Draft,
    FormIdentity,
    SessionState,
    utcnow,
)

logger = logging.getLogger(__name__)


def build_draft(
    state: SessionState, identity: FormIdentity, *, locale: str | None = None
) -> Draft:
    """Snapshot ``state`` into an incomplete draft stamped with the current time."""
    return Draft(
        provider_name=identity.provider_name,
        financial_entity_name=identity.financial_entity_name,
        user_name=identity.user_name,
        answers=dict(state.answers),
        observations=dict(state.observations),
        date=utcnow(),
        last_question_index=state.position,
        is_completed=False,
        locale=locale,
    )


def restore_state(draft: Draft, questionnaire: Questionnaire) -> SessionState:
    """Build a fresh session state from ``draft``.

    Answers and observations for question ids the questionnaire does not
    contain are dropped.  An index outside the question range is clamped.
    ``submitting``, ``last_error`` and ``status`` start from their defaults.
    """
    valid = questionnaire.question_ids

    answers = {qid: v for qid, v in draft.answers.items() if qid in valid}
    observations = {qid: t for qid, t in draft.observations.items() if qid in valid}
    dropped = (len(draft.answers) - len(answers)) + (
        len(draft.observations) - len(observations)
    )
    if dropped:
        logger.warning(
            "Draft for %s/%s references %d unknown question entr(y/ies); dropped",
            draft.provider_name, draft.financial_entity_name, dropped,
        )

    total = len(questionnaire.questions)
    position = draft.last_question_index
    if total == 0:
        position = 0
    elif not 0 <= position < total:
        clamped = max(0, min(position, total - 1))
        logger.warning(
            "Draft index %d out of range for %d questions; clamped to %d",
            position, total, clamped,
        )
        position = clamped

    return SessionState(
        position=position,
        answers=answers,
        observations=observations,
    )
