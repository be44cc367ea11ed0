"""Completion percentage derived from position and answer presence."""

from dora_questionnaire.models.question import Question
from dora_questionnaire.models.session import SessionState


def compute_progress(state: SessionState, questions: list[Question]) -> float:
    """Return progress in [0, 100].

    ``(position + (1 if the current question is answered else 0)) / total * 100``,
    or ``0.0`` for an empty question sequence.
    """
    total = len(questions)
    if total == 0:
        return 0.0

    current = questions[state.position] if 0 <= state.position < total else None
    answered = 1 if current is not None and current.id in state.answers else 0
    progress = (state.position + answered) / total * 100
    return max(0.0, min(100.0, progress))
