#!/usr/bin/env python3
"""Simulate a DORA questionnaire session end-to-end with in-process fakes.

Drives a :class:`FormController` through every question, optionally saving
and resuming a draft halfway, then submits through the real
:class:`SubmissionPipeline` against a fake delivery service.  Prints an
audit log of every question, the answer chosen, and the final per-category
aggregate.

By default answers are **randomised** (``--random``, on by default).  Use
``--no-random`` to always pick the highest-scoring option.

Usage::

    # Default run (Spanish, random answers)
    python scripts/simulate_questionnaire.py

    # Portuguese, deterministic answers
    python scripts/simulate_questionnaire.py -l pt --no-random

    # Save a draft halfway and resume from it
    python scripts/simulate_questionnaire.py --resume

    # Make the first delivery attempt fail, then retry
    python scripts/simulate_questionnaire.py --fail-first
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import random
import sys
from pathlib import Path

# ---------------------------------------------------------------------------
# Ensure src/ is on sys.path so the script runs from a plain checkout.
# ---------------------------------------------------------------------------
_SCRIPT_DIR = Path(__file__).resolve().parent
_REPO_ROOT = _SCRIPT_DIR.parent
sys.path.insert(0, str(_REPO_ROOT / "src"))

from dora_questionnaire.aggregation import chart_data  # noqa: E402
from dora_questionnaire.controller import FormController  # noqa: E402
from dora_questionnaire.interfaces import (  # noqa: E402
    DocumentDelivery,
    DraftSink,
    SubmissionSink,
)
from dora_questionnaire.models import (  # noqa: E402
    Category,
    Draft,
    FormIdentity,
    Question,
    SubmissionRecord,
    SubmissionStatus,
)
from dora_questionnaire.pipeline import SubmissionPipeline  # noqa: E402
from dora_questionnaire.questionnaire import QuestionnaireStore  # noqa: E402

# ---------------------------------------------------------------------------
# Constants for the simulation
# ---------------------------------------------------------------------------

IDENTITY = FormIdentity(
    provider_name="Acme Cloud",
    financial_entity_name="Banco Atlántico",
    user_name="sim_user",
)

_OBSERVATION_POOL = [
    "Pendiente de revisión por auditoría interna.",
    "Evidencia disponible bajo petición.",
    "",
]

_DOUBLE_LINE = "=" * 62
_SINGLE_LINE = "-" * 62

# Global flag set by main() from --quiet
_quiet = False


def _print(*args, **kwargs) -> None:
    """Print wrapper that respects the --quiet flag."""
    if not _quiet:
        print(*args, **kwargs)


# ---------------------------------------------------------------------------
# In-process fakes
# ---------------------------------------------------------------------------

class MemoryDraftSink(DraftSink):
    """Keeps saved drafts in a list."""

    def __init__(self) -> None:
        self.drafts: list[Draft] = []

    async def save_draft(self, draft: Draft) -> None:
        self.drafts.append(draft)


class MemoryFormSink(SubmissionSink):
    """Keeps delivered records in a list."""

    def __init__(self) -> None:
        self.records: list[SubmissionRecord] = []

    async def on_submitted(self, record: SubmissionRecord) -> None:
        self.records.append(record)


class FakeDelivery(DocumentDelivery):
    """Accepts every document, optionally rejecting the first N attempts."""

    def __init__(self, fail_first: int = 0) -> None:
        self.calls = 0
        self._fail_first = fail_first

    async def send(
        self,
        record: SubmissionRecord,
        questions: list[Question],
        categories: list[Category],
        locale: str,
        artifact: str | None,
    ) -> bool:
        self.calls += 1
        await asyncio.sleep(0.01)
        return self.calls > self._fail_first


# ---------------------------------------------------------------------------
# Logging helpers
# ---------------------------------------------------------------------------

def log_header(title: str) -> None:
    _print(f"\n{_DOUBLE_LINE}")
    _print(f" {title}")
    _print(_DOUBLE_LINE)


def log_question_and_answer(controller: FormController, value: float) -> None:
    """Print the current question, its options and the chosen score."""
    view = controller.view()
    q = view.question
    _print(f"\n [Q{view.position + 1}/{view.total}] {q.text}")
    _print(f"     Category: {q.category}")
    _print(f"     Options: {', '.join(f'{o.label} ({o.value:g})' for o in q.options)}")
    _print(f" [A] {value:g}")


def log_aggregate(controller: FormController, verbose: bool) -> None:
    aggregate = controller.aggregate()
    _print(f"\n{_SINGLE_LINE}")
    for c in aggregate.categories:
        mean = "-" if c.mean is None else f"{c.mean:.2f}"
        pct = "" if c.percentage is None else f" ({c.percentage:.0f}%)"
        _print(
            f" {c.label:<32s} {mean:>5s}{pct}  "
            f"[{c.answered}/{c.total} answered, {c.observations} notes]"
        )
    _print(_SINGLE_LINE)
    if verbose:
        _print(json.dumps(chart_data(aggregate), ensure_ascii=False, indent=2))


# ---------------------------------------------------------------------------
# Simulation
# ---------------------------------------------------------------------------

def _pick(question: Question, rng: random.Random, randomize: bool) -> float:
    if randomize:
        return rng.choice(question.options).value
    return question.max_score


async def run_simulation(
    locale: str,
    *,
    randomize: bool,
    resume: bool,
    fail_first: int,
    verbose: bool,
    seed: int | None,
) -> int:
    rng = random.Random(seed)
    store = QuestionnaireStore()
    questionnaire = store.load()

    drafts = MemoryDraftSink()
    forms = MemoryFormSink()
    delivery = FakeDelivery(fail_first=fail_first)

    def new_controller(draft: Draft | None = None) -> FormController:
        pipeline = SubmissionPipeline(delivery, sink=forms, timeout=5.0)
        return FormController(
            questionnaire, IDENTITY, pipeline,
            locale=locale, draft_sink=drafts, draft=draft,
        )

    controller = new_controller()
    log_header(f"DORA QUESTIONNAIRE SIMULATION ({locale}, {controller.total} questions)")

    halfway = controller.total // 2
    resumed = False
    while True:
        if resume and not resumed and controller.state.position == halfway:
            draft = await controller.save_draft()
            _print(f"\n [draft] saved at question {draft.last_question_index + 1}; resuming")
            controller = new_controller(draft=drafts.drafts[-1])
            resumed = True

        question = controller.current_question
        if rng.random() < 0.3:
            controller.set_observation(None, rng.choice(_OBSERVATION_POOL))
        value = _pick(question, rng, randomize)
        log_question_and_answer(controller, value)
        was_last = controller.is_last
        controller.answer(None, value)
        _print(f"     progress: {controller.progress:.0f}%")
        if was_last:
            break

    log_aggregate(controller, verbose)

    log_header("SUBMISSION")
    attempts = 0
    while controller.status != SubmissionStatus.SUCCESS and attempts <= fail_first:
        attempts += 1
        status = await controller.submit()
        _print(f" attempt {attempts}: {status.value}"
               + (f" ({controller.state.last_error})" if controller.state.last_error else ""))

    if controller.status != SubmissionStatus.SUCCESS:
        _print(" [FAIL] form was not delivered")
        return 1
    _print(f" delivered after {delivery.calls} call(s); {len(forms.records)} record(s) stored")
    return 0


def main() -> None:
    global _quiet

    parser = argparse.ArgumentParser(
        description="Simulate a DORA questionnaire session with in-process fakes.",
    )
    parser.add_argument(
        "-l", "--locale",
        choices=["es", "pt"],
        default="es",
        help="Questionnaire locale (default: es)",
    )
    parser.add_argument(
        "--random",
        action=argparse.BooleanOptionalAction,
        default=True,
        help="Randomise answers (default: on). Use --no-random to always pick the top score.",
    )
    parser.add_argument(
        "--resume",
        action="store_true",
        help="Save a draft halfway and continue in a new controller resumed from it",
    )
    parser.add_argument(
        "--fail-first",
        type=int, default=0,
        help="Number of delivery attempts the fake service rejects before accepting",
    )
    parser.add_argument(
        "--seed",
        type=int, default=None,
        help="RNG seed for reproducible answers",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Print chart data and SDK debug logs",
    )
    parser.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Suppress all print output (exit code still reflects success/failure)",
    )
    args = parser.parse_args()
    _quiet = args.quiet

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s [%(name)s] %(message)s",
    )

    sys.exit(asyncio.run(run_simulation(
        args.locale,
        randomize=args.random,
        resume=args.resume,
        fail_first=args.fail_first,
        verbose=args.verbose,
        seed=args.seed,
    )))


if __name__ == "__main__":
    main()
