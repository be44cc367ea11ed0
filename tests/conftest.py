from pathlib import Path

import pytest

from dora_questionnaire.models import FormIdentity, Questionnaire
from dora_questionnaire.questionnaire import QuestionnaireStore

QUESTIONNAIRE_PATH = Path(__file__).resolve().parents[1] / "questionnaires" / "dora.yaml"


def _text(es: str, pt: str) -> dict:
    return {"es": es, "pt": pt}


@pytest.fixture
def questionnaire():
    """Three questions in two categories.

    q1, q2 -> category 1 (options 0/1/2)
    q3     -> category 2 (options 0/3)
    """
    scale = [
        {"text": _text("Nada", "Nada"), "value": 0},
        {"text": _text("Algo", "Algo"), "value": 1},
        {"text": _text("Todo", "Tudo"), "value": 2},
    ]
    return Questionnaire(
        title=_text("Prueba", "Teste"),
        categories=[
            {"id": 1, "name": _text("Riesgo", "Risco")},
            {"id": 2, "name": _text("Incidentes", "Incidentes")},
        ],
        questions=[
            {
                "id": 1, "category_id": 1, "options": scale,
                "text": _text("¿{providerName} gestiona riesgos?",
                              "A {providerName} gere riscos?"),
            },
            {
                "id": 2, "category_id": 1, "options": scale,
                "text": _text("¿Informa a {financialEntityName}?",
                              "Informa a {financialEntityName}?"),
            },
            {
                "id": 3, "category_id": 2,
                "options": [
                    {"text": _text("No", "Não"), "value": 0},
                    {"text": _text("Sí", "Sim"), "value": 3},
                ],
                "text": _text("¿Hay registro de incidentes?",
                              "Há registo de incidentes?"),
            },
        ],
    )


@pytest.fixture
def empty_questionnaire():
    return Questionnaire()


@pytest.fixture
def identity():
    return FormIdentity(
        provider_name="Acme Cloud",
        financial_entity_name="Banco Atlántico",
        user_name="analyst1",
    )


@pytest.fixture(scope="session")
def store():
    """Load the shipped DORA questionnaire once for the test session."""
    s = QuestionnaireStore(QUESTIONNAIRE_PATH)
    s.load()
    return s
