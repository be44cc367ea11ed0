"""Locale-indexed UI strings and text helpers.

``MESSAGES`` is loaded once per process.  Question and category text is not
stored here; it comes from the questionnaire YAML as ``{locale: text}`` maps.
"""

from dora_questionnaire.constants import (
    ENTITY_PLACEHOLDER,
    PROVIDER_PLACEHOLDER,
    SUPPORTED_LOCALES,
)

MESSAGES: dict[str, dict[str, str]] = {
    "es": {
        "title": "Cuestionario DORA",
        "observation_placeholder": "Observaciones (opcional)",
        "previous": "Anterior",
        "submit": "Enviar",
        "submitting": "Enviando...",
        "save_draft": "Guardar borrador",
        "empty": "No hay preguntas disponibles.",
        "submit_error": (
            "Hubo un error al enviar el formulario. "
            "Por favor, inténtelo de nuevo."
        ),
        "chart_title": "Puntuación media por categoría",
        "chart_dataset": "Puntuación",
    },
    "pt": {
        "title": "Questionário DORA",
        "observation_placeholder": "Observações (opcional)",
        "previous": "Anterior",
        "submit": "Enviar",
        "submitting": "Enviando...",
        "save_draft": "Salvar rascunho",
        "empty": "Não há perguntas disponíveis.",
        "submit_error": (
            "Ocorreu um erro ao enviar o formulário. "
            "Por favor, tente novamente."
        ),
        "chart_title": "Pontuação média por categoria",
        "chart_dataset": "Pontuação",
    },
}


def message(locale: str, key: str) -> str:
    """Return the UI string ``key`` for ``locale``.

    Raises:
        KeyError: if the locale or key is unknown.
    """
    if locale not in SUPPORTED_LOCALES:
        raise KeyError(f"Unsupported locale: {locale}")
    return MESSAGES[locale][key]


def localize(text: dict[str, str], locale: str) -> str:
    """Pick the ``locale`` entry of a localized text map."""
    return text[locale]


def replace_variables(
    text: str, *, provider_name: str, financial_entity_name: str
) -> str:
    """Substitute the provider / financial-entity placeholders in ``text``."""
    return text.replace(PROVIDER_PLACEHOLDER, provider_name).replace(
        ENTITY_PLACEHOLDER, financial_entity_name
    )
