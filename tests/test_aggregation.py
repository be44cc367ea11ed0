"""derive_aggregate / chart helper tests."""

import pytest

from dora_questionnaire.aggregation import (
    chart_data,
    chart_options,
    derive_aggregate,
    questionnaire_max_score,
)


def _aggregate(questionnaire, answers, observations=None, locale="es"):
    return derive_aggregate(
        answers,
        observations or {},
        questionnaire.questions,
        questionnaire.categories,
        locale,
    )


class TestDeriveAggregate:

    def test_category_order_and_labels(self, questionnaire):
        agg = _aggregate(questionnaire, {}, locale="pt")
        assert [c.label for c in agg.categories] == ["Risco", "Incidentes"]
        assert agg.locale == "pt"

    def test_nothing_answered_is_no_data(self, questionnaire):
        agg = _aggregate(questionnaire, {})
        for c in agg.categories:
            assert c.mean is None, "No answers must yield None, not 0"
            assert not c.has_data
            assert c.answered == 0
            assert c.percentage is None

    def test_mean_excludes_unanswered(self, questionnaire):
        agg = _aggregate(questionnaire, {1: 2})
        risk = agg.get(1)
        assert risk.mean == 2.0, "Unanswered q2 must not count as zero"
        assert (risk.answered, risk.total) == (1, 2)
        assert agg.get(2).mean is None

    def test_mean_and_percentage(self, questionnaire):
        agg = _aggregate(questionnaire, {1: 2, 2: 1, 3: 3})
        risk = agg.get(1)
        assert risk.mean == pytest.approx(1.5)
        assert risk.max_score == pytest.approx(2.0)
        assert risk.percentage == pytest.approx(75.0)
        assert agg.get(2).percentage == pytest.approx(100.0)

    def test_zero_mean_gives_zero_percentage(self, questionnaire):
        agg = _aggregate(questionnaire, {1: 0})
        assert agg.get(1).percentage == pytest.approx(0.0)

    def test_observations_count_non_blank(self, questionnaire):
        agg = _aggregate(questionnaire, {}, {1: "note", 2: "   ", 3: ""})
        assert agg.get(1).observations == 1
        assert agg.get(2).observations == 0

    def test_unknown_answer_ids_ignored(self, questionnaire):
        agg = _aggregate(questionnaire, {99: 3})
        assert all(c.mean is None for c in agg.categories)

    def test_get_unknown_category(self, questionnaire):
        assert _aggregate(questionnaire, {}).get(42) is None


class TestChartHelpers:

    def test_chart_data(self, questionnaire):
        data = chart_data(_aggregate(questionnaire, {3: 3}, locale="pt"))
        assert data["labels"] == ["Risco", "Incidentes"]
        assert data["datasets"][0]["label"] == "Pontuação"
        assert data["datasets"][0]["data"] == [None, 3.0]

    def test_chart_options(self):
        opts = chart_options("es", 3.0)
        assert opts["plugins"]["title"]["text"] == "Puntuación media por categoría"
        assert opts["scales"]["y"] == {"beginAtZero": True, "max": 3.0}
        assert "max" not in chart_options("es")["scales"]["y"]

    def test_questionnaire_max_score(self, questionnaire, empty_questionnaire):
        assert questionnaire_max_score(questionnaire.questions) == 3.0
        assert questionnaire_max_score(empty_questionnaire.questions) is None
