"""Tests for analysis orchestration, routing and the healing retry wrapper."""

import logging
import re
from unittest.mock import Mock

import pytest

from domain.diagnostics import (
    ErrorAnalyzer,
    ErrorCategory,
    ErrorObservation,
    FixMemoryRegistry,
    Persona,
    backoff_delay,
    route,
    with_healing,
)
from domain.exceptions import FixMemoryStoreError
from domain.services.fix_memory_store import FixMemoryStore
from infrastructure.persistence import InMemoryFixMemoryStore

TIMEOUT = ErrorObservation("connect ETIMEDOUT 10.0.0.1:443", code="ETIMEDOUT")
SYNTAX = ErrorObservation("SyntaxError: Unexpected token }")


@pytest.fixture
def stores():
    return {}


@pytest.fixture
def analyzer(stores):
    def factory(workspace):
        return stores.setdefault(workspace, InMemoryFixMemoryStore())

    return ErrorAnalyzer(FixMemoryRegistry(factory))


class TestErrorAnalyzer:

    def test_analysis_identity(self, analyzer):
        analysis = analyzer.analyze(TIMEOUT, "ws")

        assert re.fullmatch(r"ERR-\d+-[0-9a-f]{6}", analysis.id)
        assert analysis.status == "pending"
        assert analysis.category == ErrorCategory.NETWORK

    def test_ids_are_unique(self, analyzer):
        assert analyzer.analyze(TIMEOUT, "ws").id != analyzer.analyze(TIMEOUT, "ws").id

    def test_without_memory_fixes_come_from_hypotheses(self, analyzer):
        analysis = analyzer.analyze(TIMEOUT, "ws")

        assert analysis.related_fix_ids == []
        assert [f.confidence for f in analysis.suggested_fixes] == [40, 25, 20]
        assert analysis.suggested_fixes[0].description == "Server is down or unreachable"
        assert all(f.code is None for f in analysis.suggested_fixes)

    def test_verified_memory_fix_is_suggested_first(self, analyzer):
        first = analyzer.analyze(TIMEOUT, "ws")
        first.resolve("Point the client at the internal load balancer")
        entry = analyzer.record_fix(first, "ws")

        second = analyzer.analyze(ErrorObservation("connect ETIMEDOUT 10.0.0.2:8443", code="ETIMEDOUT"), "ws")

        assert second.related_fix_ids == [entry.id]
        top = second.suggested_fixes[0]
        assert top.description == f"Previously successful fix: {first.decomposition.root_cause}"
        assert top.code == "Point the client at the internal load balancer"
        assert top.confidence == 90
        assert second.suggested_fixes[1].code is None
        assert len(second.suggested_fixes) == 4

    def test_unverified_exact_match_has_lower_confidence(self, analyzer, stores):
        analysis = analyzer.analyze(TIMEOUT, "ws")
        analysis.resolve("retry", verified=True)
        entry = analyzer.record_fix(analysis, "ws")
        workspace_store = next(iter(stores.values()))
        entry.verified = False
        workspace_store.save([entry])

        again = analyzer.analyze(TIMEOUT, "ws")

        assert again.suggested_fixes[0].confidence == 70

    def test_workspaces_are_isolated(self, analyzer):
        analysis = analyzer.analyze(TIMEOUT, "ws-a")
        analysis.resolve("retry")
        analyzer.record_fix(analysis, "ws-a")

        assert analyzer.analyze(TIMEOUT, "ws-b").related_fix_ids == []

    def test_unavailable_memory_degrades(self):
        store = Mock(spec=FixMemoryStore)
        store.load.side_effect = FixMemoryStoreError("offline")
        analyzer = ErrorAnalyzer(FixMemoryRegistry(lambda ws: store))

        analysis = analyzer.analyze(TIMEOUT, "ws")

        assert analysis.related_fix_ids == []
        assert len(analysis.suggested_fixes) == 3

    def test_registry_failure_degrades(self):
        def broken(workspace):
            raise FixMemoryStoreError("no workspace")

        analysis = ErrorAnalyzer(FixMemoryRegistry(broken)).analyze(TIMEOUT, "ws")

        assert analysis.related_fix_ids == []

    @pytest.mark.parametrize("value", [None, 42, {"message": None}, ""])
    def test_malformed_input(self, analyzer, value):
        analysis = analyzer.analyze(value, "ws")

        assert analysis.category == ErrorCategory.UNKNOWN
        assert analysis.hypotheses[0].likelihood == 100

    def test_analysis_is_serializable(self, analyzer):
        analysis = analyzer.analyze(TIMEOUT, "ws")
        analysis.resolve("retry", verified=False)

        data = analysis.to_dict()

        assert data["category"] == "NETWORK"
        assert data["error"]["code"] == "ETIMEDOUT"
        assert data["resolution"]["verified"] is False
        assert analysis.status == "resolved-unverified"


class TestResponseRouter:

    def test_network_goes_to_infrastructure(self, analyzer):
        response = route(analyzer.analyze(TIMEOUT, "ws"))

        assert response.primary_persona == Persona.INFRA_INVESTIGATION
        assert response.secondary_persona == Persona.CODE_REVIEW

    def test_syntax_goes_to_code_review(self, analyzer):
        response = route(analyzer.analyze(SYNTAX, "ws"))

        assert response.primary_persona == Persona.CODE_REVIEW
        assert response.secondary_persona == Persona.INFRA_INVESTIGATION

    @pytest.mark.parametrize("message", ["value is null", "Deadlock detected"])
    def test_runtime_and_state_go_to_code_review(self, analyzer, message):
        assert route(analyzer.analyze(message, "ws")).primary_persona == Persona.CODE_REVIEW

    def test_permission_error_goes_to_infrastructure(self, analyzer):
        analysis = analyzer.analyze(ErrorObservation("EACCES: permission denied", code="EACCES"), "ws")

        assert analysis.category == ErrorCategory.RESOURCE
        assert route(analysis).primary_persona == Persona.INFRA_INVESTIGATION

    def test_mission_line(self, analyzer):
        message = "x" * 80
        response = route(analyzer.analyze(message, "ws"))

        assert response.mission == f"Debug UNKNOWN error: {'x' * 50}..."

    def test_report_sections(self, analyzer):
        report = route(analyzer.analyze(TIMEOUT, "ws")).report

        assert "First-Principles Decomposition" in report
        assert "Network communication between client and server" in report
        assert "1. Server is running and accessible" in report
        assert "[40%] Server is down or unreachable" in report
        assert "   Test: ping/curl the endpoint" in report
        assert "[40% confidence] Server is down or unreachable" in report
        assert "Similar Past Errors" not in report

    def test_report_counts_related_fixes(self, analyzer):
        first = analyzer.analyze(TIMEOUT, "ws")
        first.resolve("retry")
        analyzer.record_fix(first, "ws")

        report = route(analyzer.analyze(TIMEOUT, "ws")).report

        assert "Similar Past Errors Found: 1" in report

    def test_routing_is_pure(self, analyzer):
        analysis = analyzer.analyze(TIMEOUT, "ws")

        assert route(analysis) == route(analysis)


class TestHealing:

    def test_backoff_schedule(self):
        assert [backoff_delay(n) for n in range(1, 8)] == [1.0, 2.0, 4.0, 8.0, 16.0, 30.0, 30.0]

    def test_succeeds_after_retries(self, analyzer):
        sleep = Mock()
        on_error = Mock()
        calls = {"n": 0}

        @with_healing(analyzer, "ws", on_error=on_error, sleep=sleep)
        def flaky():
            calls["n"] += 1
            if calls["n"] < 3:
                raise TimeoutError("connection timed out")
            return "ok"

        assert flaky() == "ok"
        assert [c.args[0] for c in sleep.call_args_list] == [1.0, 2.0]
        assert on_error.call_count == 2
        assert on_error.call_args.args[0].category == ErrorCategory.NETWORK

    def test_reraises_last_error_with_summary(self, analyzer, caplog):
        sleep = Mock()
        error = TimeoutError("connection timed out")

        @with_healing(analyzer, "ws", max_retries=3, sleep=sleep)
        def always_fails():
            raise error

        with caplog.at_level(logging.ERROR):
            with pytest.raises(TimeoutError) as raised:
                always_fails()

        assert raised.value is error
        assert sleep.call_count == 2
        assert "failed after 3 attempts" in caplog.text
        assert "Category: NETWORK" in caplog.text
        assert "Root cause: One or more network layer assumptions are false" in caplog.text
        assert "[40%] Server is down or unreachable" in caplog.text

    def test_single_attempt_does_not_sleep(self, analyzer):
        sleep = Mock()

        @with_healing(analyzer, "ws", max_retries=1, sleep=sleep)
        def fails():
            raise ValueError("bad")

        with pytest.raises(ValueError):
            fails()
        sleep.assert_not_called()

    @pytest.mark.parametrize("max_retries", [0, -1])
    def test_rejects_retry_budget_below_one(self, analyzer, max_retries):
        with pytest.raises(ValueError, match="at least 1"):
            with_healing(analyzer, "ws", max_retries=max_retries)

    def test_wraps_metadata(self, analyzer):
        @with_healing(analyzer, "ws")
        def documented():
            """Docs."""

        assert documented.__name__ == "documented"
        assert documented.__doc__ == "Docs."
