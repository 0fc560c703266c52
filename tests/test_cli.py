import json

import pytest
from click.testing import CliRunner

from application.controllers import DebuggingController
from domain.diagnostics import ErrorAnalyzer, FixMemoryRegistry
from domain.reflexion import ReflexionLoop, TaskContext, TaskOutcome
from infrastructure.persistence import InMemoryFixMemoryStore, InMemoryReflexionStore
from interface.cli.main import main


@pytest.fixture
def controller(tmp_path):
    return DebuggingController(
        analyzer=ErrorAnalyzer(FixMemoryRegistry(lambda ws: InMemoryFixMemoryStore())),
        reflexion_loop=ReflexionLoop(InMemoryReflexionStore()),
        workspace_root=str(tmp_path),
    )


@pytest.fixture
def invoke(controller):
    runner = CliRunner()

    def run(*args):
        return runner.invoke(main, list(args), obj={"controller": controller})

    return run


def test_classify(invoke):
    result = invoke("classify", "connect ETIMEDOUT 10.0.0.1:443", "--code", "ETIMEDOUT")

    assert result.exit_code == 0
    assert "NETWORK" in result.output
    assert "ETIMEDOUT:connect etimedout N.N.N.N:N" in result.output


def test_analyze_prints_routed_report(invoke):
    result = invoke("analyze", "connect ETIMEDOUT", "--code", "ETIMEDOUT")

    assert result.exit_code == 0
    assert "Debug NETWORK error" in result.output
    assert "infrastructure-investigation" in result.output
    assert "Suggested Fixes" in result.output


def test_analyze_json(invoke):
    result = invoke("analyze", "SyntaxError: Unexpected token }", "--json")

    assert result.exit_code == 0
    assert json.loads(result.output)["category"] == "SYNTAX"


def test_analyze_records_fix(invoke, controller):
    result = invoke("analyze", "File /a/b.txt not found", "--code", "ENOENT", "--fix", "Create the file")

    assert result.exit_code == 0
    assert "Remembered fix" in result.output
    assert controller.status()["fix_memory_entries"] == 1


def test_analyze_does_not_record_unverified_fix(invoke, controller):
    result = invoke("analyze", "File /a/b.txt not found", "--fix", "guess", "--unverified")

    assert "Fix not recorded" in result.output
    assert controller.status()["fix_memory_entries"] == 0


def test_outcome_failure(invoke):
    result = invoke(
        "outcome",
        "--actor", "vega",
        "--task-type", "deploy",
        "--description", "Deploy the api",
        "--error", "connect ETIMEDOUT",
        "--code", "ETIMEDOUT",
    )

    assert result.exit_code == 0
    assert "Reflection:" in result.output
    assert "Retry:" in result.output


def test_outcome_success(invoke, controller):
    result = invoke("outcome", "--actor", "vega", "--task-type", "deploy", "--description", "Deploy", "--success")

    assert result.exit_code == 0
    assert "Reflection:" not in result.output
    assert controller.status()["memory"].episodic_count == 1


def test_feedback(invoke, controller):
    context = TaskContext(actor="vega", task_type="deploy", task_description="Deploy")
    reflection_id = controller.process_outcome(context, TaskOutcome(success=False, error="boom")).reflection_id

    result = invoke("feedback", reflection_id, "--helped")

    assert result.exit_code == 0
    assert "Updated reflection" in result.output


def test_feedback_unknown_reflection(invoke):
    result = invoke("feedback", "missing", "--not-helped")

    assert result.exit_code == 1


def test_status(invoke):
    result = invoke("status", "--actor", "vega")

    assert result.exit_code == 0
    assert "Learning Memory" in result.output
    assert "never" in result.output
