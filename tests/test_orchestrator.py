"""Tests for core.orchestrator: mock agent calls, verify the review loop."""

from unittest.mock import MagicMock, patch

import pytest

from core.errors import BackendError, ExtractionError, ExtractionKind, PersistenceValidationError
from core.orchestrator import AGENT_CLASSES, Orchestrator
from core.state import AgentRole, Phase, PHASE_ROLES, WorkflowState
from helpers import (
    MAJOR_ISSUE,
    SPEC_JSON,
    DESIGN_JSON,
    TEST_JSON,
    FakeBackend,
    artifact_json,
    backend_error,
    make_artifact,
    make_design,
    make_review,
    make_spec,
    make_test_result,
    reply,
    review_json,
)


def _orchestrator(max_revisions=1, persist=None):
    return Orchestrator(
        backend=FakeBackend(),
        max_revisions=max_revisions,
        output_dir="/tmp/out",
        persist=persist or MagicMock(return_value="/tmp/out/shopping-list"),
    )


def _run_with_reviews(orch, reviews, fixes=None):
    """Run the full pipeline with scripted agents; return the mocks."""
    initial = make_artifact()
    fixes = fixes or [make_artifact() for _ in reviews]
    with patch.object(orch.analyst, "execute", return_value=make_spec()) as analyst, \
         patch.object(orch.designer, "execute", return_value=make_design()) as designer, \
         patch.object(orch.developer, "execute", side_effect=[initial] + list(fixes)) as developer, \
         patch.object(orch.reviewer, "execute", side_effect=list(reviews)) as reviewer, \
         patch.object(orch.tester, "execute", return_value=make_test_result()) as tester:
        path = orch.run(orch.create_requirements("shared shopping list"))
    return path, {"analyst": analyst, "designer": designer, "developer": developer,
                  "reviewer": reviewer, "tester": tester, "initial": initial, "fixes": fixes}


def _fix_calls(developer_mock):
    return [c for c in developer_mock.call_args_list if c.args[0].review_feedback is not None]


def test_agent_table_covers_every_phase_role():
    assert set(AGENT_CLASSES) == set(PHASE_ROLES)
    assert AgentRole.ORCHESTRATOR not in AGENT_CLASSES


def test_initial_state():
    orch = _orchestrator(max_revisions=3)
    assert orch.state == WorkflowState(max_revisions=3)
    assert len(orch.messages) == 0


def test_max_revisions_clamped():
    assert _orchestrator(max_revisions=99).state.max_revisions == 5
    assert _orchestrator(max_revisions=-2).state.max_revisions == 0


def test_max_revisions_from_environment(monkeypatch):
    monkeypatch.setenv("MAX_REVISIONS", "2")
    orch = Orchestrator(backend=FakeBackend(), persist=MagicMock())
    assert orch.state.max_revisions == 2


def test_agents_get_per_role_models(monkeypatch):
    monkeypatch.setenv("MODEL_REVIEWER", "claude-reviewer")
    monkeypatch.delenv("MODEL_DEVELOPER", raising=False)
    orch = _orchestrator()
    assert orch.reviewer.model == "claude-reviewer"
    assert orch.developer.model is None


def test_create_requirements_strips_input():
    orch = _orchestrator()
    req = orch.create_requirements("  an idea  ", " dark mode ")
    assert req.idea == "an idea"
    assert req.additional_requirements == "dark mode"
    assert req.tech_stack.orm == "Prisma"


# --- Review loop ---

def test_early_approval_skips_fixes():
    orch = _orchestrator(max_revisions=3)
    path, mocks = _run_with_reviews(orch, [make_review(True)])

    assert path == "/tmp/out/shopping-list"
    assert mocks["reviewer"].call_count == 1
    assert _fix_calls(mocks["developer"]) == []
    assert orch.state.revision_count == 0
    assert orch.state.review_attempts == 1
    assert orch.state.phase == Phase.COMPLETE


@pytest.mark.parametrize("max_revisions", [0, 1, 2, 3])
def test_never_approved_is_bounded(max_revisions):
    orch = _orchestrator(max_revisions=max_revisions)
    reviews = [make_review(False, [MAJOR_ISSUE]) for _ in range(max_revisions + 1)]
    _, mocks = _run_with_reviews(orch, reviews)

    assert mocks["reviewer"].call_count == max_revisions + 1
    assert len(_fix_calls(mocks["developer"])) == max_revisions
    assert orch.state.revision_count == max_revisions
    assert orch.state.review_attempts == max_revisions + 1
    # Unapproved code still goes on to testing and persistence
    mocks["tester"].assert_called_once()
    orch.persist.assert_called_once()
    assert orch.state.review.approved is False


def test_one_revision_then_approval():
    orch = _orchestrator(max_revisions=1)
    unapproved = make_review(False, [MAJOR_ISSUE])
    _, mocks = _run_with_reviews(orch, [unapproved, make_review(True)])

    fixes = _fix_calls(mocks["developer"])
    assert len(fixes) == 1
    assert fixes[0].args[0].review_feedback is unapproved
    assert mocks["reviewer"].call_count == 2
    # Second review saw the fixed artifact
    assert mocks["reviewer"].call_args_list[1].args[0] is mocks["fixes"][0]
    assert orch.state.revision_count == 1
    assert orch.state.review.approved is True


def test_zero_revisions_tests_original_artifact():
    orch = _orchestrator(max_revisions=0)
    _, mocks = _run_with_reviews(orch, [make_review(False, [MAJOR_ISSUE])])

    assert mocks["developer"].call_count == 1
    assert mocks["reviewer"].call_count == 1
    tested = mocks["tester"].call_args.args[0]
    assert tested.project is mocks["initial"]
    assert orch.state.revision_count == 0


def test_revision_count_never_exceeds_budget():
    orch = _orchestrator(max_revisions=2)
    reviews = [make_review(False), make_review(False), make_review(True)]
    _run_with_reviews(orch, reviews)
    assert orch.state.revision_count == 2
    assert orch.state.revision_count <= orch.state.max_revisions


def test_persist_receives_final_artifact():
    orch = _orchestrator(max_revisions=1)
    _, mocks = _run_with_reviews(orch, [make_review(False), make_review(True)])
    orch.persist.assert_called_once_with("Shopping List", mocks["fixes"][0], "/tmp/out")
    assert orch.state.project_path == "/tmp/out/shopping-list"


# --- Failures ---

def test_backend_failure_aborts_before_persisting():
    orch = _orchestrator()
    with patch.object(orch.analyst, "execute", return_value=make_spec()), \
         patch.object(orch.designer, "execute", side_effect=backend_error()), \
         patch.object(orch.developer, "execute") as developer:
        with pytest.raises(BackendError):
            orch.run(orch.create_requirements("idea"))

    developer.assert_not_called()
    orch.persist.assert_not_called()
    assert orch.state.phase == Phase.DESIGN
    assert orch.state.requirements.project_name == "Shopping List"


def test_reviewer_failure_mid_loop_aborts():
    orch = _orchestrator(max_revisions=2)
    failure = ExtractionError(ExtractionKind.PARSE_ERROR, "bad json")
    with patch.object(orch.analyst, "execute", return_value=make_spec()), \
         patch.object(orch.designer, "execute", return_value=make_design()), \
         patch.object(orch.developer, "execute", return_value=make_artifact()), \
         patch.object(orch.reviewer, "execute", side_effect=[make_review(False), failure]), \
         patch.object(orch.tester, "execute") as tester:
        with pytest.raises(ExtractionError):
            orch.run(orch.create_requirements("idea"))

    tester.assert_not_called()
    orch.persist.assert_not_called()
    assert orch.state.revision_count == 1


def test_persistence_failure_propagates():
    persist = MagicMock(side_effect=PersistenceValidationError(["Missing required files: package.json"]))
    orch = _orchestrator(persist=persist)
    with pytest.raises(PersistenceValidationError):
        _run_with_reviews(orch, [make_review(True)])
    assert orch.state.project_path == ""


# --- Message log ---

def test_message_log_records_the_run():
    orch = _orchestrator(max_revisions=1)
    _run_with_reviews(orch, [make_review(False), make_review(True)])

    summary = orch.messages.summary()
    assert summary["by_kind"]["approval"] == 1
    assert summary["by_kind"]["feedback"] == 1
    assert summary["by_kind"]["revision"] == 1
    assert summary["by_sender"]["tester"] == 2
    assert summary["total"] == len(orch.messages)


# --- End to end through the real agents ---

def test_full_run_with_scripted_backend():
    backend = FakeBackend([
        reply(SPEC_JSON),
        reply(DESIGN_JSON),
        reply(artifact_json()),
        reply(review_json(False, [MAJOR_ISSUE])),
        reply(artifact_json()),
        reply(review_json(True)),
        reply(TEST_JSON),
    ])
    persist = MagicMock(return_value="/tmp/out/shopping-list")
    orch = Orchestrator(backend=backend, max_revisions=1, output_dir="/tmp/out", persist=persist)

    path = orch.run(orch.create_requirements("shared shopping list"))

    assert path == "/tmp/out/shopping-list"
    assert backend.replies == []
    assert len(backend.calls) == 7
    assert orch.state.revision_count == 1
    assert orch.state.test_result.passed is True
    # The developer's fix request went into the same conversation
    assert len(orch.developer.conversation) == 5
    assert len(orch.reviewer.conversation) == 5
