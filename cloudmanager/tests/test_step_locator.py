"""Tests for locating step states in an execution."""

import pytest

from cloudmanager.src import hal
from cloudmanager.src.models import ActionKind, Execution, StepAction
from cloudmanager.src.services.step_locator import (
    find_by_gate,
    find_current_step,
    find_waiting_step,
)

from conftest import execution_body, step_state

def make_execution(*steps):
    return Execution.from_document(hal.parse(execution_body(*steps)))

FULL_EXECUTION = make_execution(
    step_state("validate", "FINISHED", id="1"),
    step_state("build", "FINISHED", id="2"),
    step_state("codeQuality", "FINISHED", id="3"),
    step_state("deploy", "FINISHED", "dev", id="4"),
    step_state("deploy", "FINISHED", "stage", id="5"),
    step_state("securityTest", "FINISHED", id="6"),
    step_state("loadTest", "FINISHED", id="7"),
    step_state("assetsTest", "FINISHED", id="8"),
    step_state("reportPerformanceTest", "WAITING", id="9"),
    step_state("approval", "NOT_STARTED", id="10"),
    step_state("deploy", "NOT_STARTED", "prod", id="11"),
)

@pytest.mark.parametrize("gate, step_id", [
    ("security", "6"),
    ("performance", "9"),
    ("devDeploy", "4"),
    ("stageDeploy", "5"),
    ("prodDeploy", "11"),
    ("codeQuality", "3"),
    ("build", "2"),
])
def test_find_by_gate(gate, step_id):
    assert find_by_gate(FULL_EXECUTION, gate).id == step_id

def test_unmatched_literal_action():
    assert find_by_gate(FULL_EXECUTION, "experienceAudit") is None

def test_performance_takes_last_match():
    execution = make_execution(
        step_state("loadTest", id="a"),
        step_state("assetsTest", id="b"),
        step_state("reportPerformanceTest", id="c"),
    )
    assert find_by_gate(execution, "performance").id == "c"

def test_performance_with_single_step():
    execution = make_execution(step_state("build", id="a"), step_state("loadTest", id="b"))
    assert find_by_gate(execution, "performance").id == "b"

def test_performance_without_steps():
    execution = make_execution(step_state("build"))
    assert find_by_gate(execution, "performance") is None

def test_deploy_gate_requires_environment_type():
    execution = make_execution(step_state("deploy", environment_type="stage"))
    assert find_by_gate(execution, "devDeploy") is None

def test_security_takes_first_match():
    execution = make_execution(
        step_state("securityTest", id="first"),
        step_state("securityTest", id="second"),
    )
    assert find_by_gate(execution, "security").id == "first"

def test_execution_without_step_states():
    execution = Execution.from_document(hal.parse({"id": "100"}))
    assert execution.step_states == []
    assert find_by_gate(execution, "security") is None
    assert find_current_step(execution) is None

def test_find_current_step():
    assert find_current_step(FULL_EXECUTION).id == "9"

def test_find_waiting_step():
    assert find_waiting_step(FULL_EXECUTION).id == "9"
    running = make_execution(step_state("build", "RUNNING"))
    assert find_waiting_step(running) is None
    assert find_current_step(running).action == "build"

@pytest.mark.parametrize("action, kind", [
    ("approval", ActionKind.APPROVAL),
    ("managed", ActionKind.MANAGED),
    ("schedule", ActionKind.SCHEDULE),
    ("deploy", ActionKind.DEPLOY),
    ("securityTest", ActionKind.GATE),
    ("loadTest", ActionKind.GATE),
    ("build", ActionKind.GATE),
])
def test_step_action_decoding(action, kind):
    decoded = StepAction.decode(action, "prod")
    assert decoded.kind is kind
    assert decoded.name == action
    if kind is ActionKind.DEPLOY:
        assert decoded.environment_type == "prod"
    else:
        assert decoded.environment_type is None
