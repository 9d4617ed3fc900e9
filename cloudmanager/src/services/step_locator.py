"""
Locate step states inside an execution.
"""

from typing import Callable, Dict, Optional

from cloudmanager.src.models import Execution, StepState

PERFORMANCE_ACTIONS = ("loadTest", "assetsTest", "reportPerformanceTest")

def _deploy_to(environment_type: str) -> Callable[[StepState], bool]:
    return lambda step: step.action == "deploy" and step.environment_type == environment_type

GATE_PREDICATES: Dict[str, Callable[[StepState], bool]] = {
    "security": lambda step: step.action == "securityTest",
    "devDeploy": _deploy_to("dev"),
    "stageDeploy": _deploy_to("stage"),
    "prodDeploy": _deploy_to("prod"),
}

def find_by_gate(execution: Execution, gate: str) -> Optional[StepState]:
    """
    Find the step state for a gate name or a literal action.
    Performance results may be spread over several steps; the last one wins.
    """
    steps = execution.step_states

    if gate == "performance":
        matches = [step for step in steps if step.action in PERFORMANCE_ACTIONS]
        return matches[-1] if matches else None

    predicate = GATE_PREDICATES.get(gate, lambda step: step.action == gate)
    return next((step for step in steps if predicate(step)), None)

def find_current_step(execution: Execution) -> Optional[StepState]:
    return next((step for step in execution.step_states if not step.terminal), None)

def find_waiting_step(execution: Execution) -> Optional[StepState]:
    return next((step for step in execution.step_states if step.waiting), None)
