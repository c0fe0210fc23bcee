"""
End-to-end scenarios through the execution gate.
"""

from lifegate.conditions import DisabledCondition, FunctionCondition
from lifegate.config import GateSettings
from lifegate.context import EvaluationResult
from lifegate.declarations import LifecycleMode
from lifegate.gate import ExecutionGate
from lifegate.instances import InstanceState


def test_per_class_scenario_shares_instance_until_finalize():
    """C declares PER_CLASS; m1, m2 run in order, then C is finalized."""
    gate = ExecutionGate()
    gate.declare("C", mode=LifecycleMode.PER_CLASS)

    i1 = gate.instance_for("C", "m1")
    gate.unit_completed("C", "m1")
    i2 = gate.instance_for("C", "m2")
    gate.unit_completed("C", "m2")

    assert i2 is i1
    assert gate.state("C") is InstanceState.ACTIVE
    gate.finalize("C")
    assert gate.state("C") is InstanceState.NO_INSTANCE


def test_disable_scenario_never_instantiates():
    """[disable("env unsupported")] on a PER_METHOD container with no instance."""
    gate = ExecutionGate()
    gate.declare("C")

    result = gate.evaluate("C", "m", [DisabledCondition("env unsupported")])

    assert result == EvaluationResult(enabled=False, reason="env unsupported")
    assert gate.current("C") is None
    assert gate.instances.generation("C") == 0
    assert gate.instances.history("C") == []


def test_context_reflects_current_instance():
    gate = ExecutionGate()
    gate.declare("Outer", mode="per_class")
    gate.declare("Outer.Inner", parent_id="Outer")

    before = gate.context_for("Outer.Inner", "m1")
    assert before.has_instance is False
    assert before.mode is LifecycleMode.PER_CLASS

    instance = gate.instance_for("Outer.Inner", "m1")
    after = gate.context_for("Outer.Inner", "m2")
    assert after.instance is instance


def test_conditions_can_inspect_instance_existence():
    gate = ExecutionGate()
    gate.declare("C", mode="per_class")

    def first_unit_only(context):
        if context.has_instance:
            return EvaluationResult.disabled_result("class already running")
        return EvaluationResult.enabled_result()

    contributors = [FunctionCondition(first_unit_only)]
    assert gate.evaluate("C", "m1", contributors).enabled is True
    gate.instance_for("C", "m1")
    assert gate.evaluate("C", "m2", contributors).reason == "class already running"


def test_runner_loop_per_method():
    gate = ExecutionGate()
    gate.declare("C")
    generations = []
    for unit in ["a", "b", "c"]:
        if gate.evaluate("C", unit, []).disabled:
            continue
        generations.append(gate.instance_for("C", unit).generation)
        gate.unit_completed("C", unit)
    assert generations == [1, 2, 3]
    assert gate.current("C") is None


def test_from_settings_threads_default_policy():
    gate = ExecutionGate.from_settings(GateSettings(default_lifecycle="per_class"))
    gate.declare("C")
    assert gate.resolve_mode("C") is LifecycleMode.PER_CLASS
    assert gate.explain("C").defaulted is True


def test_status_snapshot():
    gate = ExecutionGate()
    gate.declare("A", mode="per_class")
    gate.declare("B")
    gate.instance_for("A", "m1")

    status = gate.status()
    assert status["default_mode"] == "per_method"
    assert status["containers"]["A"]["state"] == "active"
    assert status["containers"]["A"]["instance"]["generation"] == 1
    assert status["containers"]["B"] == {
        "mode": "per_method",
        "state": "no_instance",
        "generation": 0,
        "instance": None,
    }
