from lifegate import DisabledCondition, ExecutionGate, FunctionCondition, EvaluationResult, load_declarations
from lifegate.log import configure_logging


def main() -> None:
    configure_logging("DEBUG")
    gate = ExecutionGate(registry=load_declarations("examples/kits/nested.yaml"))

    def only_on_ci(context):
        if context.unit_id.endswith("slow"):
            return EvaluationResult.disabled_result("slow tests run on CI only")
        return EvaluationResult.enabled_result()

    plan = {
        "CalculatorTests.Division": ["divides", "rounds", "slow"],
        "CalculatorTests.Division.ByZero": ["raises", "legacy"],
    }
    disabled = {"legacy": [DisabledCondition("replaced by raises")]}

    for container_id, units in plan.items():
        for unit_id in units:
            contributors = [FunctionCondition(only_on_ci)] + disabled.get(unit_id, [])
            verdict = gate.evaluate(container_id, unit_id, contributors)
            if verdict.disabled:
                print(f"skipped {container_id}.{unit_id}: {verdict.reason}")
                continue
            instance = gate.instance_for(container_id, unit_id)
            print(f"ran {container_id}.{unit_id} on generation {instance.generation} ({instance.mode.value})")
            gate.unit_completed(container_id, unit_id)
        if gate.current(container_id) is not None:
            gate.finalize(container_id)

    print("status:", gate.status())


if __name__ == "__main__":
    main()
