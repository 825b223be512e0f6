from prometheus_client import CollectorRegistry, Counter, Histogram, generate_latest

registry = CollectorRegistry()

run_counter = Counter("field_tests_runs_total", "Total field test runs", registry=registry)

outcome_counter = Counter(
    "field_tests_outcomes_total",
    "Rule outcomes per status",
    ["status"],
    registry=registry,
)

rule_duration = Histogram(
    "field_tests_rule_seconds",
    "Time spent inside a rule's logic",
    registry=registry,
)


def render_metrics() -> bytes:
    return generate_latest(registry)
