"""Metrics for path-owners."""

from prometheus_client.core import Counter, Histogram

configuration_loads = Counter(
    name="path_owners_configuration_loads_total",
    documentation="Total number of OWNERS files loaded from the repository",
)

load_configuration = Histogram(
    name="path_owners_load_configuration_seconds",
    documentation="Latency for resolving the owners of a change",
)

submit_requirement_runs = Counter(
    name="path_owners_submit_requirement_runs_total",
    documentation="Total number of owners submit requirement evaluations",
    labelnames=["result"],
)

run_submit_requirement = Histogram(
    name="path_owners_run_submit_requirement_seconds",
    documentation="Latency for evaluating the owners submit requirement",
)
