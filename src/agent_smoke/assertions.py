"""Checks against scraped metric lines.

Lines are matched as opaque strings by literal prefix; the only structure
assumed is that the sample value is the second whitespace-separated token.
"""

from typing import Iterable, List, Sequence

from .errors import MetricNotFoundError

JVM_NON_HEAP_COMMITTED = "java_lang_Memory_NonHeapMemoryUsage_committed"

# Served by the example application's tabular MBean
TABULAR_DISK_USAGE_METRICS = [
    'io_prometheus_jmx_tabularData_Server_1_Disk_Usage_Table_size{source="/dev/sda1"} 7.516192768E9',
    'io_prometheus_jmx_tabularData_Server_1_Disk_Usage_Table_size{source="/dev/sda2"} 1.5032385536E10',
    'io_prometheus_jmx_tabularData_Server_2_Disk_Usage_Table_size{source="/dev/sda1"} 2.5769803776E10',
    'io_prometheus_jmx_tabularData_Server_2_Disk_Usage_Table_size{source="/dev/sda2"} 1.073741824E11',
]


def find_metric(lines: Iterable[str], prefix: str) -> str:
    """Return the first line starting with prefix.

    Raises:
        MetricNotFoundError: If no line matches
    """
    for line in lines:
        if line.startswith(prefix):
            return line
    raise MetricNotFoundError(prefix)


def metric_value(line: str) -> float:
    """Parse the sample value of a metric line."""
    parts = line.split()
    if len(parts) < 2:
        raise AssertionError(f"No value in metric line: {line!r}")
    try:
        return float(parts[1])
    except ValueError:
        raise AssertionError(f"Invalid value in metric line: {line!r}") from None


def assert_metric_positive(lines: Sequence[str], name: str) -> float:
    """Assert that metric name is present with a value greater than zero."""
    value = metric_value(find_metric(lines, name))
    if not value > 0:
        raise AssertionError(f"{name} should be > 0")
    return value


def assert_metrics_present(lines: Sequence[str], prefixes: Iterable[str]) -> List[str]:
    """Assert that every prefix starts at least one line.

    Returns the matching lines in the order of prefixes.
    """
    return [find_metric(lines, prefix) for prefix in prefixes]
