"""
JMX Agent Smoke - runtime compatibility checks for the JMX exporter agent

Builds a Docker image per Java base image, runs the example application with
the agent attached, and checks that the scraped /metrics output carries the
expected JVM and tabular MBean metrics.
"""

__version__ = "1.0.0"
__description__ = "Smoke tests for the JMX exporter agent on Java base images"

from .assertions import (
    assert_metric_positive,
    assert_metrics_present,
    find_metric,
    metric_value,
)
from .config import Config
from .container import JavaContainer
from .errors import (
    ArtifactError,
    ContainerStartError,
    HarnessError,
    MetricNotFoundError,
    ScrapeTimeoutError,
)
from .scrape import Endpoint, scrape_metrics

__all__ = [
    "Config",
    "Endpoint",
    "JavaContainer",
    "scrape_metrics",
    "find_metric",
    "metric_value",
    "assert_metric_positive",
    "assert_metrics_present",
    "HarnessError",
    "ArtifactError",
    "ContainerStartError",
    "ScrapeTimeoutError",
    "MetricNotFoundError",
    "__version__",
    "__description__",
]
