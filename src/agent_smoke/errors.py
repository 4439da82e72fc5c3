"""Exception types raised by the smoke harness."""


class HarnessError(Exception):
    """Base class for problems setting up the smoke test harness."""


class ArtifactError(HarnessError):
    """A build artifact, template or version file is missing or malformed."""


class ContainerStartError(HarnessError):
    """The test image could not be built or never signalled readiness."""


class ScrapeTimeoutError(AssertionError):
    """No response was obtained from the metrics endpoint before the timeout.

    Subclasses AssertionError so pytest reports it as a test failure rather
    than an error in the harness itself.
    """

    def __init__(self, url: str, original_port: int | None = None,
                 last_exception: BaseException | None = None):
        self.url = url
        self.original_port = original_port
        self.last_exception = last_exception

        message = f"Timeout while getting metrics from {url}"
        if original_port is not None:
            message += f" (orig port: {original_port})"
        if last_exception is not None:
            message += f": {type(last_exception).__name__}: {last_exception}"
        super().__init__(message)


class MetricNotFoundError(AssertionError):
    """No scraped line starts with the expected metric prefix."""

    def __init__(self, prefix: str):
        self.prefix = prefix
        super().__init__(f"Metric {prefix} not found.")
