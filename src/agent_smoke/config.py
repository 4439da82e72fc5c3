"""Configuration management for the JMX agent smoke harness."""

import os
from pathlib import Path
from typing import Any, Dict, List

DEFAULT_BASE_IMAGES = [
    # HotSpot
    "openjdk:8-jre",
    "openjdk:11-jre",
    "ticketfly/java:6",
    "adoptopenjdk/openjdk16:ubi-minimal-jre",
    # OpenJ9
    "ibmjava:8-jre",
    "adoptopenjdk/openjdk11-openj9",
]

RESOURCES_DIR = Path(__file__).parent / "resources"

_TRUE_VALUES = ("true", "1", "yes", "on")
_FALSE_VALUES = ("false", "0", "no", "off")


def _env_bool(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if value is None or value == "":
        return default
    if value.lower() in _TRUE_VALUES:
        return True
    if value.lower() in _FALSE_VALUES:
        return False
    raise ValueError(f"Invalid boolean value for {name}: {value}")


def _env_int(name: str, default: int) -> int:
    value = os.environ.get(name)
    if value is None or value == "":
        return default
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"Invalid integer value for {name}: {value}") from None


def _env_float(name: str, default: float) -> float:
    value = os.environ.get(name)
    if value is None or value == "":
        return default
    try:
        return float(value)
    except ValueError:
        raise ValueError(f"Invalid number value for {name}: {value}") from None


def _env_list(name: str, default: List[str]) -> List[str]:
    value = os.environ.get(name)
    if not value:
        return list(default)
    return [item.strip() for item in value.split(",") if item.strip()]


class Config:
    """Environment-driven, immutable settings for the smoke harness."""

    def __init__(self, project_root: str | None = None):
        """Initialize configuration.

        Args:
            project_root: Directory the relative artifact paths are resolved
                from. Defaults to AGENT_SMOKE_PROJECT_ROOT or the current
                working directory.
        """
        if project_root:
            self.project_root = Path(project_root)
        else:
            self.project_root = Path(
                os.environ.get("AGENT_SMOKE_PROJECT_ROOT") or os.getcwd()
            )

        self._defaults = {
            # Parameterization surface
            "base_images": _env_list("AGENT_SMOKE_BASE_IMAGES", DEFAULT_BASE_IMAGES),

            # Build artifacts, relative paths are resolved against project_root
            "app_jar": os.environ.get(
                "AGENT_SMOKE_APP_JAR",
                "../jmx_example_application/target/jmx_example_application.jar",
            ),
            "agent_dir": os.environ.get(
                "AGENT_SMOKE_AGENT_DIR", "../../jmx_prometheus_javaagent/target"
            ),
            "project_version": os.environ.get("AGENT_SMOKE_PROJECT_VERSION", ""),
            "properties_file": os.environ.get(
                "AGENT_SMOKE_PROPERTIES_FILE", str(RESOURCES_DIR / "test.properties")
            ),
            "exporter_config": os.environ.get(
                "AGENT_SMOKE_EXPORTER_CONFIG", str(RESOURCES_DIR / "config.yml")
            ),
            "dockerfile_template": os.environ.get(
                "AGENT_SMOKE_DOCKERFILE", str(RESOURCES_DIR / "Dockerfile")
            ),

            # Container
            "exporter_port": _env_int("AGENT_SMOKE_EXPORTER_PORT", 9000),
            "ready_pattern": os.environ.get("AGENT_SMOKE_READY_PATTERN", ".*registered.*"),
            "startup_timeout": _env_float("AGENT_SMOKE_STARTUP_TIMEOUT", 120.0),
            "keep_images": _env_bool("AGENT_SMOKE_KEEP_IMAGES", False),

            # Scraping
            "scrape_timeout": _env_float("AGENT_SMOKE_SCRAPE_TIMEOUT", 10.0),
            "request_timeout": _env_float("AGENT_SMOKE_REQUEST_TIMEOUT", 10.0),
            "poll_interval": _env_float("AGENT_SMOKE_POLL_INTERVAL", 0.1),

            "log_level": os.environ.get("LOG_LEVEL", "INFO"),
        }

    def __getattr__(self, name: str) -> Any:
        """Get configuration value."""
        # __getattr__ can run before _defaults exists (e.g. during copy)
        defaults = self.__dict__.get("_defaults", {})
        if name in defaults:
            return defaults[name]
        raise AttributeError(f"'{self.__class__.__name__}' object has no attribute '{name}'")

    def __setattr__(self, name: str, value: Any) -> None:
        """Prevent modification of configuration after initialization."""
        defaults = self.__dict__.get("_defaults")
        if defaults is not None and (name in defaults or name == "project_root"):
            raise AttributeError(f"Configuration is immutable: cannot set '{name}'")
        super().__setattr__(name, value)

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value with optional default."""
        return self._defaults.get(key, default)

    def resolve(self, path: str) -> Path:
        """Resolve a configured path against the project root."""
        candidate = Path(path)
        if candidate.is_absolute():
            return candidate
        return (self.project_root / candidate).resolve()

    def validate(self) -> List[str]:
        """Validate configuration and return list of errors.

        Returns:
            List of validation error messages. Empty list means valid.
        """
        errors = []

        if not self.base_images:
            errors.append("AGENT_SMOKE_BASE_IMAGES must name at least one image")

        if not 0 < self.exporter_port < 65536:
            errors.append(f"Exporter port out of range: {self.exporter_port}")

        for key in ("scrape_timeout", "request_timeout", "startup_timeout"):
            if self._defaults[key] <= 0:
                errors.append(f"{key} must be positive, got {self._defaults[key]}")
        if self.poll_interval < 0:
            errors.append(f"poll_interval must not be negative, got {self.poll_interval}")

        for key in ("dockerfile_template", "exporter_config"):
            path = self.resolve(self._defaults[key])
            if not path.is_file():
                errors.append(f"{key} not found: {path}")

        if not self.project_version:
            properties = self.resolve(self.properties_file)
            if not properties.is_file():
                errors.append(f"Version file not found: {properties}")

        return errors

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to dictionary."""
        return self._defaults.copy()

    def __str__(self) -> str:
        return f"Config(project_root={self.project_root})"

    def __repr__(self) -> str:
        return f"Config(project_root={self.project_root}, base_images={self.base_images})"

    def get_startup_summary(self) -> Dict[str, Any]:
        """Get configuration summary for logging."""
        return {
            "project_root": str(self.project_root),
            "base_images": list(self.base_images),
            "app_jar": str(self.resolve(self.app_jar)),
            "agent_dir": str(self.resolve(self.agent_dir)),
            "project_version": self.project_version or "from " + self.properties_file,
            "exporter_port": self.exporter_port,
            "ready_pattern": self.ready_pattern,
            "startup_timeout": self.startup_timeout,
            "scrape_timeout": self.scrape_timeout,
            "request_timeout": self.request_timeout,
            "poll_interval": self.poll_interval,
            "keep_images": self.keep_images,
            "log_level": self.log_level,
        }

    @classmethod
    def load_runtime_config(cls) -> 'Config':
        """Load configuration from the current environment."""
        return cls()
