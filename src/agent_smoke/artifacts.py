"""
Build inputs for the smoke test images.

Each test image is assembled from three files produced by the Java build or
bundled with this package:

- jmx_example_application.jar: the application exposing the sample MBeans
- jmx_prometheus_javaagent-<version>.jar: the agent under test
- config.yml: the exporter configuration

plus a Dockerfile rendered from a template whose only placeholder is the base
runtime image.
"""

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List

import yaml

from .config import Config
from .errors import ArtifactError

logger = logging.getLogger(__name__)

BASE_IMAGE_PLACEHOLDER = "${base.image}"
APP_JAR_NAME = "jmx_example_application.jar"
EXPORTER_CONFIG_NAME = "config.yml"
IMAGE_NAME_PREFIX = "jmx_exporter_test_"


def agent_jar_name(version: str) -> str:
    return f"jmx_prometheus_javaagent-{version}.jar"


def image_name(base_image: str) -> str:
    """Derive the local image tag for a base image."""
    return IMAGE_NAME_PREFIX + re.sub(r"[:/-]", "_", base_image)


def load_properties(path: Path) -> Dict[str, str]:
    """Read a Java-style .properties file (key=value or key: value)."""
    try:
        text = Path(path).read_text(encoding="utf-8")
    except OSError as e:
        raise ArtifactError(f"Cannot read properties file {path}: {e}") from e

    properties = {}
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line or line[0] in "#!":
            continue
        match = re.match(r"([^=:\s]+)\s*[=:]?\s*(.*)", line)
        if match:
            properties[match.group(1)] = match.group(2).strip()
    return properties


def load_project_version(path: Path) -> str:
    """Return the project.version entry of a properties file."""
    version = load_properties(path).get("project.version")
    if not version:
        raise ArtifactError(f"project.version not set in {path}")
    # Unfiltered Maven resources still carry the placeholder
    if version.startswith("${"):
        raise ArtifactError(f"project.version in {path} was not filtered: {version}")
    return version


def load_dockerfile(base_image: str, template_path: Path) -> str:
    """Render the Dockerfile template for base_image."""
    try:
        template = Path(template_path).read_text(encoding="utf-8")
    except OSError as e:
        raise ArtifactError(f"Cannot read Dockerfile template {template_path}: {e}") from e

    if BASE_IMAGE_PLACEHOLDER not in template:
        raise ArtifactError(
            f"Dockerfile template {template_path} has no {BASE_IMAGE_PLACEHOLDER} placeholder"
        )
    return template.replace(BASE_IMAGE_PLACEHOLDER, base_image)


def load_exporter_config(path: Path) -> Dict[str, Any]:
    """Parse the exporter configuration, which must be a YAML mapping."""
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ArtifactError(f"Cannot read exporter config {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ArtifactError(f"Invalid YAML in exporter config {path}: {e}") from e

    if not isinstance(data, dict):
        raise ArtifactError(f"Exporter config {path} must be a mapping")
    return data


@dataclass(frozen=True)
class ArtifactLayout:
    """Resolved locations of the files copied into each test image."""

    app_jar: Path
    agent_jar: Path
    exporter_config: Path
    dockerfile_template: Path
    version: str

    @property
    def agent_jar_name(self) -> str:
        return self.agent_jar.name

    def missing(self) -> List[Path]:
        """Return the artifacts that do not exist on disk."""
        paths = [self.app_jar, self.agent_jar, self.exporter_config, self.dockerfile_template]
        return [path for path in paths if not path.is_file()]

    def build_context(self, base_image: str) -> Dict[str, Any]:
        """Map build-context file names to their source path or content."""
        return {
            APP_JAR_NAME: self.app_jar,
            self.agent_jar_name: self.agent_jar,
            EXPORTER_CONFIG_NAME: self.exporter_config,
            "Dockerfile": load_dockerfile(base_image, self.dockerfile_template),
        }


def resolve_artifacts(config: Config) -> ArtifactLayout:
    """Resolve the artifact layout described by config."""
    version = config.project_version or load_project_version(
        config.resolve(config.properties_file)
    )
    layout = ArtifactLayout(
        app_jar=config.resolve(config.app_jar),
        agent_jar=config.resolve(config.agent_dir) / agent_jar_name(version),
        exporter_config=config.resolve(config.exporter_config),
        dockerfile_template=config.resolve(config.dockerfile_template),
        version=version,
    )
    # Missing files are reported by ArtifactLayout.missing()
    if layout.exporter_config.is_file():
        load_exporter_config(layout.exporter_config)
    logger.debug(f"Resolved artifacts for agent version {version}: {layout}")
    return layout
