"""
Integration test configuration and fixtures.

Each test gets its own JavaContainer, parametrized over the configured base
images. Tests are skipped when Docker is unreachable or the Java build has not
produced the application and agent jars yet.
"""

import pytest
import requests

import docker
from agent_smoke.artifacts import resolve_artifacts
from agent_smoke.config import Config
from agent_smoke.container import JavaContainer

BASE_IMAGES = Config.load_runtime_config().base_images


@pytest.fixture(scope="session")
def docker_available():
    """Check if Docker is available for testing."""
    try:
        client = docker.from_env()
        client.ping()
        return True
    except Exception:
        return False


@pytest.fixture(scope="session")
def smoke_config():
    return Config.load_runtime_config()


@pytest.fixture(scope="session")
def artifacts(smoke_config, docker_available):
    """Resolved build artifacts, skipping when they have not been built."""
    if not docker_available:
        pytest.skip("Docker not available")

    layout = resolve_artifacts(smoke_config)
    missing = layout.missing()
    if missing:
        pytest.skip(
            "Build artifacts missing (run the Java build first): "
            + ", ".join(str(path) for path in missing)
        )
    return layout


@pytest.fixture(params=BASE_IMAGES, ids=BASE_IMAGES)
def base_image(request):
    return request.param


@pytest.fixture
def java_container(base_image, artifacts, smoke_config):
    """The example application with the agent attached, running on base_image."""
    with JavaContainer(base_image, artifacts, smoke_config) as container:
        yield container


@pytest.fixture
def http_session():
    with requests.Session() as session:
        yield session
