"""
Container lifecycle for the smoke tests.

JavaContainer builds an image from the rendered Dockerfile and the build
artifacts, starts it with the exporter port published, and waits until the
example application logs that its MBeans are registered. Use it as a context
manager so the container and image are removed however the test ends.
"""

import logging
import shutil
import tempfile
from pathlib import Path
from typing import List, Optional

import requests
from testcontainers.core.container import DockerContainer
from testcontainers.core.image import DockerImage
from testcontainers.core.waiting_utils import wait_for_logs

from .artifacts import ArtifactLayout, image_name
from .config import Config
from .errors import ContainerStartError
from .scrape import Endpoint, scrape_metrics

logger = logging.getLogger(__name__)


class JavaContainer:
    """The example application with the agent attached, on one base image."""

    def __init__(self, base_image: str, artifacts: ArtifactLayout, config: Config):
        self.base_image = base_image
        self.artifacts = artifacts
        self.config = config
        self.image_name = image_name(base_image)

        self._image: Optional[DockerImage] = None
        self._container: Optional[DockerContainer] = None
        self._endpoint: Optional[Endpoint] = None

    def _write_build_context(self, context_dir: Path) -> None:
        for name, source in self.artifacts.build_context(self.base_image).items():
            target = context_dir / name
            if isinstance(source, Path):
                shutil.copyfile(source, target)
            else:
                target.write_text(source, encoding="utf-8")

    def build(self) -> DockerImage:
        """Build the test image from a temporary build context."""
        logger.info(f"Building {self.image_name} from {self.base_image}")
        with tempfile.TemporaryDirectory(prefix="agent-smoke-") as context_dir:
            self._write_build_context(Path(context_dir))
            image = DockerImage(
                path=context_dir,
                tag=self.image_name,
                clean_up=not self.config.keep_images,
            )
            try:
                image.build()
            except Exception as e:
                raise ContainerStartError(
                    f"Failed to build image {self.image_name}: {e}"
                ) from e
        self._image = image
        return image

    def start(self) -> Endpoint:
        """Build and start the container, returning its exporter endpoint."""
        if self._endpoint is not None:
            return self._endpoint

        if self._image is None:
            self.build()

        port = self.config.exporter_port
        container = DockerContainer(self.image_name).with_exposed_ports(port)
        self._container = container
        container.start()

        try:
            wait_for_logs(
                container,
                self.config.ready_pattern,
                timeout=self.config.startup_timeout,
            )
        except Exception as e:
            logger.error(f"{self.image_name} never became ready:\n{self.logs()}")
            raise ContainerStartError(
                f"Container {self.image_name} did not log {self.config.ready_pattern!r} "
                f"within {self.config.startup_timeout}s"
            ) from e

        self._endpoint = Endpoint(
            container.get_container_host_ip(), int(container.get_exposed_port(port))
        )
        logger.info(f"{self.image_name} ready, metrics at {self._endpoint.url()}")
        return self._endpoint

    def stop(self) -> None:
        """Stop the container and remove the image unless images are kept."""
        container, self._container = self._container, None
        image, self._image = self._image, None
        self._endpoint = None

        try:
            if container is not None:
                logger.info(f"Stopping {self.image_name}")
                container.stop()
        finally:
            if image is not None and not self.config.keep_images:
                try:
                    image.remove()
                except Exception as e:
                    # Another parametrization may still use the same tag
                    logger.warning(f"Could not remove image {self.image_name}: {e}")

    @property
    def endpoint(self) -> Endpoint:
        if self._endpoint is None:
            raise ContainerStartError(f"Container {self.image_name} is not running")
        return self._endpoint

    def metrics_url(self) -> str:
        return self.endpoint.url()

    def scrape(self, timeout: float | None = None,
               session: Optional[requests.Session] = None) -> List[str]:
        """Scrape the exporter with the configured retry settings."""
        return scrape_metrics(
            self.metrics_url(),
            self.config.scrape_timeout if timeout is None else timeout,
            session=session,
            poll_interval=self.config.poll_interval,
            request_timeout=self.config.request_timeout,
            original_port=self.config.exporter_port,
        )

    def logs(self) -> str:
        """Return the container's combined stdout and stderr."""
        if self._container is None:
            return ""
        stdout, stderr = self._container.get_logs()
        return (stdout + stderr).decode("utf-8", errors="replace")

    def __enter__(self) -> "JavaContainer":
        try:
            self.start()
        except BaseException:
            self.stop()
            raise
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.stop()

    def __repr__(self) -> str:
        return f"JavaContainer(base_image={self.base_image!r}, image_name={self.image_name!r})"
