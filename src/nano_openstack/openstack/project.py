from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable, Optional

from nano_openstack.config import Settings, get_settings
from nano_openstack.openstack import clients
from nano_openstack.openstack.server import ServerHandle
from nano_openstack.openstack.session import IdentityToken, ProjectToken, get_project_token

LOG = logging.getLogger(__name__)


class ProjectScope:
    """
    A project-scoped token together with the identity token it came from.

    The compute and image clients are built on first use and then reused for
    every call made through this scope.
    """

    def __init__(
        self,
        identity: IdentityToken,
        token: ProjectToken,
        settings: Optional[Settings] = None,
        compute_factory: Callable[..., clients.ComputeClient] = clients.make_compute_client,
        image_factory: Callable[..., clients.ImageClient] = clients.make_image_client,
    ):
        self.identity = identity
        self.token = token
        self.settings = settings or get_settings()
        self._compute_factory = compute_factory
        self._image_factory = image_factory
        self._compute: clients.ComputeClient | None = None
        self._image: clients.ImageClient | None = None

    @property
    def project_id(self) -> str:
        return self.token.project_id

    @property
    def compute(self) -> clients.ComputeClient:
        if self._compute is None:
            self._compute = self._compute_factory(
                self.settings.compute_url(self.project_id), self.token.token, self.settings
            )
        return self._compute

    @property
    def image(self) -> clients.ImageClient:
        if self._image is None:
            self._image = self._image_factory(
                self.settings.image_url, self.token.token, self.settings
            )
        return self._image

    def create_server(self, spec: dict[str, Any]) -> ServerHandle:
        server = self.compute.create_server(spec)
        LOG.info("Server %s created in project %s", server.id, self.project_id)
        return ServerHandle(self, server.id)

    def server(self, server_id: str) -> ServerHandle:
        return ServerHandle(self, server_id)

    def upload_image(
        self,
        file_path: str | Path,
        metadata: dict[str, Any],
        on_registered: Optional[Callable[[Any], None]] = None,
    ):
        """
        Register `metadata` with the image service, then stream the file.

        `on_registered` is called with the queued image before any bytes are
        sent. A failed upload leaves the queued image record in place.
        """
        image = self.image.queue_image(metadata)
        LOG.info("Image %s registered, uploading %s", image.id, file_path)
        if on_registered is not None:
            on_registered(image)
        with open(file_path, "rb") as data:
            self.image.upload_image(image, data)
        LOG.info("Image %s uploaded", image.id)
        return image


def scope_to_project(
    identity: IdentityToken, project_id: str, settings: Optional[Settings] = None
) -> ProjectScope:
    settings = settings or get_settings()
    token = get_project_token(identity, project_id, settings)
    return ProjectScope(identity, token, settings)
