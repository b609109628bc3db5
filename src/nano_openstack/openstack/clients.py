from __future__ import annotations

import logging
from typing import Any, BinaryIO, Optional

from keystoneauth1 import token_endpoint
from openstack import connection

from nano_openstack.config import Settings
from nano_openstack.openstack.session import new_session

LOG = logging.getLogger(__name__)

# os-floating-ips and addSecurityGroup were dropped from newer microversions.
NOVA_NETWORK_MICROVERSION = "2.35"


def _connect(service_type: str, endpoint: str, token: str, settings: Settings):
    """
    Build an SDK connection pinned to one endpoint and one token.

    The token_endpoint plugin skips the service catalog entirely, so the
    proxies talk to exactly the URL we were given.
    """
    sess = new_session(settings, auth=token_endpoint.Token(endpoint, token))
    overrides = {f"{service_type}_endpoint_override": endpoint}
    return connection.Connection(session=sess, **overrides)


class ComputeClient:
    def __init__(self, proxy):
        self._proxy = proxy

    def create_server(self, spec: dict[str, Any]):
        return self._proxy.create_server(**spec)

    def get_server(self, server_id: str):
        return self._proxy.get_server(server_id)

    def assign_security_group(self, server_id: str, name: str) -> None:
        self._proxy.post(
            f"/servers/{server_id}/action",
            json={"addSecurityGroup": {"name": name}},
            microversion=NOVA_NETWORK_MICROVERSION,
        )

    def list_floating_ips(self) -> list[dict[str, Any]]:
        resp = self._proxy.get("/os-floating-ips", microversion=NOVA_NETWORK_MICROVERSION)
        return resp.json().get("floating_ips", [])

    def create_floating_ip(self, pool: Optional[str] = None) -> dict[str, Any]:
        body = {"pool": pool} if pool else {}
        resp = self._proxy.post(
            "/os-floating-ips", json=body, microversion=NOVA_NETWORK_MICROVERSION
        )
        return resp.json()["floating_ip"]

    def associate_floating_ip(self, server_id: str, address: str) -> None:
        self._proxy.post(
            f"/servers/{server_id}/action",
            json={"addFloatingIp": {"address": address}},
            microversion=NOVA_NETWORK_MICROVERSION,
        )


class ImageClient:
    def __init__(self, proxy):
        self._proxy = proxy

    def queue_image(self, metadata: dict[str, Any]):
        # No data and no filename: glance only registers the record (status "queued").
        return self._proxy.create_image(allow_duplicates=True, **metadata)

    def upload_image(self, image, data: BinaryIO) -> None:
        image.data = data
        image.upload(self._proxy)


def make_compute_client(endpoint: str, token: str, settings: Settings) -> ComputeClient:
    LOG.debug("Creating compute client for %s", endpoint)
    return ComputeClient(_connect("compute", endpoint, token, settings).compute)


def make_image_client(endpoint: str, token: str, settings: Settings) -> ImageClient:
    LOG.debug("Creating image client for %s", endpoint)
    return ImageClient(_connect("image", endpoint, token, settings).image)
