from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from nano_openstack.openstack.project import ProjectScope

LOG = logging.getLogger(__name__)


class ServerHandle:
    """
    A compute instance id bound to the project scope it lives in.

    Nothing about the server is cached; every read goes to the compute API.
    """

    def __init__(self, scope: "ProjectScope", server_id: str):
        self.scope = scope
        self.id = server_id

    def __repr__(self) -> str:
        return f"ServerHandle(id={self.id!r}, project={self.scope.project_id!r})"

    def get(self):
        return self.scope.compute.get_server(self.id)

    def get_status(self) -> str:
        return self.get().status

    def assign_security_group(self, name: str) -> None:
        self.scope.compute.assign_security_group(self.id, name)
        LOG.info("Security group %s assigned to server %s", name, self.id)

    def associate_floating_ip(self) -> str:
        compute = self.scope.compute
        available = [ip for ip in compute.list_floating_ips() if not ip.get("instance_id")]

        if available:
            selected = available[0]
        else:
            LOG.debug("No free floating IP, allocating a new one")
            selected = compute.create_floating_ip(self.scope.settings.floating_ip_pool)

        compute.associate_floating_ip(self.id, selected["ip"])
        LOG.info("Floating IP %s associated with server %s", selected["ip"], self.id)
        return selected["ip"]
