from __future__ import annotations

from types import SimpleNamespace

import pytest

from nano_openstack.config import Settings
from nano_openstack.deploy import state_store
from nano_openstack.openstack.project import ProjectScope
from nano_openstack.openstack.session import IdentityToken, ProjectToken


class FakeCompute:
    def __init__(self, statuses=None, floating_ips=None, allocated_ip="203.0.113.50"):
        self.statuses = list(statuses or ["ACTIVE"])
        self.floating_ips = list(floating_ips or [])
        self.allocated_ip = allocated_ip
        self.created = []
        self.fetches = 0
        self.security_groups = []
        self.allocations = []
        self.associations = []
        self.calls = []

    def create_server(self, spec):
        self.calls.append("create_server")
        self.created.append(spec)
        return SimpleNamespace(id=f"srv-{len(self.created)}", name=spec.get("name"))

    def get_server(self, server_id):
        self.calls.append("get_server")
        self.fetches += 1
        status = self.statuses.pop(0) if len(self.statuses) > 1 else self.statuses[0]
        return SimpleNamespace(id=server_id, status=status)

    def assign_security_group(self, server_id, name):
        self.calls.append("assign_security_group")
        self.security_groups.append((server_id, name))

    def list_floating_ips(self):
        self.calls.append("list_floating_ips")
        return list(self.floating_ips)

    def create_floating_ip(self, pool=None):
        self.calls.append("create_floating_ip")
        self.allocations.append(pool)
        return {"id": "new", "ip": self.allocated_ip, "pool": pool, "instance_id": None}

    def associate_floating_ip(self, server_id, address):
        self.calls.append("associate_floating_ip")
        self.associations.append((server_id, address))


class FakeImage:
    def __init__(self, upload_error=None):
        self.upload_error = upload_error
        self.queued = []
        self.uploaded = []
        self.streams = []

    def queue_image(self, metadata):
        self.queued.append(metadata)
        return SimpleNamespace(id=f"img-{len(self.queued)}", status="queued", **metadata)

    def upload_image(self, image, data):
        self.streams.append(data)
        if self.upload_error is not None:
            raise self.upload_error
        self.uploaded.append((image.id, data.read()))


@pytest.fixture
def settings():
    return Settings(base_url="http://cloud.test")


@pytest.fixture
def identity():
    return IdentityToken(token="id-token", user_id="u1", expires_at=None)


@pytest.fixture
def project_token():
    return ProjectToken(token="proj-token", project_id="p1", expires_at=None)


@pytest.fixture
def compute():
    return FakeCompute()


@pytest.fixture
def image_client():
    return FakeImage()


@pytest.fixture
def scope(identity, project_token, settings, compute, image_client):
    return ProjectScope(
        identity,
        project_token,
        settings,
        compute_factory=lambda endpoint, token, s: compute,
        image_factory=lambda endpoint, token, s: image_client,
    )


@pytest.fixture
def state_dir(tmp_path, monkeypatch):
    d = tmp_path / "state"
    monkeypatch.setattr(state_store, "STATE_DIR", d)
    return d
