from __future__ import annotations

import logging
import time
from datetime import datetime, timezone
from typing import Any, Callable, Iterable, Optional

from nano_openstack.config import Settings, get_settings
from nano_openstack.deploy.models import DeploymentSpec
from nano_openstack.deploy.state_store import write_deployment_state
from nano_openstack.openstack.project import ProjectScope, scope_to_project
from nano_openstack.openstack.server import ServerHandle
from nano_openstack.openstack.session import login
from nano_openstack.run_id import default_server_name, new_run_id

LOG = logging.getLogger(__name__)


class DeploymentError(Exception):
    pass


def wait_for_status(
    handle: ServerHandle,
    status: str = "ACTIVE",
    failures: Iterable[str] = ("ERROR",),
    interval: float = 5.0,
    timeout: float = 1200.0,
    sleep: Callable[[float], None] = time.sleep,
    clock: Callable[[], float] = time.monotonic,
) -> str:
    """
    Poll `handle` until it reports `status`.

    Raises DeploymentError if a status in `failures` shows up first or if
    `timeout` seconds go by.
    """
    status = status.upper()
    failures = {f.upper() for f in failures}
    deadline = clock() + timeout
    while True:
        current = handle.get_status()
        LOG.debug("Server %s is %s", handle.id, current)
        current = (current or "").upper()
        if current == status:
            return current
        if current in failures:
            raise DeploymentError(f"Server {handle.id} went to {current} while waiting for {status}")
        if clock() >= deadline:
            raise DeploymentError(
                f"Timed out after {timeout:g}s waiting for server {handle.id} to be {status} "
                f"(last status {current})"
            )
        sleep(interval)


def _utc_now() -> str:
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z")


def deploy_into(
    scope: ProjectScope,
    spec: DeploymentSpec,
    sleep: Callable[[float], None] = time.sleep,
) -> dict[str, Any]:
    run_id = new_run_id()
    state: dict[str, Any] = {
        "name": spec.name,
        "project_id": scope.project_id,
        "run_id": run_id,
        "created_at": _utc_now(),
        "status": "PENDING",
    }
    write_deployment_state(spec.name, state)

    server_spec = dict(spec.server)
    server_spec.setdefault("name", default_server_name(spec.name, run_id))

    if spec.image is not None:
        metadata = dict(spec.image.metadata)
        metadata.setdefault("name", server_spec["name"])

        def record_image(image):
            state["image_id"] = image.id
            write_deployment_state(spec.name, state)

        try:
            image = scope.upload_image(spec.image.path, metadata, on_registered=record_image)
        except Exception:
            state["status"] = "FAILED"
            write_deployment_state(spec.name, state)
            raise
        server_spec.setdefault("image_id", image.id)

    handle = scope.create_server(server_spec)
    state.update({"server_id": handle.id, "server_name": server_spec["name"], "status": "BUILD"})
    write_deployment_state(spec.name, state)

    try:
        state["status"] = wait_for_status(
            handle,
            status=spec.wait.status,
            failures=spec.wait.failures,
            interval=spec.wait.interval,
            timeout=spec.wait.timeout,
            sleep=sleep,
        )
    except DeploymentError:
        state["status"] = "FAILED"
        write_deployment_state(spec.name, state)
        raise
    write_deployment_state(spec.name, state)

    if spec.security_group:
        handle.assign_security_group(spec.security_group)
        state["security_group"] = spec.security_group
        write_deployment_state(spec.name, state)

    if spec.floating_ip:
        state["floating_ip"] = handle.associate_floating_ip()
        write_deployment_state(spec.name, state)

    LOG.info("Deployment %s ready: server %s", spec.name, handle.id)
    return state


def run_deployment(
    spec: DeploymentSpec,
    username: str,
    password: str,
    settings: Optional[Settings] = None,
) -> dict[str, Any]:
    settings = settings or get_settings()
    identity = login(username, password, settings)
    scope = scope_to_project(identity, spec.project_id, settings)
    return deploy_into(scope, spec)


def handle_from_state(
    state: dict[str, Any],
    username: str,
    password: str,
    settings: Optional[Settings] = None,
) -> ServerHandle:
    if not state.get("server_id"):
        raise DeploymentError(f"No server recorded for deployment {state.get('name')}")
    settings = settings or get_settings()
    identity = login(username, password, settings)
    return scope_to_project(identity, state["project_id"], settings).server(state["server_id"])
