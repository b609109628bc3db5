from __future__ import annotations
import logging
from pathlib import Path
import typer
import yaml
from keystoneauth1 import exceptions as ks_exceptions
from openstack import exceptions as sdk_exceptions
from pydantic import ValidationError
from rich import print
from rich.logging import RichHandler

from nano_openstack.deploy.models import DeploymentSpec
from nano_openstack.deploy.runner import DeploymentError
from nano_openstack.deploy.state_store import read_deployment_state, write_deployment_state

app = typer.Typer(add_completion=False)

USERNAME = typer.Option(..., "--username", "-u", envvar="DEPLOYMENT_OS_USERNAME", help="OpenStack user")
PASSWORD = typer.Option(
    ..., "--password", "-p", envvar="DEPLOYMENT_OS_PASSWORD", help="OpenStack password", hide_input=True
)

CLOUD_ERRORS = (sdk_exceptions.SDKException, ks_exceptions.ClientException, DeploymentError)


def load_deployment(path: Path) -> DeploymentSpec:
    data = yaml.safe_load(path.read_text())
    if not isinstance(data, dict):
        raise typer.BadParameter(f"{path} does not contain a deployment mapping")
    try:
        return DeploymentSpec.from_dict(data)
    except ValidationError as e:
        raise typer.BadParameter(f"{path}: {e}") from e


def _read_state(name: str):
    try:
        return read_deployment_state(name)
    except ValueError as e:
        raise typer.BadParameter(str(e)) from e


def _fail(e: Exception):
    print(f"[red]{type(e).__name__}:[/red] {e}")
    raise typer.Exit(code=1)


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging")):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(show_path=False)],
        force=True,
    )


@app.command()
def login(username: str = USERNAME, password: str = PASSWORD):
    """
    Check credentials against the identity service.
    """
    from nano_openstack.openstack.session import login as os_login

    try:
        token = os_login(username, password)
    except CLOUD_ERRORS as e:
        _fail(e)
    print({"user_id": token.user_id, "expires_at": str(token.expires_at)})


@app.command("upload-image")
def upload_image(
    project_id: str,
    path: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True),
    name: str = typer.Option(None, help="Image name (defaults to the file name)"),
    disk_format: str = typer.Option("qcow2"),
    container_format: str = typer.Option("bare"),
    username: str = USERNAME,
    password: str = PASSWORD,
):
    """
    Register an image in Glance and upload the file into it.
    """
    from nano_openstack.openstack.project import scope_to_project
    from nano_openstack.openstack.session import login as os_login

    metadata = {
        "name": name or path.name,
        "disk_format": disk_format,
        "container_format": container_format,
    }
    try:
        scope = scope_to_project(os_login(username, password), project_id)
        image = scope.upload_image(path, metadata)
    except CLOUD_ERRORS as e:
        _fail(e)
    print({"image_id": image.id, "name": metadata["name"]})


@app.command()
def deploy(
    deployment_file: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True),
    username: str = USERNAME,
    password: str = PASSWORD,
):
    """
    Upload, boot and expose a server as described by a YAML deployment file.
    """
    from nano_openstack.deploy.runner import run_deployment

    spec = load_deployment(deployment_file)
    try:
        state = run_deployment(spec, username, password)
    except CLOUD_ERRORS as e:
        _fail(e)
    print(state)


@app.command()
def status(name: str, username: str = USERNAME, password: str = PASSWORD):
    """
    Print the live status of a deployed server.
    """
    from nano_openstack.deploy.runner import handle_from_state

    st = _read_state(name)
    if not st:
        print(f"[red]No state found for[/red] {name}")
        raise typer.Exit(code=1)

    try:
        live = handle_from_state(st, username, password).get_status()
    except CLOUD_ERRORS as e:
        _fail(e)
    print({"name": name, "server_id": st["server_id"], "status": live})


@app.command("associate-ip")
def associate_ip(name: str, username: str = USERNAME, password: str = PASSWORD):
    """
    Attach a floating IP to a deployed server, allocating one if none is free.
    """
    from nano_openstack.deploy.runner import handle_from_state

    st = _read_state(name)
    if not st:
        print(f"[red]No state found for[/red] {name}")
        raise typer.Exit(code=1)

    try:
        address = handle_from_state(st, username, password).associate_floating_ip()
    except CLOUD_ERRORS as e:
        _fail(e)

    st["floating_ip"] = address
    write_deployment_state(name, st)
    print(f"[green]Associated[/green] {address} with {st['server_id']}")
