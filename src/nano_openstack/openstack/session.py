from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from keystoneauth1 import session as ks_session
from keystoneauth1.identity import v3

from nano_openstack.config import Settings, get_settings

LOG = logging.getLogger(__name__)


@dataclass(frozen=True)
class IdentityToken:
    token: str
    user_id: str | None
    expires_at: datetime | None
    access: Any = None


@dataclass(frozen=True)
class ProjectToken:
    token: str
    project_id: str
    expires_at: datetime | None
    access: Any = None


def new_session(settings: Settings, auth=None) -> ks_session.Session:
    return ks_session.Session(auth=auth, verify=settings.verify)


def _get_access(plugin, settings: Settings):
    return plugin.get_access(new_session(settings))


def login(username: str, password: str, settings: Optional[Settings] = None) -> IdentityToken:
    """
    Authenticate a user/password pair and return an unscoped identity token.

    keystoneauth1 errors (Unauthorized, ConnectFailure, ...) are not caught.
    """
    settings = settings or get_settings()
    plugin = v3.Password(
        auth_url=settings.identity_url,
        username=username,
        password=password,
        user_domain_name=settings.user_domain_name,
        unscoped=True,
    )
    LOG.debug("Requesting identity token for %s from %s", username, settings.identity_url)
    access = _get_access(plugin, settings)
    LOG.info("Identity token issued for user %s", access.user_id)
    return IdentityToken(
        token=access.auth_token,
        user_id=access.user_id,
        expires_at=access.expires,
        access=access,
    )


def get_project_token(
    identity: IdentityToken, project_id: str, settings: Optional[Settings] = None
) -> ProjectToken:
    settings = settings or get_settings()
    plugin = v3.Token(
        auth_url=settings.identity_url,
        token=identity.token,
        project_id=project_id,
    )
    LOG.debug("Scoping identity token to project %s", project_id)
    access = _get_access(plugin, settings)
    return ProjectToken(
        token=access.auth_token,
        project_id=access.project_id or project_id,
        expires_at=access.expires,
        access=access,
    )
