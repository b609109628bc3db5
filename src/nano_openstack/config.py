from __future__ import annotations

import os
from typing import Optional

from pydantic import BaseModel

DEFAULT_BASE_URL = "http://openstack.nanocloud.org"

IDENTITY_PORT = 5000
COMPUTE_PORT = 8774
IMAGE_PORT = 9292

_TRUTHY = {"1", "true", "yes", "on"}


class Settings(BaseModel):
    base_url: str = DEFAULT_BASE_URL
    user_domain_name: str = "Default"
    verify: bool = True
    floating_ip_pool: Optional[str] = None

    @classmethod
    def from_env(cls) -> "Settings":
        """
        Read the deployment cloud location from the environment.

        Only DEPLOYMENT_OS_URL is commonly set; everything else has a
        default matching a stock DevStack/packstack install.
        """
        insecure = os.environ.get("DEPLOYMENT_OS_INSECURE", "").strip().lower()
        return cls(
            base_url=os.environ.get("DEPLOYMENT_OS_URL", DEFAULT_BASE_URL),
            user_domain_name=os.environ.get("DEPLOYMENT_OS_USER_DOMAIN", "Default"),
            verify=insecure not in _TRUTHY,
            floating_ip_pool=os.environ.get("DEPLOYMENT_OS_FLOATING_IP_POOL") or None,
        )

    @property
    def identity_url(self) -> str:
        return f"{self.base_url.rstrip('/')}:{IDENTITY_PORT}/v3/"

    def compute_url(self, project_id: str) -> str:
        return f"{self.base_url.rstrip('/')}:{COMPUTE_PORT}/v2/{project_id}"

    @property
    def image_url(self) -> str:
        return f"{self.base_url.rstrip('/')}:{IMAGE_PORT}/v2/"


def get_settings() -> Settings:
    return Settings.from_env()
