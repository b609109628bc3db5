from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from nano_openstack.deploy.state_store import NAME_PATTERN


class ImageSpec(BaseModel):
    path: str
    metadata: Dict[str, Any] = Field(default_factory=dict)


class WaitSpec(BaseModel):
    status: str = "ACTIVE"
    failures: List[str] = Field(default_factory=lambda: ["ERROR"])
    interval: float = 5.0
    timeout: float = 1200.0


class DeploymentSpec(BaseModel):
    name: str = Field(pattern=NAME_PATTERN)
    project_id: str
    image: Optional[ImageSpec] = None
    # Passed verbatim to the compute create-server call.
    server: Dict[str, Any] = Field(default_factory=dict)
    security_group: Optional[str] = None
    floating_ip: bool = True
    wait: WaitSpec = Field(default_factory=WaitSpec)

    # compatibility helper
    @classmethod
    def from_dict(cls, data: dict) -> "DeploymentSpec":
        # pydantic v2 uses model_validate, v1 uses parse_obj
        if hasattr(cls, "model_validate"):
            return cls.model_validate(data)  # type: ignore[attr-defined]
        return cls.parse_obj(data)  # type: ignore[attr-defined]
