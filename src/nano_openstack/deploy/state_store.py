from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Any, Optional

STATE_DIR = Path(".nano-openstack/state")

# Deployment names become file names under STATE_DIR.
NAME_PATTERN = r"^[A-Za-z0-9][A-Za-z0-9._-]*$"


def _state_path(name: str) -> Path:
    if not re.match(NAME_PATTERN, name):
        raise ValueError(f"Invalid deployment name: {name!r}")
    return STATE_DIR / f"{name}.json"


def write_deployment_state(name: str, state: dict[str, Any]) -> None:
    path = _state_path(name)
    STATE_DIR.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(state, indent=2, sort_keys=True, default=str))


def read_deployment_state(name: str) -> Optional[dict[str, Any]]:
    path = _state_path(name)
    if not path.exists():
        return None
    return json.loads(path.read_text())
