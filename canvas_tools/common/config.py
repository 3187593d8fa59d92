"""Canvas server configuration.

Resolves the canvas server URL from the environment (or a project-root .env
file) once at startup, so commands receive it as a plain value.
"""

import os
from pathlib import Path
from typing import Mapping, MutableMapping, Optional


# Project root and config paths
PROJECT_ROOT = Path(__file__).parent.parent.parent
ENV_PATH = PROJECT_ROOT / ".env"

DEFAULT_SERVER_URL = "http://localhost:3000"
SERVER_URL_VAR = "EXPRESS_SERVER_URL"


def load_env(env_path: Optional[Path] = None,
             environ: Optional[MutableMapping[str, str]] = None) -> None:
    """Load environment variables from .env file if it exists."""
    env_path = env_path or ENV_PATH
    if environ is None:
        environ = os.environ
    if not env_path.exists():
        return

    with open(env_path, 'r', encoding='utf-8') as f:
        for line in f:
            line = line.strip()
            if not line or line.startswith('#') or '=' not in line:
                continue
            key, value = line.split('=', 1)
            key = key.strip()
            value = value.strip()
            # Strip quotes from value if present
            if len(value) >= 2 and value[0] in ('"', "'") and value[-1] == value[0]:
                value = value[1:-1]
            # Don't override existing environment variables
            if key not in environ:
                environ[key] = value


def get_server_url(environ: Optional[Mapping[str, str]] = None) -> str:
    """Get the canvas server base URL.

    Args:
        environ: Mapping to read from. Defaults to os.environ after loading .env.

    Returns:
        EXPRESS_SERVER_URL if set and non-empty, otherwise DEFAULT_SERVER_URL
    """
    if environ is None:
        load_env()
        environ = os.environ
    return environ.get(SERVER_URL_VAR) or DEFAULT_SERVER_URL
