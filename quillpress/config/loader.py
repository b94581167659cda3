"""
Config Loader — Load editor configuration from a master key or env vars.

Supports two modes:
1. Master JSON key: single QUILLPRESS_CONFIG env var with every setting
2. Individual keys: separate QUILLPRESS_* env vars (override the master)

## Usage

    # Option 1: Master config
    export QUILLPRESS_CONFIG='{"signed_upload_url": "https://...", "auth_token": "..."}'

    # Option 2: Individual keys
    export QUILLPRESS_SIGNED_UPLOAD_URL="https://.../generateSignedUploadUrl"
    export QUILLPRESS_CREATE_ARTICLE_URL="https://.../createArticle"

## Upload limits

QUILLPRESS_MAX_CONCURRENT_UPLOADS and QUILLPRESS_MAX_IMAGE_BYTES default
to 0, meaning unlimited. Set them to bound how many uploads run at once
and how large a staged image may be.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

MASTER_ENV_VAR = "QUILLPRESS_CONFIG"

# field name → environment variable
ENV_VARS = {
    "signed_upload_url": "QUILLPRESS_SIGNED_UPLOAD_URL",
    "create_article_url": "QUILLPRESS_CREATE_ARTICLE_URL",
    "update_article_url": "QUILLPRESS_UPDATE_ARTICLE_URL",
    "auth_token": "QUILLPRESS_AUTH_TOKEN",
    "http_timeout": "QUILLPRESS_HTTP_TIMEOUT",
    "max_concurrent_uploads": "QUILLPRESS_MAX_CONCURRENT_UPLOADS",
    "max_image_bytes": "QUILLPRESS_MAX_IMAGE_BYTES",
}

INT_FIELDS = ("max_concurrent_uploads", "max_image_bytes")


@dataclass
class EditorConfig:
    """Endpoints and limits used by the editor pipeline."""

    # Storage collaborator
    signed_upload_url: Optional[str] = None

    # Article collaborator
    create_article_url: Optional[str] = None
    update_article_url: Optional[str] = None

    # Pre-issued bearer token (non-interactive use)
    auth_token: Optional[str] = None

    # HTTP
    http_timeout: float = 30.0

    # Limits (0 = unlimited)
    max_concurrent_uploads: int = 0
    max_image_bytes: int = 0

    def validate(self) -> List[str]:
        """Return a list of configuration problems (empty if usable)."""
        problems = []
        for name in ("signed_upload_url", "create_article_url", "update_article_url"):
            value = getattr(self, name)
            if not value:
                problems.append(f"{ENV_VARS[name]} is not set")
            elif not value.startswith(("http://", "https://")):
                problems.append(f"{ENV_VARS[name]} is not an http(s) URL: {value}")
        if self.http_timeout <= 0:
            problems.append(f"{ENV_VARS['http_timeout']} must be positive")
        return problems


def load_env_file(path: Path) -> bool:
    """Load a project .env file if present. Existing env vars win."""
    if not path.exists():
        return False
    load_dotenv(path, override=False)
    logger.debug(f"Loaded environment from {path}")
    return True


def load_config(env: Optional[Dict[str, str]] = None) -> EditorConfig:
    """
    Load configuration from master key or individual env vars.

    Priority:
    1. Individual QUILLPRESS_* environment variables
    2. QUILLPRESS_CONFIG (master JSON)
    3. Defaults
    """
    env = os.environ if env is None else env
    config = EditorConfig()

    master = env.get(MASTER_ENV_VAR)
    if master:
        try:
            data = json.loads(master)
            _apply(config, {k: data.get(k) or data.get(v) for k, v in ENV_VARS.items()})
            logger.info(f"Loaded configuration from {MASTER_ENV_VAR}")
        except json.JSONDecodeError as e:
            logger.error(f"Invalid {MASTER_ENV_VAR} JSON: {e}")
        except AttributeError:
            logger.error(f"{MASTER_ENV_VAR} must be a JSON object")

    _apply(config, {k: env.get(v) for k, v in ENV_VARS.items()})
    return config


def _apply(config: EditorConfig, values: Dict[str, Any]) -> None:
    for name, value in values.items():
        if value is None or value == "":
            continue
        if name in INT_FIELDS:
            try:
                value = int(value)
            except (TypeError, ValueError):
                logger.warning(f"Ignoring non-integer {ENV_VARS[name]}: {value!r}")
                continue
            if value < 0:
                logger.warning(f"Ignoring negative {ENV_VARS[name]}: {value}")
                continue
        elif name == "http_timeout":
            try:
                value = float(value)
            except (TypeError, ValueError):
                logger.warning(f"Ignoring non-numeric {ENV_VARS[name]}: {value!r}")
                continue
        setattr(config, name, value)
