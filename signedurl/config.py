from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, Literal, Optional

import yaml
from pydantic import BaseModel

from .constants import CONFIG_PATH_ENV, KEY_BACKEND_ENV, KEY_ID_ENV, KEY_PATH_PREFIX


class FilesystemKeysConfig(BaseModel):
    """Configuration for the PEM directory key backend."""

    root: str = "keys"


class SsmKeysConfig(BaseModel):
    """Configuration for the AWS SSM Parameter Store key backend."""

    region_name: Optional[str] = None
    profile_name: Optional[str] = None


class KeysConfig(BaseModel):
    """Key provider configuration settings."""

    backend: Literal["inmemory", "filesystem", "ssm"] = "ssm"
    path_prefix: str = KEY_PATH_PREFIX
    filesystem: FilesystemKeysConfig = FilesystemKeysConfig()
    ssm: SsmKeysConfig = SsmKeysConfig()


class SignedUrlConfig(BaseModel):
    """Top-level configuration model."""

    key_id: Optional[str] = None
    keys: KeysConfig = KeysConfig()


def _read_yaml(path: Path) -> Dict[str, Any]:
    if not path.is_file():
        return {}
    return yaml.safe_load(path.read_text()) or {}


def load_config(path: Optional[str] = None) -> SignedUrlConfig:
    """Build the configuration from a YAML file and the environment.

    The file is ``path``, else the SIGNEDURL_CONFIG env variable, else
    'config.yaml' in the current directory; a missing file means defaults.
    DIGITAL_SIGNATURE_KEY_ID and SIGNEDURL_KEY_BACKEND take precedence over
    the file's ``key_id`` and ``keys.backend``.
    """

    data = _read_yaml(Path(path or os.getenv(CONFIG_PATH_ENV, "config.yaml")))

    key_id = os.getenv(KEY_ID_ENV)
    if key_id:
        data["key_id"] = key_id
    backend = os.getenv(KEY_BACKEND_ENV)
    if backend:
        data["keys"] = {**(data.get("keys") or {}), "backend": backend.lower()}

    return SignedUrlConfig.model_validate(data)
