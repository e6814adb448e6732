"""
Sealing configuration.

Resolved from an optional YAML or JSON file, then overridden by
environment variables:

    JOBPROOF_SEAL_ON_DISPATCH   "1"/"true"/"yes"/"on" enables sealing Pending jobs
    JOBPROOF_SEAL_BACKEND       "mock" or "live"
    JOBPROOF_SEAL_SECRET_KEY    HMAC key for the live backend

SECURITY: the secret key belongs in a secrets manager or the process
environment. Never commit it in a config file.
"""

import json
import logging
import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Literal, Mapping

import yaml

from .errors import ConfigError

logger = logging.getLogger(__name__)

BackendName = Literal["mock", "live"]

BACKENDS: tuple[str, ...] = ("mock", "live")

ENV_SEAL_ON_DISPATCH = "JOBPROOF_SEAL_ON_DISPATCH"
ENV_SEAL_BACKEND = "JOBPROOF_SEAL_BACKEND"
ENV_SEAL_SECRET_KEY = "JOBPROOF_SEAL_SECRET_KEY"

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off", ""}


@dataclass(frozen=True)
class SealConfig:
    """Options for sealing and verification."""
    seal_on_dispatch: bool = False
    backend: BackendName = "mock"
    secret_key: str | None = None
    bundle_version: str = "1.0"

    def __repr__(self) -> str:
        secret = "***" if self.secret_key else None
        return (
            f"SealConfig(seal_on_dispatch={self.seal_on_dispatch!r}, "
            f"backend={self.backend!r}, secret_key={secret!r}, "
            f"bundle_version={self.bundle_version!r})"
        )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SealConfig":
        unknown = set(data) - {"seal_on_dispatch", "backend", "secret_key", "bundle_version"}
        if unknown:
            raise ConfigError(f"Unknown config keys: {', '.join(sorted(unknown))}")

        backend = data.get("backend", "mock")
        if backend not in BACKENDS:
            raise ConfigError(f"Unsupported seal backend: {backend}. Supported: {', '.join(BACKENDS)}")

        seal_on_dispatch = data.get("seal_on_dispatch", False)
        if not isinstance(seal_on_dispatch, bool):
            raise ConfigError("seal_on_dispatch must be a boolean")

        secret_key = data.get("secret_key")
        if secret_key is not None and not isinstance(secret_key, str):
            raise ConfigError(f"secret_key must be a string, got {type(secret_key).__name__}")

        bundle_version = data.get("bundle_version", "1.0")
        if not isinstance(bundle_version, str):
            raise ConfigError(
                f"bundle_version must be a quoted string, got {type(bundle_version).__name__}"
            )

        return cls(
            seal_on_dispatch=seal_on_dispatch,
            backend=backend,
            secret_key=secret_key,
            bundle_version=bundle_version,
        )


def _load_file(path: Path) -> dict[str, Any]:
    """Read a YAML or JSON config file. An empty file is an empty mapping."""
    if not path.exists():
        raise ConfigError(f"Config file not found: {path}")

    suffix = path.suffix.lower()
    text = path.read_text(encoding="utf-8")
    try:
        if suffix in (".yaml", ".yml"):
            data = yaml.safe_load(text)
        elif suffix == ".json":
            data = json.loads(text) if text.strip() else None
        else:
            raise ConfigError(f"Unsupported config format: {suffix or '<none>'}")
    except (yaml.YAMLError, json.JSONDecodeError) as exc:
        raise ConfigError(f"Malformed config file {path}: {exc}") from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config root must be a mapping, got {type(data).__name__}")
    # Allow the settings to live under a "sealing" section of a larger file
    if isinstance(data.get("sealing"), dict):
        return dict(data["sealing"])
    return data


def _parse_bool(name: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise ConfigError(f"{name} must be a boolean flag, got {raw!r}")


def load_config(
    path: str | Path | None = None,
    env: Mapping[str, str] | None = None,
) -> SealConfig:
    """
    Resolve the effective sealing configuration.

    Args:
        path: Optional YAML/JSON file with the base settings
        env: Environment mapping (default: os.environ)

    Returns:
        SealConfig with environment overrides applied

    Raises:
        ConfigError: file missing, malformed, or values invalid
    """
    env = os.environ if env is None else env
    config = SealConfig.from_dict(_load_file(Path(path))) if path else SealConfig()

    overrides: dict[str, Any] = {}
    if ENV_SEAL_ON_DISPATCH in env:
        overrides["seal_on_dispatch"] = _parse_bool(ENV_SEAL_ON_DISPATCH, env[ENV_SEAL_ON_DISPATCH])
    if ENV_SEAL_BACKEND in env:
        backend = env[ENV_SEAL_BACKEND].strip().lower()
        if backend not in BACKENDS:
            raise ConfigError(f"{ENV_SEAL_BACKEND} must be one of {', '.join(BACKENDS)}, got {backend!r}")
        overrides["backend"] = backend
    if env.get(ENV_SEAL_SECRET_KEY):
        overrides["secret_key"] = env[ENV_SEAL_SECRET_KEY]

    if overrides:
        config = replace(config, **overrides)

    logger.debug("Resolved seal config: %r", config)
    return config
