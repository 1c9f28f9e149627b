"""Centralized configuration loading for kanvas-snapshot.

This module loads the plugin's YAML config file, merges it with environment
variables (and a local ``.env`` file) and CLI overrides, and produces a single
immutable :class:`Settings` object that is passed to every component.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from dotenv import dotenv_values
from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from kanvas_snapshot.core.errors import ConfigError

logger = logging.getLogger(__name__)

ENV_MESHERY_TOKEN = "MESHERY_TOKEN"
ENV_MESHERY_CLOUD_URL = "MESHERY_CLOUD_URL"
ENV_MESHERY_API_URL = "MESHERY_API_URL"
ENV_GITHUB_TOKEN = "GITHUB_TOKEN"

DEFAULT_MESHERY_URL = "http://localhost:9081"
DEFAULT_PAYLOAD_FORMAT = "file"
DEFAULT_DOWNLOAD_ENDPOINT = "/api/pattern/download"
DEFAULT_SNAPSHOT_NAME = "kubectl-snapshot"
DEFAULT_TIMEOUT_SECONDS = 30.0
DEFAULT_GITHUB_API_URL = "https://api.github.com"

# Endpoint used by each payload layout the Meshery API has accepted over time
DEFAULT_SNAPSHOT_ENDPOINTS = {
    "file": "/api/pattern/import",
    "manifest": "/api/k8scontext/manifest",
    "pattern": "/api/pattern",
}

LOCAL_CONFIG_PATH = Path("config") / "config.yaml"
USER_CONFIG_PATH = Path.home() / ".meshery" / "kubectl-kanvas-snapshot" / "config.yaml"


@dataclass(frozen=True)
class Settings:
    """Process-wide configuration, built once at start and read-only afterwards.

    Attributes:
        provider_token: Meshery provider token sent as a session cookie
        api_base_url: Base URL of the Meshery server
        cloud_api_base_url: Base URL of Meshery Cloud (informational)
        workflow_access_token: GitHub token used for workflow dispatch
        snapshot_endpoint: Path of the design submission endpoint
        download_endpoint: Path prefix of the design download endpoint
        payload_format: Submission body layout ("file", "manifest" or "pattern")
        timeout_seconds: Timeout applied to every outbound HTTP call
        offline_fallback_enabled: Degrade to an offline identifier instead of
            failing when Meshery cannot be reached or rejects the request
        snapshot_name: Design name used when none can be derived
        notify_on_completion: Forward the email address to Meshery and GitHub
        repo_owner: GitHub owner of the snapshot workflow ("" = default)
        repo_name: GitHub repository of the snapshot workflow ("" = default)
        branch: Git ref the workflow is dispatched on ("" = default)
        workflow: Workflow file name or id ("" = default)
        github_api_url: GitHub REST API base URL
    """
    provider_token: str = ""
    api_base_url: str = DEFAULT_MESHERY_URL
    cloud_api_base_url: str = ""
    workflow_access_token: str = ""
    snapshot_endpoint: str = DEFAULT_SNAPSHOT_ENDPOINTS[DEFAULT_PAYLOAD_FORMAT]
    download_endpoint: str = DEFAULT_DOWNLOAD_ENDPOINT
    payload_format: str = DEFAULT_PAYLOAD_FORMAT
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    offline_fallback_enabled: bool = True
    snapshot_name: str = DEFAULT_SNAPSHOT_NAME
    notify_on_completion: bool = True
    repo_owner: str = ""
    repo_name: str = ""
    branch: str = ""
    workflow: str = ""
    github_api_url: str = DEFAULT_GITHUB_API_URL


def get_config_file_path() -> Path:
    """Return the config file to use.

    ``config/config.yaml`` in the working directory wins over the per-user
    file. When neither exists the local path is returned.
    """
    if LOCAL_CONFIG_PATH.exists():
        return LOCAL_CONFIG_PATH
    if USER_CONFIG_PATH.exists():
        return USER_CONFIG_PATH
    return LOCAL_CONFIG_PATH


def load_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """Load configuration from a YAML file.

    Returns an empty dict if the file doesn't exist.

    Args:
        config_path: Path to the YAML file (default: see get_config_file_path)

    Returns:
        Configuration dictionary

    Raises:
        ConfigError: If the file exists but cannot be read or parsed
    """
    path = Path(config_path) if config_path else get_config_file_path()

    if not path.exists():
        logger.debug(f"No config file at {path}, using built-in defaults")
        return {}

    try:
        data = YAML(typ="safe").load(path.read_text(encoding="utf-8"))
    except (YAMLError, OSError) as e:
        raise ConfigError(str(e), path=str(path)) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError("top-level YAML value must be a mapping", path=str(path))

    logger.info(f"Loaded configuration from: {path}")
    return data


def get_config_value(
    keys: List[str],
    default: Any = None,
    config: Optional[Dict[str, Any]] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Any:
    """Get nested configuration value with fallback to environment variable.

    Supports keys like ["meshery", "url"] or ["defaults", "timeout_seconds"].
    Also checks environment variables as fallback (e.g. MESHERY_URL for
    meshery.url).

    Args:
        keys: List of keys to traverse
        default: Default value if key not found
        config: Optional config dict (uses load_config() if not provided)
        environ: Environment mapping (default: os.environ)

    Returns:
        Configuration value, or default if not found
    """
    if config is None:
        config = load_config()
    if environ is None:
        environ = os.environ

    value: Any = config
    for key in keys:
        if isinstance(value, dict):
            value = value.get(key)
            if value is None:
                break
        else:
            value = None
            break

    if value is not None:
        return value

    env_key = "_".join(k.upper() for k in keys)
    env_value = environ.get(env_key)
    if env_value is not None:
        return env_value

    return default


def load_env_file(env_path: str = ".env") -> Dict[str, str]:
    """Read variables from a dotenv file.

    Keys declared without a value are dropped. A missing file yields an
    empty dict.
    """
    if not Path(env_path).is_file():
        logger.debug(f"Could not open {env_path}")
        return {}
    return {key: value for key, value in dotenv_values(env_path).items() if value is not None}


def _as_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("1", "true", "yes", "on")


def _first(*values: Optional[str]) -> str:
    for value in values:
        if value:
            return value
    return ""


def load_settings(
    config: Optional[Dict[str, Any]] = None,
    environ: Optional[Mapping[str, str]] = None,
    env_file: Optional[str] = ".env",
    overrides: Optional[Dict[str, Any]] = None,
    config_path: Optional[str] = None,
) -> Settings:
    """Build the immutable Settings for one run.

    Priority per value: CLI override > environment > ``.env`` file >
    config file > built-in default.

    Args:
        config: Parsed config file (uses load_config() if not provided)
        environ: Environment mapping (default: os.environ)
        env_file: dotenv file consulted for variables missing from environ
            (None disables it)
        overrides: Values given on the command line; None/empty entries
            are ignored
        config_path: Config file the values came from, reported in errors

    Returns:
        Settings for this process

    Raises:
        ConfigError: If a value cannot be converted to its expected type
    """
    if config is None:
        config = load_config()
    env: Dict[str, str] = dict(os.environ if environ is None else environ)
    overrides = {k: v for k, v in (overrides or {}).items() if v not in (None, "")}

    if env_file:
        for key, value in load_env_file(env_file).items():
            if key in (ENV_MESHERY_TOKEN, ENV_MESHERY_CLOUD_URL, ENV_GITHUB_TOKEN, ENV_MESHERY_API_URL) \
                    and not env.get(key):
                env[key] = value
                logger.info(f"Loaded {key} from {env_file} file")

    def value(keys: List[str], default: Any) -> Any:
        return get_config_value(keys, default=default, config=config, environ=env)

    # GitHub Actions runners export GITHUB_WORKFLOW and friends with other meanings
    def file_value(keys: List[str], default: Any) -> Any:
        return get_config_value(keys, default=default, config=config, environ={})

    payload_format = str(overrides.get("payload_format") or value(["meshery", "payload_format"], DEFAULT_PAYLOAD_FORMAT))
    snapshot_endpoint = value(
        ["meshery", "snapshot_endpoint"],
        DEFAULT_SNAPSHOT_ENDPOINTS.get(payload_format, DEFAULT_SNAPSHOT_ENDPOINTS[DEFAULT_PAYLOAD_FORMAT]),
    )

    raw_timeout = value(["defaults", "timeout_seconds"], DEFAULT_TIMEOUT_SECONDS)
    try:
        timeout_seconds = float(raw_timeout)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"defaults.timeout_seconds must be a number, got {raw_timeout!r}", path=config_path) from e
    if timeout_seconds <= 0:
        raise ConfigError(f"defaults.timeout_seconds must be positive, got {raw_timeout!r}", path=config_path)

    offline_fallback = _as_bool(value(["meshery", "offline_fallback"], True))
    if overrides.get("strict"):
        offline_fallback = False

    return Settings(
        provider_token=_first(overrides.get("provider_token"), env.get(ENV_MESHERY_TOKEN)),
        api_base_url=_first(
            overrides.get("api_base_url"),
            env.get(ENV_MESHERY_API_URL),
            value(["meshery", "url"], None),
            DEFAULT_MESHERY_URL,
        ),
        cloud_api_base_url=_first(env.get(ENV_MESHERY_CLOUD_URL)),
        workflow_access_token=_first(overrides.get("workflow_access_token"), env.get(ENV_GITHUB_TOKEN)),
        snapshot_endpoint=str(snapshot_endpoint),
        download_endpoint=str(value(["meshery", "download_endpoint"], DEFAULT_DOWNLOAD_ENDPOINT)),
        payload_format=payload_format,
        timeout_seconds=timeout_seconds,
        offline_fallback_enabled=offline_fallback,
        snapshot_name=str(value(["defaults", "snapshot_name"], DEFAULT_SNAPSHOT_NAME)),
        notify_on_completion=_as_bool(value(["defaults", "notify_on_completion"], True)),
        repo_owner=_first(overrides.get("repo_owner"), file_value(["github", "repo_owner"], "")),
        repo_name=_first(overrides.get("repo_name"), file_value(["github", "repo_name"], "")),
        branch=_first(overrides.get("branch"), file_value(["github", "branch"], "")),
        workflow=_first(overrides.get("workflow"), file_value(["github", "workflow"], "")),
        github_api_url=str(file_value(["github", "api_url"], DEFAULT_GITHUB_API_URL)),
    )
