from __future__ import annotations

"""
Configuration Domain Management.

Runtime settings as a plain dictionary: built-in defaults, overlaid with
an optional JSON file from the user data directory and the GITHUB_TOKEN
environment variable. validate_config() normalizes untrusted input and
reports what it had to fix.
"""

import json
import logging
import os
from typing import Any, Dict, List, Optional, Tuple

from gitfs.infra.fs import get_user_data_dir

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# Constants & Defaults
# -----------------------------------------------------------------------------
CONFIG_FILENAME = "config.json"
ENV_TOKEN = "GITHUB_TOKEN"

DEFAULT_API_HOSTS: Dict[str, str] = {
    "github.com": "https://api.github.com",
}


def get_default_config() -> Dict[str, Any]:
    """
    Generate the default runtime configuration.

    Returns:
        Dict[str, Any]: Default configuration values.
    """
    return {
        # Remote access
        "api_hosts": dict(DEFAULT_API_HOSTS),
        "token": "",
        "timeout": 10.0,

        # Tree construction
        "prefetch": False,
        "max_workers": 8,
        "glob_patterns": [],

        # Diagnostics
        "log_level": "INFO",
        "log_file": "",
    }


def get_config_path() -> str:
    return os.path.join(get_user_data_dir(create=False), CONFIG_FILENAME)


# -----------------------------------------------------------------------------
# Persistence Logic
# -----------------------------------------------------------------------------
def load_config(path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load the configuration: defaults, then the JSON file, then environment.

    A missing or corrupt file is not an error; defaults are used instead.

    Args:
        path: Explicit config file. Defaults to ~/.gitfs/config.json.

    Returns:
        Dict[str, Any]: The merged (not yet validated) configuration.
    """
    config = get_default_config()
    config_path = path or get_config_path()

    if os.path.exists(config_path):
        try:
            with open(config_path, "r", encoding="utf-8") as f:
                data = json.load(f)
            if isinstance(data, dict):
                config.update(data)
            else:
                logger.warning(f"Corrupted config file {config_path}. Using defaults.")
        except (OSError, ValueError) as e:
            logger.error(f"Failed to load config {config_path}: {e}. Using defaults.")
    else:
        logger.debug("Config file not found. Using defaults.")

    token = os.environ.get(ENV_TOKEN)
    if token and not config.get("token"):
        config["token"] = token

    return config


def save_config(config: Dict[str, Any], path: Optional[str] = None) -> None:
    """Persist `config` as JSON. Failures are logged, not raised."""
    config_path = path or get_config_path()
    try:
        os.makedirs(os.path.dirname(config_path), exist_ok=True)
        with open(config_path, "w", encoding="utf-8") as f:
            json.dump(config, f, ensure_ascii=False, indent=4)
        logger.debug(f"Configuration saved to {config_path}")
    except OSError as e:
        logger.error(f"Failed to save configuration: {e}")


# -----------------------------------------------------------------------------
# Validation
# -----------------------------------------------------------------------------
def validate_config(
        config: Any,
        *,
        strict: bool = False,
) -> Tuple[Dict[str, Any], List[str]]:
    """
    Validate and normalize a configuration dictionary.

    Args:
        config: Raw configuration (untrusted input).
        strict: Raise TypeError/ValueError instead of falling back.

    Returns:
        Tuple[Dict, List[str]]: (Normalized Config, List of Warnings).
    """
    warnings: List[str] = []
    defaults = get_default_config()

    if not isinstance(config, dict):
        msg = f"Invalid config type: expected dict, received {type(config).__name__}."
        if strict:
            raise TypeError(msg)
        warnings.append(f"{msg} Using defaults.")
        logger.warning(msg)
        return defaults, warnings

    merged: Dict[str, Any] = dict(defaults)
    merged.update(config)

    for field in ("token", "log_level", "log_file"):
        merged[field] = _as_str(merged.get(field), defaults[field], field, warnings, strict)
    merged["log_level"] = merged["log_level"].upper()

    merged["prefetch"] = _as_bool(merged.get("prefetch"), defaults["prefetch"], "prefetch", warnings, strict)
    merged["timeout"] = _as_positive_number(merged.get("timeout"), defaults["timeout"], "timeout", warnings, strict)
    merged["max_workers"] = int(_as_positive_number(
        merged.get("max_workers"), defaults["max_workers"], "max_workers", warnings, strict
    ))
    merged["glob_patterns"] = _as_list_str(
        merged.get("glob_patterns"), defaults["glob_patterns"], "glob_patterns", warnings, strict
    )
    merged["api_hosts"] = _as_host_map(merged.get("api_hosts"), defaults["api_hosts"], warnings, strict)

    return merged, warnings


def _as_str(value: Any, fallback: str, field: str, warnings: List[str], strict: bool) -> str:
    if value is None:
        return fallback
    if isinstance(value, str):
        return value.strip()
    msg = f"Invalid field '{field}': expected str, received {type(value).__name__}."
    if strict:
        raise TypeError(msg)
    warnings.append(f"{msg} Using fallback.")
    return fallback


def _as_bool(value: Any, fallback: bool, field: str, warnings: List[str], strict: bool) -> bool:
    if isinstance(value, bool):
        return value
    if value is None:
        return fallback

    if not strict and isinstance(value, str):
        s = value.strip().lower()
        if s in ("true", "1", "yes", "y"):
            warnings.append(f"Field '{field}' converted from '{value}' to True.")
            return True
        if s in ("false", "0", "no", "n"):
            warnings.append(f"Field '{field}' converted from '{value}' to False.")
            return False

    msg = f"Invalid field '{field}': expected bool, received {type(value).__name__}."
    if strict:
        raise TypeError(msg)
    warnings.append(f"{msg} Using fallback.")
    return fallback


def _as_positive_number(value: Any, fallback: float, field: str, warnings: List[str], strict: bool) -> float:
    if value is None:
        return fallback
    if isinstance(value, bool) or not isinstance(value, (int, float, str)):
        msg = f"Invalid field '{field}': expected number, received {type(value).__name__}."
        if strict:
            raise TypeError(msg)
        warnings.append(f"{msg} Using fallback.")
        return fallback
    try:
        number = float(value)
    except ValueError:
        number = 0.0
    if number <= 0:
        msg = f"Invalid field '{field}': expected a positive number, received {value!r}."
        if strict:
            raise ValueError(msg)
        warnings.append(f"{msg} Using fallback.")
        return fallback
    return number


def _as_list_str(value: Any, fallback: List[str], field: str, warnings: List[str], strict: bool) -> List[str]:
    if value is None:
        return list(fallback)

    if isinstance(value, str) and not strict:
        items = [x.strip() for x in value.split(",") if x.strip()]
        warnings.append(f"Field '{field}' converted from CSV string to list.")
        return items

    if isinstance(value, list):
        out: List[str] = []
        for i, item in enumerate(value):
            if isinstance(item, str) and item.strip():
                out.append(item.strip())
            else:
                msg = f"Invalid item in '{field}[{i}]': expected non-empty str."
                if strict:
                    raise TypeError(msg)
                warnings.append(f"{msg} Item discarded.")
        return out

    msg = f"Invalid field '{field}': expected list[str], received {type(value).__name__}."
    if strict:
        raise TypeError(msg)
    warnings.append(f"{msg} Using fallback.")
    return list(fallback)


def _as_host_map(value: Any, fallback: Dict[str, str], warnings: List[str], strict: bool) -> Dict[str, str]:
    if value is None:
        return dict(fallback)
    if not isinstance(value, dict):
        msg = f"Invalid field 'api_hosts': expected dict, received {type(value).__name__}."
        if strict:
            raise TypeError(msg)
        warnings.append(f"{msg} Using fallback.")
        return dict(fallback)

    out: Dict[str, str] = {}
    for host, url in value.items():
        if isinstance(host, str) and isinstance(url, str) and url.strip():
            out[host.strip()] = url.strip().rstrip("/")
        else:
            msg = f"Invalid entry in 'api_hosts' for {host!r}."
            if strict:
                raise TypeError(msg)
            warnings.append(f"{msg} Entry discarded.")
    return out
