from copy import deepcopy
from pathlib import Path
from typing import Any, Dict

import yaml

DEFAULT_CONFIG_PATH = Path("blobshowcase.config.yaml")

NETWORK_URLS: Dict[str, str] = {
    "mainnet": "https://fullnode.mainnet.sui.io:443",
    "testnet": "https://fullnode.testnet.sui.io:443",
    "devnet": "https://fullnode.devnet.sui.io:443",
    "localnet": "http://127.0.0.1:9000",
}

DEFAULT_CONFIG: Dict[str, Any] = {
    "network": "mainnet",
    "rpc_url": None,
    "owner_address": "0x18a4c45a96c15d62b82b341f18738125bf875fee86057d88589a183700601a1c",
    "blob_type": "0xfdc88f7d7cf30afab2f82e8380d11ee8f70efb90e863d1de8616fae1bb09ea77::blob::Blob",
    "page_size": 50,
    "timeout_seconds": 20,
    "max_concurrency": 8,
    "cache_ttl_seconds": 300,
    "showcase_base_url": "https://kursui.wal.app",
    "projects_per_page": 6,
    "user_agent": "blobshowcase/0.3",
}

_POSITIVE_INT_KEYS = ("page_size", "max_concurrency", "projects_per_page")
_POSITIVE_NUMBER_KEYS = ("timeout_seconds", "cache_ttl_seconds")


def _validate(config: Dict[str, Any]) -> Dict[str, Any]:
    """Check value types after merging user config over defaults."""
    for key in _POSITIVE_INT_KEYS:
        value = config[key]
        if isinstance(value, bool) or not isinstance(value, int) or value < 1:
            raise ValueError(f"Config '{key}' must be a positive integer, got {value!r}")
    for key in _POSITIVE_NUMBER_KEYS:
        value = config[key]
        if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
            raise ValueError(f"Config '{key}' must be a positive number, got {value!r}")
    for key in ("owner_address", "blob_type"):
        if not isinstance(config[key], str) or not config[key]:
            raise ValueError(f"Config '{key}' must be a non-empty string")
    return config


def merge_config(overrides: Dict[str, Any] | None = None) -> Dict[str, Any]:
    """
    Merge user overrides over the built-in defaults and validate the result.

    Unknown keys are kept so callers can carry extra settings.
    """
    merged = deepcopy(DEFAULT_CONFIG)
    merged.update(overrides or {})
    return _validate(merged)


def load_config(path: Path | None = None) -> Dict[str, Any]:
    """
    Load configuration from a YAML file.

    Args:
        path: Optional path to the config file. Defaults to blobshowcase.config.yaml

    Returns:
        Dictionary with defaults filled in

    Raises:
        FileNotFoundError: If the config file doesn't exist
        ValueError: If the file is not a mapping or a value is invalid
    """
    cfg_path = path or DEFAULT_CONFIG_PATH
    if not cfg_path.exists():
        raise FileNotFoundError(f"Config file not found: {cfg_path}")
    with cfg_path.open("r", encoding="utf-8") as f:
        config = yaml.safe_load(f)

    if config is None:
        config = {}
    if not isinstance(config, dict):
        raise ValueError("Config must be a dictionary")
    return merge_config(config)


def load_config_or_defaults(path: Path | None = None) -> Dict[str, Any]:
    """Load the config file when present, otherwise return the defaults."""
    cfg_path = path or DEFAULT_CONFIG_PATH
    if not cfg_path.exists():
        return merge_config()
    return load_config(cfg_path)


def resolve_rpc_url(config: Dict[str, Any]) -> str:
    """Return the explicit rpc_url, or the full-node URL for the configured network."""
    if config.get("rpc_url"):
        return config["rpc_url"]
    network = config.get("network", "mainnet")
    try:
        return NETWORK_URLS[network]
    except KeyError:
        raise ValueError(
            f"Unknown network '{network}'. Expected one of: {', '.join(NETWORK_URLS)}"
        ) from None
