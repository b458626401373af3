"""Load ProwlConfig from prowl.yaml if present.

Merges file config with CLI kwargs. CLI overrides file.
"""

from __future__ import annotations

import tomllib
from pathlib import Path

import yaml

from prowl._errors import ConfigError
from prowl.config import ProwlConfig

_CONFIG_KEYS: frozenset[str] = frozenset({
    "host", "port", "workers", "output", "lang", "title",
    "pages_dir", "templates_dir", "public_dir",
})


def load_config(root: Path, **overrides: object) -> ProwlConfig:
    """Load ProwlConfig from root, optionally merging prowl.yaml.

    Looks for prowl.yaml, prowl.yml, or prowl.toml in root. If found, loads
    and merges with overrides. Overrides take precedence; ``None`` overrides
    are ignored so unset CLI flags don't mask file values.

    Raises:
        ConfigError: If a config file exists but cannot be parsed.

    """
    file_config = _read_prowl_config(root)
    merged = {**file_config, **{k: v for k, v in overrides.items() if v is not None}}
    # Normalize output to Path
    if "output" in merged and not isinstance(merged["output"], Path):
        merged["output"] = Path(str(merged["output"]))
    if "port" in merged:
        merged["port"] = _as_int(merged["port"], "port")
    if "workers" in merged:
        merged["workers"] = _as_int(merged["workers"], "workers")
    return ProwlConfig(root=root, **merged)


def _as_int(value: object, key: str) -> int:
    try:
        return int(value)  # type: ignore[call-overload]
    except (TypeError, ValueError) as exc:
        msg = f"Config key {key!r} must be an integer, got {value!r}"
        raise ConfigError(msg) from exc


def _read_prowl_config(root: Path) -> dict[str, object]:
    """Read prowl config from yaml/toml if present. Returns empty dict otherwise."""
    for name in ("prowl.yaml", "prowl.yml"):
        path = root / name
        if path.is_file():
            return _parse_yaml(path)
    toml_path = root / "prowl.toml"
    if toml_path.is_file():
        return _parse_toml(toml_path)
    return {}


def _parse_yaml(path: Path) -> dict[str, object]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except (OSError, yaml.YAMLError) as exc:
        msg = f"Cannot parse {path.name}: {exc}"
        raise ConfigError(msg) from exc
    if not isinstance(data, dict):
        msg = f"{path.name} must contain a mapping at the top level"
        raise ConfigError(msg)
    return _flatten_prowl_section(data)


def _parse_toml(path: Path) -> dict[str, object]:
    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except (OSError, tomllib.TOMLDecodeError) as exc:
        msg = f"Cannot parse {path.name}: {exc}"
        raise ConfigError(msg) from exc
    return _flatten_prowl_section(data)


def _flatten_prowl_section(data: dict[str, object]) -> dict[str, object]:
    """Extract prowl.* keys into top-level config; unknown keys are dropped."""
    result: dict[str, object] = {}
    for k, v in data.items():
        if k in _CONFIG_KEYS:
            result[k] = v
    prowl = data.get("prowl")
    if isinstance(prowl, dict):
        for k, v in prowl.items():
            if k in _CONFIG_KEYS:
                result[k] = v
    return result
