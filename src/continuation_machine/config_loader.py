"""
Config Loader - Load machine settings from config files.

Source defines structure (which knobs exist); config files define values.

Usage:
    from continuation_machine.config_loader import load_machine_config, load_preset

    config = load_machine_config()                      # default config file
    config = load_machine_config("path/to/custom.json")
    config = load_machine_config(preset="probe")

File layout:
    {
      "machine": {"max_level": 9, "abort_hook": "raise"},
      "presets": {"probe": {"abort_hook": "application_count"}}
    }
"""

import json
from pathlib import Path
from typing import Any, Dict, Optional, Union

from continuation_machine.abort import DEFAULT_ABORT_HOOK, get_abort_hook, hook_name
from continuation_machine.errors import ConfigError
from continuation_machine.machine import MachineConfig
from continuation_machine.scheduler import DEFAULT_MAX_LEVEL


# Default config location (repository root)
DEFAULT_CONFIG_PATH = Path(__file__).parent.parent.parent / "config" / "machine.json"

PathLike = Union[str, Path]


def load_config(config_path: Optional[PathLike] = None) -> Dict[str, Any]:
    """Load the full config file; {} when missing."""
    path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH

    if not path.exists():
        # Code defaults apply
        return {}

    with open(path) as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigError(f"{path}: invalid JSON ({e})") from e
    if not isinstance(data, dict):
        raise ConfigError(f"{path}: top level must be an object")
    return data


def load_preset(preset_name: str, config_path: Optional[PathLike] = None) -> Dict[str, Any]:
    """
    Load a preset by name.

    Unlike an absent config file, an unknown preset is an error: the
    caller asked for something specific.
    """
    presets = load_config(config_path).get("presets", {})
    if preset_name not in presets:
        known = ", ".join(sorted(presets)) or "none"
        raise ConfigError(f"unknown preset '{preset_name}' (known: {known})")
    return presets[preset_name]


def config_from_dict(values: Dict[str, Any]) -> MachineConfig:
    unknown = set(values) - {"max_level", "abort_hook"}
    if unknown:
        raise ConfigError(f"unknown machine settings: {', '.join(sorted(unknown))}")
    return MachineConfig(
        max_level=values.get("max_level", DEFAULT_MAX_LEVEL),
        abort_hook=get_abort_hook(values.get("abort_hook", DEFAULT_ABORT_HOOK)),
    )


def load_machine_config(
    config_path: Optional[PathLike] = None,
    preset: Optional[str] = None,
) -> MachineConfig:
    """
    Build a MachineConfig from the config file.

    Preset values override the "machine" section, which overrides code
    defaults.
    """
    config = load_config(config_path)
    values = dict(config.get("machine", {}))
    if preset:
        values.update(load_preset(preset, config_path))
    return config_from_dict(values)


def save_machine_config(
    machine_config: MachineConfig,
    config_path: Optional[PathLike] = None,
) -> None:
    """
    Save the machine section back to the config file.

    Preserves existing presets. Only named abort hooks can be saved.
    """
    path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH

    existing = load_config(path)
    existing["machine"] = {
        "max_level": machine_config.max_level,
        "abort_hook": hook_name(machine_config.abort_hook),
    }

    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, "w") as f:
        json.dump(existing, f, indent=2)


def get_config_path() -> Path:
    """Return the default config path for reference."""
    return DEFAULT_CONFIG_PATH
