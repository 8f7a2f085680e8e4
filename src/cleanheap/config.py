"""Cleaner configuration loading."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path  # noqa: TC003 - used at runtime
from typing import Any

from cleanheap.observability.logging import get_logger
from cleanheap.snapshot.classifier import WEAK_RETAINER_NAMES

log = get_logger(__name__)

DEFAULT_OUTPUT_SUFFIX = ".clean"


class ConfigError(Exception):
    """Raised when a configuration file can't be loaded."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to load config {path}: {reason}")


@dataclass
class CleanerConfig:
    """Configuration for a cleaning run.

    Attributes:
        weak_retainer_names: Constructor names whose outgoing edges are removed.
        output_suffix: Inserted before the input's extension to derive the
            default output path.
        collect_between_fields: Force a garbage collection after each
            top-level field is written.
    """

    weak_retainer_names: frozenset[str] = field(default_factory=lambda: WEAK_RETAINER_NAMES)
    output_suffix: str = DEFAULT_OUTPUT_SUFFIX
    collect_between_fields: bool = True

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CleanerConfig:
        """Create config from dictionary.

        Args:
            data: Dictionary with optional keys:
                - weak_retainers: List of constructor names (replaces the defaults)
                - extra_weak_retainers: List of names added to the defaults
                - output_suffix: Suffix for the default output path
                - collect_between_fields: Bool

        Returns:
            CleanerConfig instance.

        Raises:
            ValueError: If a value has the wrong shape.
        """
        names = data.get("weak_retainers")
        if names is None:
            retainers = set(WEAK_RETAINER_NAMES)
        elif isinstance(names, list) and all(isinstance(n, str) for n in names):
            retainers = set(names)
        else:
            raise ValueError("weak_retainers must be a list of strings")

        extra = data.get("extra_weak_retainers", [])
        if not isinstance(extra, list) or not all(isinstance(n, str) for n in extra):
            raise ValueError("extra_weak_retainers must be a list of strings")
        retainers.update(extra)

        suffix = data.get("output_suffix", DEFAULT_OUTPUT_SUFFIX)
        if not isinstance(suffix, str) or not suffix.startswith(".") or len(suffix) < 2:
            raise ValueError(f"output_suffix must look like '.clean', got {suffix!r}")

        return cls(
            weak_retainer_names=frozenset(retainers),
            output_suffix=suffix,
            collect_between_fields=bool(data.get("collect_between_fields", True)),
        )


def load_config(config_path: Path) -> CleanerConfig:
    """Load cleaner configuration from a YAML file.

    Args:
        config_path: Path to the YAML config file.

    Returns:
        Loaded CleanerConfig.

    Raises:
        ConfigError: If the file is missing, unparsable, or invalid.
    """
    from ruamel.yaml import YAML
    from ruamel.yaml.error import YAMLError

    if not config_path.exists():
        raise ConfigError(config_path, "file not found")

    yaml = YAML(typ="safe")
    try:
        with config_path.open("r", encoding="utf-8") as f:
            data = yaml.load(f)
    except (OSError, YAMLError) as e:
        raise ConfigError(config_path, str(e)) from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(config_path, "expected a mapping at the top level")

    try:
        config = CleanerConfig.from_dict(data)
    except ValueError as e:
        raise ConfigError(config_path, str(e)) from e

    log.debug("config_loaded", path=str(config_path), retainers=sorted(config.weak_retainer_names))
    return config


def default_output_path(input_path: Path, suffix: str = DEFAULT_OUTPUT_SUFFIX) -> Path:
    """Derive the output path by inserting ``suffix`` before the extension.

    ``heap.heapsnapshot`` becomes ``heap.clean.heapsnapshot``. A path without
    an extension gets the suffix appended.
    """
    if input_path.suffix:
        return input_path.with_name(f"{input_path.stem}{suffix}{input_path.suffix}")
    return input_path.with_name(f"{input_path.name}{suffix}")
