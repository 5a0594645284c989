"""
Settings for the progchain command line.

A YAML file may provide defaults:

    templates_dir: ./templates/
    output: ./graph.dot
    mode: detailed
    output_format: dot
    seed: [domain]

The file is merged onto the Settings schema with OmegaConf, so unknown keys
and wrongly typed values (a bare string where a list is expected) are
rejected. Command-line flags override whatever the file sets.
"""

from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional

import yaml
from omegaconf import OmegaConf
from omegaconf.errors import OmegaConfBaseException

from progchain.backends.dot_generator import DotMode

OUTPUT_FORMATS = ("dot", "json", "yaml")
MODES = tuple(m.value for m in DotMode)


@dataclass
class Settings:
    templates_dir: str = "./templates/"
    output: str = "./graph.dot"
    mode: str = DotMode.SIMPLE.value
    output_format: str = "dot"
    seed: List[str] = field(default_factory=list)

    def merged(self, **overrides: Any) -> "Settings":
        """Copy with every non-None override applied."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})

    @property
    def dot_mode(self) -> DotMode:
        return DotMode(self.mode)


def settings_from_dict(d: Dict[str, Any]) -> Settings:
    """
    Raises:
        ValueError: On unknown keys or invalid values
    """
    try:
        cfg = OmegaConf.merge(OmegaConf.structured(Settings), d)
        settings = OmegaConf.to_object(cfg)
    except OmegaConfBaseException as e:
        raise ValueError(f"Invalid settings: {e}") from e

    if settings.mode not in MODES:
        raise ValueError(f"mode must be one of {MODES}, got {settings.mode!r}")
    if settings.output_format not in OUTPUT_FORMATS:
        raise ValueError(f"output_format must be one of {OUTPUT_FORMATS}, got {settings.output_format!r}")
    return settings


def load_settings(path: Optional[str] = None) -> Settings:
    """Read settings from a YAML file, or return defaults when path is None."""
    if path is None:
        return Settings()
    with open(path, "r", encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid settings file {path}: {e}") from e
    if not isinstance(data, dict):
        raise ValueError(f"Settings file {path} must contain a mapping")
    return settings_from_dict(data)
