import os
import yaml
from dataclasses import dataclass, replace
from typing import Optional, Tuple

from exceptions.exceptions import ConfigurationError


def _read(path: str):
    with open(path, "r") as f:
        return yaml.safe_load(f)


@dataclass(frozen=True)
class Paths:
    node_id: str = ""
    layers_dir_suffix: str = "_layers"
    cloud_extensions: Tuple[str, ...] = (".pcd", ".ply")

@dataclass(frozen=True)
class Logging:
    level: str = "INFO"

@dataclass(frozen=True)
class Segmentation:
    radius: float = 0.6
    clusters_h: int = 4
    clusters_s: int = 4
    clusters_v: int = 4
    progress_step: int = 10_000
    workers: Optional[int] = None
    spatial_backend: str = "sklearn"


@dataclass(frozen=True)
class Config:
    paths: Paths = Paths()
    logging: Logging = Logging()
    segmentation: Segmentation = Segmentation()


def _section(current, data: dict, name: str):
    values = data.get(name, {}) or {}
    if not isinstance(values, dict):
        raise ConfigurationError(f"Config section '{name}' must be a mapping", context="load_config")
    if name == "paths" and "cloud_extensions" in values:
        values = dict(values, cloud_extensions=tuple(values["cloud_extensions"]))
    try:
        return replace(current, **values)
    except TypeError as e:
        raise ConfigurationError(f"Unknown key in config section '{name}': {e}", context="load_config") from e


def load_config(path: Optional[str]) -> Config:
    cfg = Config()
    if not path:
        return cfg
    if not os.path.isfile(path):
        raise ConfigurationError(f"Config file not found: {path}", context="load_config")
    try:
        data = _read(path) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Config file is not valid YAML: {path}", context="load_config") from e
    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file must contain a mapping: {path}", context="load_config")
    paths = _section(cfg.paths, data, "paths")
    logging = _section(cfg.logging, data, "logging")
    segmentation = _section(cfg.segmentation, data, "segmentation")
    return replace(cfg, paths=paths, logging=logging, segmentation=segmentation)
