"""Directory-of-TOML loading shared by simulation configs."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, TypeVar
import tomllib


@dataclass(frozen=True)
class BaseSystemConfig:
    """Name, description and source file of one configured system."""

    name: str
    description: str | None
    file_path: Path

    def as_config_json(self) -> dict[str, Any]:
        raise NotImplementedError


T = TypeVar("T", bound=BaseSystemConfig)


def _config_files(config_dir: Path) -> list[Path]:
    if not config_dir.exists():
        raise FileNotFoundError(f"Config directory not found: {config_dir}")
    if not config_dir.is_dir():
        raise NotADirectoryError(f"Config path is not a directory: {config_dir}")

    files = sorted(config_dir.glob("*.toml"))
    if not files:
        raise ValueError(f"No .toml config files found in: {config_dir}")
    return files


def _read_toml(file_path: Path) -> dict[str, Any]:
    try:
        with file_path.open("rb") as file:
            return tomllib.load(file)
    except tomllib.TOMLDecodeError as exc:
        raise ValueError(f"{file_path}: invalid TOML ({exc})") from exc


def load_system_configs(
    config_dir: Path,
    parser: Callable[[dict[str, Any], Path], T],
    *,
    duplicate_name_label: str = "simulation",
) -> list[T]:
    """Parse every *.toml file in `config_dir`, in file-name order.

    System names must be unique across the directory; the error lists each
    clashing name with the files that declare it.
    """
    systems = [parser(_read_toml(file_path), file_path) for file_path in _config_files(config_dir)]

    files_by_name: dict[str, list[str]] = defaultdict(list)
    for system in systems:
        files_by_name[system.name].append(system.file_path.name)
    clashes = {name: files for name, files in files_by_name.items() if len(files) > 1}
    if clashes:
        raise ValueError(f"Duplicate {duplicate_name_label} system names found in {config_dir}: {clashes}")

    return systems


def parse_system_metadata(raw: dict[str, Any], file_path: Path) -> tuple[str, str | None]:
    """Return the required [system].name and optional description."""
    system_raw = raw.get("system", {})

    name = str(system_raw.get("name", "")).strip()
    if not name:
        raise ValueError(f"{file_path}: [system].name is required")

    description = system_raw.get("description")
    return name, None if description is None else str(description)


__all__ = ["BaseSystemConfig", "load_system_configs", "parse_system_metadata"]
