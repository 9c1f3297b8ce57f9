"""Project configuration stored in ``.forge/config.yaml``.

The resolved :class:`ForgeConfig` is passed explicitly to whatever needs it;
nothing here keeps process-wide state.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

__all__ = [
    "ConfigError",
    "ForgeConfig",
    "PROJECT_ROOT_ENV",
    "DEFAULT_INSTRUCTIONS_FILE",
    "DEFAULT_CUSTOM_COMMANDS_DIR",
    "DEFAULT_ISSUE_TRACKER",
    "locate_project_root",
    "detect_package_manager",
    "load_forge_config",
]

PROJECT_ROOT_ENV = "FORGE_PROJECT_ROOT"
DEFAULT_INSTRUCTIONS_FILE = "AGENTS.md"
DEFAULT_CUSTOM_COMMANDS_DIR = ".claude/commands/custom"
DEFAULT_ISSUE_TRACKER = "bd"

# Checked in order; the first lockfile found wins.
_LOCKFILES: tuple[tuple[str, str], ...] = (
    ("bun.lockb", "bun"),
    ("bun.lock", "bun"),
    ("pnpm-lock.yaml", "pnpm"),
    ("yarn.lock", "yarn"),
    ("package-lock.json", "npm"),
)


class ConfigError(RuntimeError):
    """Raised when project configuration cannot be resolved."""


@dataclass(frozen=True)
class ForgeConfig:
    project_root: Path
    instructions_file: str = DEFAULT_INSTRUCTIONS_FILE
    custom_commands_dir: str = DEFAULT_CUSTOM_COMMANDS_DIR
    issue_tracker: str | None = DEFAULT_ISSUE_TRACKER
    package_manager: str = "npm"

    @property
    def instructions_path(self) -> Path:
        return self.project_root / self.instructions_file

    @property
    def custom_commands_path(self) -> Path:
        """Custom command directory, relative to the instructions file."""
        return self.instructions_path.parent / self.custom_commands_dir

    @property
    def config_path(self) -> Path:
        return _config_path(self.project_root)

    def to_dict(self) -> dict[str, object]:
        return {
            "project_root": str(self.project_root),
            "package_manager": self.package_manager,
            "rollback": {
                "instructions_file": self.instructions_file,
                "custom_commands_dir": self.custom_commands_dir,
                "issue_tracker": self.issue_tracker or "",
            },
        }

    @classmethod
    def from_dict(cls, project_root: Path, data: dict[str, object] | None) -> "ForgeConfig":
        if not isinstance(data, dict):
            data = {}

        rollback = data.get("rollback")
        if rollback is not None and not isinstance(rollback, dict):
            raise ConfigError("'rollback' must be a mapping")
        rollback = rollback or {}

        def _text(source: dict, key: str, default: str) -> str:
            value = source.get(key)
            if value is None:
                return default
            if not isinstance(value, str):
                raise ConfigError(f"'{key}' must be a string")
            return value.strip() or default

        tracker = rollback.get("issue_tracker", DEFAULT_ISSUE_TRACKER)
        if tracker is not None and not isinstance(tracker, str):
            raise ConfigError("'issue_tracker' must be a string")

        package_manager = data.get("package_manager")
        if package_manager is not None and not isinstance(package_manager, str):
            raise ConfigError("'package_manager' must be a string")

        return cls(
            project_root=project_root,
            instructions_file=_text(rollback, "instructions_file", DEFAULT_INSTRUCTIONS_FILE),
            custom_commands_dir=_text(rollback, "custom_commands_dir", DEFAULT_CUSTOM_COMMANDS_DIR),
            issue_tracker=(tracker or "").strip() or None,
            package_manager=(package_manager or "").strip() or detect_package_manager(project_root),
        )


def _config_path(project_root: Path) -> Path:
    return project_root / ".forge" / "config.yaml"


def locate_project_root(start: Path | None = None) -> Path | None:
    """Find the nearest directory containing ``.git`` or ``.forge``.

    ``FORGE_PROJECT_ROOT`` takes precedence when set.
    """
    override = os.environ.get(PROJECT_ROOT_ENV, "").strip()
    if override:
        return Path(override).expanduser().resolve()

    current = (start or Path.cwd()).resolve()
    for candidate in (current, *current.parents):
        if (candidate / ".git").exists() or (candidate / ".forge").is_dir():
            return candidate
    return None


def detect_package_manager(project_root: Path) -> str:
    for lockfile, manager in _LOCKFILES:
        if (project_root / lockfile).exists():
            return manager
    return "npm"


def load_forge_config(project_root: Path | None = None) -> ForgeConfig:
    """Resolve configuration for the project containing ``project_root`` (or cwd)."""
    root = project_root.resolve() if project_root is not None else locate_project_root()
    if root is None:
        raise ConfigError("Not inside a git repository. Run forge from your project root.")

    config_path = _config_path(root)
    if not config_path.exists():
        return ForgeConfig.from_dict(root, None)

    yaml = YAML(typ="safe")
    try:
        with config_path.open("r", encoding="utf-8") as handle:
            payload = yaml.load(handle) or {}
    except YAMLError as exc:
        raise ConfigError(f"Failed to parse {config_path}: {exc}") from exc

    if not isinstance(payload, dict):
        raise ConfigError(f"{config_path} must contain a mapping")
    return ForgeConfig.from_dict(root, payload)
