"""Core utilities and configuration exports."""

from .config import ConfigError, ForgeConfig, load_forge_config, locate_project_root
from .git_ops import GitClient, GitCommandResult

__all__ = [
    "ConfigError",
    "ForgeConfig",
    "GitClient",
    "GitCommandResult",
    "load_forge_config",
    "locate_project_root",
]
