"""Settings manager for session-reveal settings.yaml files.

Manages three-scope settings system:
- User global (~/.session-reveal/settings.yaml)
- Project (.session-reveal/settings.yaml)
- Local (.session-reveal/settings.local.yaml)
"""

import logging
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

DEFAULT_COMMAND_TIMEOUT = 10.0


class SettingsManager:
    """Manages settings across user/project/local scopes."""

    def __init__(self, settings_dir: Path | None = None, user_settings_file: Path | None = None):
        """Initialize settings manager with standard paths.

        Args:
            settings_dir: Base directory for project/local settings (for testing).
                          If None, uses .session-reveal in current directory.
            user_settings_file: User settings file (for testing).
                          If None, uses ~/.session-reveal/settings.yaml.
        """
        if settings_dir is None:
            settings_dir = Path(".session-reveal")
        if user_settings_file is None:
            user_settings_file = Path.home() / ".session-reveal" / "settings.yaml"

        self.user_settings_file = user_settings_file
        self.project_settings_file = settings_dir / "settings.yaml"
        self.local_settings_file = settings_dir / "settings.local.yaml"

    def get_sessions_dir(self) -> Path | None:
        """Get the configured sessions directory.

        Returns:
            Expanded path from `sessions.dir`, or None to use the project default
        """
        sessions = self.get_merged_settings().get("sessions")
        if not isinstance(sessions, dict) or not sessions.get("dir"):
            return None
        return Path(str(sessions["dir"])).expanduser()

    def get_command_timeout(self) -> float:
        """Get timeout in seconds for external reveal/preview commands."""
        commands = self.get_merged_settings().get("commands")
        if not isinstance(commands, dict) or "timeout" not in commands:
            return DEFAULT_COMMAND_TIMEOUT
        try:
            timeout = float(commands["timeout"])
        except (TypeError, ValueError):
            logger.warning(f"Invalid commands.timeout value: {commands['timeout']!r}")
            return DEFAULT_COMMAND_TIMEOUT
        return timeout if timeout > 0 else DEFAULT_COMMAND_TIMEOUT

    def get_merged_settings(self) -> dict[str, Any]:
        """Get merged settings from all scopes.

        Merge order (later overrides earlier):
        1. User settings
        2. Project settings
        3. Local settings

        Returns:
            Merged settings dictionary
        """
        merged: dict[str, Any] = {}
        for path in (self.user_settings_file, self.project_settings_file, self.local_settings_file):
            settings = self._read_settings(path)
            if settings:
                merged = self._deep_merge(merged, settings)
        return merged

    def _read_settings(self, path: Path) -> dict[str, Any] | None:
        """Read settings from YAML file.

        Args:
            path: Path to settings file

        Returns:
            Settings dict or None if file doesn't exist or can't be read
        """
        if not path.exists():
            return None

        try:
            with open(path, encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            logger.warning(f"Failed to read settings from {path}: {e}")
            return None

        if data is None:
            return {}
        if not isinstance(data, dict):
            logger.warning(f"Ignoring settings file {path}: top level is not a mapping")
            return None
        return data

    def _deep_merge(self, base: dict[str, Any], overlay: dict[str, Any]) -> dict[str, Any]:
        """Deep merge overlay into base.

        Args:
            base: Base dictionary
            overlay: Overlay dictionary

        Returns:
            Merged dictionary
        """
        result = base.copy()
        for key, value in overlay.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value
        return result
