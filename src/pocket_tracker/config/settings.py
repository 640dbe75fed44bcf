import os
from pathlib import Path
import json
from dataclasses import dataclass
from typing import Dict, Any

# Package defaults (bundled with code)
PACKAGE_CONFIG_DIR = Path(__file__).parent / "defaults"

# User configs (relative to the working directory, gitignored)
USER_CONFIG_DIR = Path(os.environ.get("POCKET_TRACKER_CONFIG_DIR", "config"))

class ConfigLoader:
    """Load configuration with user overrides"""

    @staticmethod
    def load_config(config_name: str) -> Dict[str, Any]:
        """
        Load config with fallback: user config -> default config

        Args:
            config_name: Name of the config file (e.g., 'categories.json')

        Raises:
            FileNotFoundError: If no config file was found

        Returns:
            Parsed JSON configuration
        """
        user_config_path = USER_CONFIG_DIR / config_name
        if user_config_path.exists():
            with open(user_config_path) as f:
                return json.load(f)

        default_config_path = PACKAGE_CONFIG_DIR / config_name
        if default_config_path.exists():
            with open(default_config_path) as f:
                return json.load(f)

        raise FileNotFoundError(
            f"Config file '{config_name}' not found in:\n"
            f" - {user_config_path}\n"
            f" - {default_config_path}"
        )

    @staticmethod
    def load_categories_config():
        """Load the ordered category keyword table"""
        return ConfigLoader.load_config('categories.json')

    @staticmethod
    def load_automation_config():
        """Load thresholds and sweep intervals"""
        return ConfigLoader.load_config('automation.json')


@dataclass(frozen=True)
class AutomationConfig:
    """Thresholds and sweep cadence for the automation engine"""
    recurrence_due_ratio: float = 0.9
    ninety_percent_threshold: int = 90
    exceeded_threshold: int = 100
    recurrence_interval_minutes: int = 60
    budget_interval_minutes: int = 24 * 60
    reminders_interval_minutes: int = 30

    @classmethod
    def from_dict(cls, config: Dict[str, Any]) -> "AutomationConfig":
        defaults = cls()
        thresholds = config.get("budget_thresholds", {})
        intervals = config.get("intervals_minutes", {})
        return cls(
            recurrence_due_ratio=float(config.get("recurrence_due_ratio", defaults.recurrence_due_ratio)),
            ninety_percent_threshold=int(thresholds.get("ninety-percent", defaults.ninety_percent_threshold)),
            exceeded_threshold=int(thresholds.get("exceeded", defaults.exceeded_threshold)),
            recurrence_interval_minutes=int(intervals.get("recurrence", defaults.recurrence_interval_minutes)),
            budget_interval_minutes=int(intervals.get("budget", defaults.budget_interval_minutes)),
            reminders_interval_minutes=int(intervals.get("reminders", defaults.reminders_interval_minutes)),
        )

    @classmethod
    def load(cls) -> "AutomationConfig":
        """Load from ConfigLoader, falling back to built-in defaults"""
        try:
            return cls.from_dict(ConfigLoader.load_automation_config())
        except FileNotFoundError:
            return cls()
