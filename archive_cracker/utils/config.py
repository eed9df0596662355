"""
Configuration handling for the Archive Password Cracker.
"""

import os
import json
import multiprocessing
from typing import Dict, Any, List, Optional, Union
from archive_cracker.utils.exceptions import ConfigError


CHECKER_STRATEGIES = ("auto", "zip", "7z", "pdf")


class Config:
    """Configuration manager for the archive password cracker"""

    DEFAULT_CONFIG = {
        "workers": None,  # Use CPU count - 1 by default
        "queue_size": None,  # Same as the number of workers
        "backoff": 0.1,  # seconds
        "max_retries": 100,
        "checker": "auto",
        "sevenzip_path": "7z",
        "sizes": [6, 1, 2, 3, 4, 5, 7, 8],
        "charsets": None,  # Use the default catalog
        "progress_interval": 1000000,
        "progress_bar": True,
        "track_guesses": False,
        "verbosity": "info",
        "log_file": None,
    }

    def __init__(self, config_path: Optional[str] = None):
        """Initialize with optional path to config file"""
        self.config = self.DEFAULT_CONFIG.copy()
        self.config_path = config_path or os.path.expanduser("~/.archive_cracker_config.json")

        if os.path.exists(self.config_path):
            self.load()

    def load(self) -> None:
        """Load configuration from file"""
        try:
            with open(self.config_path, 'r') as f:
                user_config = json.load(f)
        except (OSError, ValueError) as e:
            raise ConfigError(f"Error loading config file: {e}")
        if not isinstance(user_config, dict):
            raise ConfigError(f"Config file must contain a JSON object: {self.config_path}")
        self.config.update(user_config)

    def save(self) -> None:
        """Save current configuration to file"""
        try:
            config_dir = os.path.dirname(self.config_path)
            if config_dir:
                os.makedirs(config_dir, exist_ok=True)

            with open(self.config_path, 'w') as f:
                json.dump(self.config, f, indent=2)
        except (OSError, TypeError) as e:
            raise ConfigError(f"Error saving config file: {e}")

    def get(self, key: str, default: Any = None) -> Any:
        """Get a configuration value"""
        return self.config.get(key, default)

    def set(self, key: str, value: Any) -> None:
        """Set a configuration value"""
        self.config[key] = value

    def update(self, config_dict: Dict[str, Any]) -> None:
        """Update multiple configuration values"""
        self.config.update(config_dict)

    def as_dict(self) -> Dict[str, Any]:
        """Return the configuration as a dictionary"""
        return self.config.copy()

    def worker_count(self) -> int:
        """Number of worker threads, falling back to CPU count - 1"""
        workers = self.config.get("workers")
        if workers is None:
            return max(1, multiprocessing.cpu_count() - 1)
        if not isinstance(workers, int) or workers < 1:
            raise ConfigError(f"workers must be a positive integer, got {workers!r}")
        return workers

    def queue_size(self) -> int:
        """Capacity of the candidate queue"""
        size = self.config.get("queue_size")
        if size is None:
            return self.worker_count()
        if not isinstance(size, int) or size < 1:
            raise ConfigError(f"queue_size must be a positive integer, got {size!r}")
        return size

    def sizes(self) -> List[int]:
        """The length plan"""
        sizes = self.config.get("sizes")
        if not sizes:
            raise ConfigError("sizes must list at least one password length")
        for size in sizes:
            if not isinstance(size, int) or size < 1:
                raise ConfigError(f"Invalid password length: {size!r}")
        return list(sizes)

    def checker(self) -> str:
        """Checker strategy name"""
        strategy = self.config.get("checker", "auto")
        if strategy not in CHECKER_STRATEGIES:
            raise ConfigError(
                f"Unknown checker {strategy!r}, expected one of {', '.join(CHECKER_STRATEGIES)}"
            )
        return strategy

    def __getitem__(self, key: str) -> Any:
        """Allow dictionary-like access to configuration"""
        return self.config[key]

    def __setitem__(self, key: str, value: Any) -> None:
        """Allow dictionary-like setting of configuration"""
        self.config[key] = value

    def __contains__(self, key: str) -> bool:
        """Allow 'in' operator on configuration"""
        return key in self.config


def verbosity_to_level(verbosity: Union[str, int]) -> int:
    """Convert verbosity string to logging level

    Args:
        verbosity: Verbosity string or logging level integer

    Returns:
        Logging level as integer
    """
    if isinstance(verbosity, int):
        return verbosity

    levels = {
        "debug": 10,
        "info": 20,
        "warning": 30,
        "error": 40,
        "critical": 50
    }

    return levels.get(verbosity.lower(), 20)  # Default to INFO
