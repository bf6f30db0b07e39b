"""
Invoice Manager settings.

Every tunable of the extraction cycle (accepted upload types, render scale,
model name, store merge mode, field validation limits, logging) is read
from settings.yaml. The model credential is the one value that never lives
in the file: the file only names the environment variable holding it.
"""

import os
import yaml
from pathlib import Path
from typing import Any, Dict, Optional

PROJECT_ROOT = Path(__file__).parent.parent
DEFAULT_SETTINGS = Path(__file__).parent / "settings.yaml"


class ConfigurationManager:
    """
    Process-wide view of settings.yaml.

    The first instantiation loads the file; later ones return the same
    object and ignore their argument until reset() is called.

    Attributes:
        config_path (Path): Settings file in use.

    Example:
        >>> settings = ConfigurationManager()
        >>> settings.get("store.merge_mode")
        'replace'
        >>> settings.get("input.pdf.scale")
        2.0
    """

    _instance: Optional['ConfigurationManager'] = None
    _config: Dict[str, Any] = {}

    def __new__(cls, config_path: Optional[str] = None) -> 'ConfigurationManager':
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self, config_path: Optional[str] = None) -> None:
        """
        Load the settings file once.

        Args:
            config_path: Alternative settings file; config/settings.yaml
                         when omitted.
        """
        if self._initialized:
            return

        self.config_path = Path(config_path) if config_path else DEFAULT_SETTINGS
        self._load_config()
        self._initialized = True

    def _load_config(self) -> None:
        """
        Read and parse the settings file.

        Raises:
            FileNotFoundError: If the settings file is missing.
            yaml.YAMLError: If it is not valid YAML.
        """
        if not self.config_path.exists():
            raise FileNotFoundError(f"Settings file not found: {self.config_path}")

        with open(self.config_path, 'r', encoding='utf-8') as f:
            self._config = yaml.safe_load(f) or {}

        # A relative log file is kept under the project, not the caller's cwd
        log_file = self.get("logging.file.path")
        if log_file and not Path(log_file).is_absolute():
            self._config['logging']['file']['path'] = str(PROJECT_ROOT / log_file)

    def get(self, key: str, default: Any = None) -> Any:
        """
        Look up a dotted key such as "validation.phone_digits".

        Missing sections and keys return the default.
        """
        value = self._config
        for part in key.split('.'):
            if not isinstance(value, dict) or part not in value:
                return default
            value = value[part]
        return value

    def get_secret(self, env_key: str) -> Optional[str]:
        """
        Read a credential from the environment variable named by a setting.

        Args:
            env_key: Setting that holds the variable name
                     (e.g., "model.api_key_env").

        Returns:
            The credential, or None if the variable is unset or empty.
        """
        variable = self.get(env_key)
        if not variable:
            return None
        return os.environ.get(variable) or None

    @classmethod
    def reset(cls) -> None:
        """Forget the loaded settings; the next instantiation reloads them."""
        cls._instance = None


def get_config(key: str, default: Any = None) -> Any:
    """Shortcut for ConfigurationManager().get(key, default)."""
    return ConfigurationManager().get(key, default)


__all__ = ['ConfigurationManager', 'get_config', 'PROJECT_ROOT']
