"""
NEOTERMINAL Configuration Loader

Configuration management for a shell session:
- JSON configuration file loading
- Configuration validation
- Default value handling
- Runtime configuration updates via dot-notation keys

The configuration object is passed explicitly to the session, filesystem
and processor; there is no process-wide configuration instance.

Author: NEOTERMINAL Team
Version: 1.0.0
"""

import json
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Optional, List

from neoterminal.exceptions import ConfigValidationError
from neoterminal.logger import LogLevel, get_logger


DEFAULT_WELCOME_MESSAGE = (
    "WELCOME TO NEOTERMINAL\n\n"
    "You have been recruited by GHOST//SIGNAL, a hacktivist collective\n"
    "fighting against corporate control of cyberspace.\n\n"
    'Type "help" for a list of available commands.\n'
    'Type "missions" to view your current objectives.\n'
)


@dataclass
class FilesystemConfig:
    """Initial layout of the virtual filesystem."""
    home_directory: str = "/home/user"
    initial_directories: List[str] = field(default_factory=lambda: [
        "/home/user/missions",
        "/home/user/docs",
        "/home/user/tools",
        "/sys",
        "/net",
        "/data",
    ])
    default_owner: str = "user"
    default_group: str = "user"
    welcome_file: Optional[str] = "/home/user/README.txt"
    welcome_message: str = DEFAULT_WELCOME_MESSAGE


@dataclass
class ShellConfig:
    """Shell and command pipeline settings."""
    user: str = "user"
    hostname: str = "neoterminal"
    history_size: int = 1000
    command_timeout: Optional[float] = None
    numeric_command: str = "_numeric"
    fallback_command: str = "_command_choice"
    response_command: str = "_response"


@dataclass
class LoggingConfig:
    """Logging configuration settings."""
    level: str = "WARNING"
    log_file: Optional[str] = None
    console_output: bool = True
    use_colors: bool = True


@dataclass
class Config:
    """
    Main configuration container.

    Holds all configuration settings for a session.
    """
    filesystem: FilesystemConfig = field(default_factory=FilesystemConfig)
    shell: ShellConfig = field(default_factory=ShellConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    environment: dict[str, str] = field(default_factory=lambda: {
        "HOME": "/home/user",
        "USER": "user",
        "SHELL": "/bin/neosh",
        "TERM": "xterm-256color",
    })


_SECTIONS = {
    'filesystem': FilesystemConfig,
    'shell': ShellConfig,
    'logging': LoggingConfig,
}


class ConfigLoader:
    """
    Configuration loader and manager.

    Handles loading configuration from JSON files, validating
    settings, and providing runtime configuration access.

    Example:
        >>> loader = ConfigLoader()
        >>> config = loader.load('neoterminal.json')
        >>> config.shell.history_size
        1000
    """

    def __init__(self, config: Optional[Config] = None):
        self._config = config or Config()
        self._loaded = config is not None
        self._logger = get_logger('config')

    def load(self, config_path: str) -> Config:
        """
        Load configuration from a JSON file.

        Args:
            config_path: Path to the configuration file

        Returns:
            Config object with loaded settings

        Raises:
            ConfigValidationError: If the file cannot be loaded, parsed or validated
        """
        path = Path(config_path)

        if not path.exists():
            raise ConfigValidationError(
                f"Configuration file not found: {config_path}"
            )

        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigValidationError(
                f"Invalid JSON in configuration file: {e}"
            ) from e
        except OSError as e:
            raise ConfigValidationError(
                f"Cannot read configuration file: {e}"
            ) from e

        config = self.from_dict(data)
        self._logger.info("Configuration loaded", context={'path': str(path)})
        return config

    def from_dict(self, data: dict[str, Any]) -> Config:
        """Build and validate a Config from plain data."""
        if not isinstance(data, dict):
            raise ConfigValidationError("Configuration root must be an object")

        self._config = self._parse_config(data)
        self._validate(self._config)
        self._loaded = True
        return self._config

    def _parse_config(self, data: dict[str, Any]) -> Config:
        """Parse configuration data into Config object."""
        config = Config()

        for section_name, section_type in _SECTIONS.items():
            if section_name not in data:
                continue

            section_data = data[section_name]
            if not isinstance(section_data, dict):
                raise ConfigValidationError(
                    f"Section '{section_name}' must be an object",
                    key=section_name
                )

            defaults = getattr(config, section_name)
            values = {
                f.name: section_data.get(f.name, getattr(defaults, f.name))
                for f in fields(section_type)
            }

            unknown = set(section_data) - set(values)
            if unknown:
                self._logger.warning(
                    "Ignoring unknown configuration keys",
                    context={'section': section_name, 'keys': sorted(unknown)}
                )

            setattr(config, section_name, section_type(**values))

        if 'environment' in data:
            env = data['environment']
            if not isinstance(env, dict):
                raise ConfigValidationError(
                    "Section 'environment' must be an object",
                    key='environment'
                )
            config.environment = {str(k): str(v) for k, v in env.items()}

        return config

    @staticmethod
    def _validate(config: Config) -> None:
        if not isinstance(config.shell.history_size, int) or config.shell.history_size <= 0:
            raise ConfigValidationError(
                "history_size must be a positive integer",
                key='shell.history_size'
            )

        timeout = config.shell.command_timeout
        if timeout is not None and (
            isinstance(timeout, bool)
            or not isinstance(timeout, (int, float))
            or timeout <= 0
        ):
            raise ConfigValidationError(
                "command_timeout must be a positive number or null",
                key='shell.command_timeout'
            )

        if not str(config.filesystem.home_directory).startswith('/'):
            raise ConfigValidationError(
                "home_directory must be an absolute path",
                key='filesystem.home_directory'
            )

        try:
            LogLevel.from_name(config.logging.level)
        except ValueError as e:
            raise ConfigValidationError(str(e), key='logging.level') from e

    @property
    def config(self) -> Config:
        """Get the current configuration."""
        return self._config

    @property
    def loaded(self) -> bool:
        return self._loaded

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a configuration value by dot-notation key.

        Args:
            key: Dot-notation key (e.g., 'shell.history_size')
            default: Default value if key not found
        """
        obj: Any = self._config

        for part in key.split('.'):
            if isinstance(obj, dict):
                if part not in obj:
                    return default
                obj = obj[part]
            elif hasattr(obj, part):
                obj = getattr(obj, part)
            else:
                return default

        return obj

    def set(self, key: str, value: Any) -> None:
        """
        Set a configuration value at runtime.

        The change is validated but not written back to disk.

        Raises:
            ConfigValidationError: If the key does not exist or the value is invalid
        """
        parts = key.split('.')
        obj: Any = self._config

        for part in parts[:-1]:
            if hasattr(obj, part):
                obj = getattr(obj, part)
            else:
                raise ConfigValidationError(f"Invalid configuration key: {key}", key=key)

        final_key = parts[-1]
        if isinstance(obj, dict):
            obj[final_key] = value
        elif hasattr(obj, final_key):
            previous = getattr(obj, final_key)
            setattr(obj, final_key, value)
            try:
                self._validate(self._config)
            except ConfigValidationError:
                setattr(obj, final_key, previous)
                raise
        else:
            raise ConfigValidationError(f"Invalid configuration key: {key}", key=key)

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to dictionary."""
        def dataclass_to_dict(obj: Any) -> Any:
            if hasattr(obj, '__dataclass_fields__'):
                return {
                    k: dataclass_to_dict(v)
                    for k, v in obj.__dict__.items()
                }
            elif isinstance(obj, list):
                return [dataclass_to_dict(item) for item in obj]
            elif isinstance(obj, dict):
                return {k: dataclass_to_dict(v) for k, v in obj.items()}
            else:
                return obj

        return dataclass_to_dict(self._config)


def load_config(config_path: Optional[str] = None) -> Config:
    """
    Load a configuration file, or return defaults when no path is given.
    """
    if config_path is None:
        return Config()
    return ConfigLoader().load(config_path)
