"""YAML configuration loading and validation.

This module handles loading and saving mount configuration from YAML
files. The configuration names the wiki endpoint and tunes the cache and
the synchronization loop; credentials are kept out of it.
"""

import os
from typing import Any, Dict

import yaml

from src.wiki_fs.models import Mode

from .errors import ConfigError, ConfigNotFoundError
from .models import MountConfig


class ConfigLoader:
    """Handles configuration file loading, validation, and saving.

    Configuration file structure:
        url: https://wiki.example.com/lib/exe/xmlrpc.php
        mode: pages
        namespace: ""
        cache_size: 5242880
        poll_interval: 300
        clock_skew: 43200
        page_extension: .dw
        verify_ssl: true
        timeout: 30
    """

    DEFAULT_CONFIG_DIR = '.wikifs'
    DEFAULT_CONFIG_FILE = 'config.yaml'

    REQUIRED_FIELDS = {'url'}

    POSITIVE_INT_FIELDS = ('cache_size', 'poll_interval', 'timeout')

    @classmethod
    def default_path(cls) -> str:
        return os.path.join(cls.DEFAULT_CONFIG_DIR, cls.DEFAULT_CONFIG_FILE)

    @classmethod
    def load(cls, config_path: str) -> MountConfig:
        """Load and parse configuration from a YAML file.

        Args:
            config_path: Path to the YAML configuration file

        Returns:
            MountConfig object with parsed configuration

        Raises:
            ConfigNotFoundError: If the file does not exist
            ConfigError: If the file cannot be read or is invalid
        """
        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                content = f.read()
        except FileNotFoundError:
            raise ConfigNotFoundError(config_path)
        except OSError as e:
            raise ConfigError(f"Cannot read {config_path}: {e}")

        try:
            config_dict = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML syntax: {str(e)}")

        if config_dict is None:
            raise ConfigError("Configuration file is empty")

        if not isinstance(config_dict, dict):
            raise ConfigError(
                f"Configuration must be a YAML dictionary, got {type(config_dict).__name__}"
            )

        return cls._parse_config(config_dict)

    @classmethod
    def save(cls, config_path: str, config: MountConfig) -> None:
        """Save configuration to a YAML file.

        Args:
            config_path: Path to the YAML configuration file
            config: MountConfig object to save

        Raises:
            ConfigError: If the file cannot be written
        """
        config_dict = {
            'url': config.url,
            'mode': config.mode.value,
            'namespace': config.namespace,
            'cache_size': config.cache_size,
            'poll_interval': config.poll_interval,
            'clock_skew': config.clock_skew,
            'page_extension': config.page_extension,
            'verify_ssl': config.verify_ssl,
            'timeout': config.timeout,
        }

        yaml_str = yaml.safe_dump(
            config_dict,
            default_flow_style=False,
            allow_unicode=True,
            sort_keys=False
        )

        config_dir = os.path.dirname(config_path)
        try:
            if config_dir:
                os.makedirs(config_dir, exist_ok=True)
            with open(config_path, 'w', encoding='utf-8') as f:
                f.write(yaml_str)
        except OSError as e:
            raise ConfigError(f"Cannot write {config_path}: {e}")

    @classmethod
    def _parse_config(cls, config_dict: Dict[str, Any]) -> MountConfig:
        """Validate a raw configuration dictionary.

        Args:
            config_dict: Raw configuration dictionary from YAML

        Returns:
            MountConfig with defaults applied

        Raises:
            ConfigError: If a field is missing or has an invalid value
        """
        missing = cls.REQUIRED_FIELDS - set(config_dict)
        if missing:
            field_name = sorted(missing)[0]
            raise ConfigError("Required field is missing", field_name)

        url = config_dict['url']
        if not isinstance(url, str) or not url.startswith(('http://', 'https://')):
            raise ConfigError("Must be an http(s) URL", 'url')

        mode_value = config_dict.get('mode', Mode.PAGES.value)
        try:
            mode = Mode(mode_value)
        except ValueError:
            raise ConfigError(
                f"Must be one of {', '.join(m.value for m in Mode)}, got {mode_value!r}",
                'mode'
            )

        values: Dict[str, Any] = {}
        for field_name in cls.POSITIVE_INT_FIELDS:
            if field_name in config_dict:
                values[field_name] = cls._positive_int(config_dict[field_name], field_name)

        if 'clock_skew' in config_dict:
            skew = config_dict['clock_skew']
            if isinstance(skew, bool) or not isinstance(skew, int) or skew < 0:
                raise ConfigError("Must be a non-negative integer", 'clock_skew')
            values['clock_skew'] = skew

        if 'namespace' in config_dict:
            namespace = config_dict['namespace'] or ""
            if not isinstance(namespace, str):
                raise ConfigError("Must be a string", 'namespace')
            values['namespace'] = namespace.strip(':')

        if 'page_extension' in config_dict:
            extension = config_dict['page_extension']
            if not isinstance(extension, str) or not extension.startswith('.') or len(extension) < 2:
                raise ConfigError("Must be a string starting with '.'", 'page_extension')
            values['page_extension'] = extension

        for field_name in ('verify_ssl',):
            if field_name in config_dict:
                if not isinstance(config_dict[field_name], bool):
                    raise ConfigError("Must be true or false", field_name)
                values[field_name] = config_dict[field_name]

        return MountConfig(url=url, mode=mode, **values)

    @staticmethod
    def _positive_int(value: Any, field_name: str) -> int:
        if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
            raise ConfigError("Must be a positive integer", field_name)
        return value
