"""
Settings loader for the resolver.

Loads project-level resolver settings from .tsresolver.json or
.tsresolver.yaml and turns them into the configuration dict that
ImportResolver.resolve accepts.
"""

import json
import yaml
import logging
import dataclasses
from pathlib import Path
from typing import Dict, Any, List, Optional, Union
from dataclasses import dataclass, asdict

from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)


@dataclass
class ResolverSettings:
    """User settings for import resolution."""

    # Force a @types lookup even when nothing resolved
    always_try_types: bool = False

    # tsconfig files, project directories or globs
    project: Union[str, List[str], None] = None

    # File resolution overrides; None keeps the built-in default
    extensions: Optional[List[str]] = None
    extension_alias: Optional[Dict[str, List[str]]] = None
    main_fields: Optional[List[str]] = None
    condition_names: Optional[List[str]] = None
    module_directories: Optional[List[str]] = None

    # Memoization
    cache_size: int = 32

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ResolverSettings':
        """Create from dictionary, filtering unknown keys."""
        valid_keys = {f.name for f in dataclasses.fields(cls)}
        unknown = sorted(k for k in data if k not in valid_keys)
        if unknown:
            logger.warning(f"Ignoring unknown resolver settings: {unknown}")
        filtered_data = {k: v for k, v in data.items() if k in valid_keys}
        return cls(**filtered_data)

    def to_resolver_config(self) -> Dict[str, Any]:
        """Build the configuration dict for ImportResolver.resolve."""
        config: Dict[str, Any] = {'always_try_types': self.always_try_types}
        if self.project is not None:
            config['project'] = self.project

        resolver = {
            name: value for name, value in (
                ('extensions', self.extensions),
                ('extension_alias', self.extension_alias),
                ('main_fields', self.main_fields),
                ('condition_names', self.condition_names),
                ('module_directories', self.module_directories),
            ) if value is not None
        }
        if resolver:
            config['resolver'] = resolver
        return config


class ConfigLoader:
    """Loads resolver settings with defaults."""

    CONFIG_FILES = [
        '.tsresolver.json',
        '.tsresolver.yaml',
        '.tsresolver.yml',
    ]

    @classmethod
    def load(cls, project_path: Path) -> ResolverSettings:
        """
        Load settings from a project directory.

        Args:
            project_path: Directory to search for a settings file

        Returns:
            ResolverSettings from the first settings file found, else defaults
        """
        if isinstance(project_path, str):
            project_path = Path(project_path)

        for config_file in cls.CONFIG_FILES:
            config_path = project_path / config_file
            if config_path.exists():
                logger.info(f"Loading resolver settings from: {config_path}")
                return cls.load_file(config_path)

        logger.debug(f"No resolver settings file in {project_path}, using defaults")
        return ResolverSettings()

    @classmethod
    def load_file(cls, config_path: Path) -> ResolverSettings:
        """Load settings from a JSON or YAML file, falling back to defaults on error."""
        config_path = Path(config_path)
        try:
            return ResolverSettings.from_dict(cls._read(config_path))
        except ConfigurationError as e:
            logger.error(e.message)
            return ResolverSettings()
        except (OSError, TypeError) as e:
            logger.error(f"Failed to load settings file {config_path}: {e}")
            return ResolverSettings()

    @staticmethod
    def _read(config_path: Path) -> Dict[str, Any]:
        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                if config_path.suffix in ['.yaml', '.yml']:
                    data = yaml.safe_load(f) or {}
                else:
                    data = json.load(f)
        except (json.JSONDecodeError, yaml.YAMLError) as e:
            raise ConfigurationError(
                f"Failed to parse settings file {config_path}: {e}",
                config_file=str(config_path)
            )

        if not isinstance(data, dict):
            raise ConfigurationError(
                f"Settings file {config_path} must contain a mapping",
                config_file=str(config_path)
            )
        return data


def load_settings(project_path: Path) -> ResolverSettings:
    """Shorthand for ConfigLoader.load()"""
    return ConfigLoader.load(project_path)
