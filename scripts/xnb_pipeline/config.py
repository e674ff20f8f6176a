"""
Configuration management for the XNB pipeline.
Supports TOML and JSON configuration files with environment variable overrides.
"""

import os
import json
import tomllib
from dataclasses import dataclass, field
from typing import Dict, List, Any, Union
from pathlib import Path

ENV_PREFIX = "XNB_PIPELINE_"

DEFAULT_CONFIG_FILES = [
    Path("xnb_pipeline.toml"),
    Path("xnb_pipeline.json"),
]


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes", "on")


@dataclass
class ConverterConfig:
    """Main configuration class for the XNB pipeline."""

    # Encoding settings
    compressed: bool = False
    reach: bool = True

    # Input settings
    input_extensions: List[str] = field(default_factory=lambda: [".png"])
    format_hint: str = ""

    # Output settings
    output_extension: str = ".xnb"
    zero_transparent_rgb: bool = True

    # Logging
    log_level: str = "INFO"

    @classmethod
    def from_file(cls, config_path: Union[str, Path]) -> "ConverterConfig":
        """Load configuration from TOML or JSON file."""
        config_path = Path(config_path)

        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        if config_path.suffix.lower() == '.toml':
            return cls._from_toml(config_path)
        elif config_path.suffix.lower() == '.json':
            return cls._from_json(config_path)
        else:
            raise ValueError(f"Unsupported configuration format: {config_path.suffix}")

    @classmethod
    def _from_toml(cls, config_path: Path) -> "ConverterConfig":
        with open(config_path, 'rb') as f:
            data = tomllib.load(f)
        return cls._from_dict(data)

    @classmethod
    def _from_json(cls, config_path: Path) -> "ConverterConfig":
        with open(config_path, 'r') as f:
            data = json.load(f)
        return cls._from_dict(data)

    @classmethod
    def _from_dict(cls, data: Dict[str, Any]) -> "ConverterConfig":
        """Create configuration from dictionary."""
        config_data = {}

        if 'encoding' in data:
            encoding = data['encoding']
            config_data['compressed'] = encoding.get('compressed', False)
            profile = encoding.get('profile', 'reach')
            config_data['reach'] = str(profile).lower() != 'hidef'

        if 'input' in data:
            input_section = data['input']
            if 'extensions' in input_section:
                config_data['input_extensions'] = list(input_section['extensions'])
            config_data['format_hint'] = input_section.get('format_hint', '')

        if 'output' in data:
            output = data['output']
            config_data['output_extension'] = output.get('extension', '.xnb')
            config_data['zero_transparent_rgb'] = output.get('zero_transparent_rgb', True)

        if 'logging' in data:
            config_data['log_level'] = data['logging'].get('level', 'INFO')

        return cls(**config_data)

    @classmethod
    def default(cls) -> "ConverterConfig":
        """Create default configuration with environment variable overrides."""
        return cls._apply_env_overrides(cls())

    @classmethod
    def _apply_env_overrides(cls, config: "ConverterConfig") -> "ConverterConfig":
        """Apply environment variable overrides to configuration."""

        if os.getenv(f'{ENV_PREFIX}COMPRESSED'):
            config.compressed = _env_bool(f'{ENV_PREFIX}COMPRESSED', 'false')

        if os.getenv(f'{ENV_PREFIX}PROFILE'):
            config.reach = os.getenv(f'{ENV_PREFIX}PROFILE', 'reach').lower() != 'hidef'

        if os.getenv(f'{ENV_PREFIX}INPUT_EXTENSIONS'):
            config.input_extensions = [
                ext.strip() for ext in os.getenv(f'{ENV_PREFIX}INPUT_EXTENSIONS', '').split(',') if ext.strip()
            ]

        if os.getenv(f'{ENV_PREFIX}FORMAT_HINT'):
            config.format_hint = os.getenv(f'{ENV_PREFIX}FORMAT_HINT', '')

        if os.getenv(f'{ENV_PREFIX}OUTPUT_EXTENSION'):
            config.output_extension = os.getenv(f'{ENV_PREFIX}OUTPUT_EXTENSION', '.xnb')

        if os.getenv(f'{ENV_PREFIX}ZERO_TRANSPARENT_RGB'):
            config.zero_transparent_rgb = _env_bool(f'{ENV_PREFIX}ZERO_TRANSPARENT_RGB', 'true')

        if os.getenv(f'{ENV_PREFIX}LOG_LEVEL'):
            config.log_level = os.getenv(f'{ENV_PREFIX}LOG_LEVEL', 'INFO')

        return config

    @property
    def profile(self) -> str:
        return "Reach" if self.reach else "HiDef"

    def matches_input(self, path: Path) -> bool:
        """Check a file name against the configured input extensions, ignoring case."""
        suffix = path.suffix.lower()
        return any(suffix == ext.lower() for ext in self.input_extensions)

    def validate(self, check_compression: bool = True) -> List[str]:
        """
        Validate configuration and return list of errors.

        ``check_compression=False`` leaves a compression request for the
        encoder to reject, so it fails as a conversion rather than a usage error.
        """
        errors = []

        if not self.input_extensions:
            errors.append("input_extensions must not be empty")

        for ext in self.input_extensions:
            if not ext.startswith('.'):
                errors.append(f"input extension '{ext}' must start with '.'")

        if not self.output_extension.startswith('.'):
            errors.append("output_extension must start with '.'")

        if self.output_extension.lower() in [ext.lower() for ext in self.input_extensions]:
            errors.append("output_extension must differ from the input extensions")

        if self.log_level.upper() not in ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']:
            errors.append("log_level must be DEBUG, INFO, WARNING, ERROR, or CRITICAL")

        if check_compression and self.compressed:
            errors.append("compressed output is not supported")

        return errors
