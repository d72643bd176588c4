"""
Configuration management for the texture pipeline.
Supports TOML and JSON configuration files with validation.
"""

import os
import json
import tomllib
from dataclasses import dataclass
from typing import Dict, List, Any, Union
from pathlib import Path


ENV_PREFIX = "TEXTURE_PIPELINE_"


def _parse_color(value: str) -> tuple[int, int, int, int]:
    """Parse 'r,g,b[,a]' into an RGBA tuple."""
    parts = [int(p) for p in value.split(',')]
    if len(parts) == 3:
        parts.append(255)
    return tuple(parts)


@dataclass
class ProcessingConfig:
    """Main configuration class for the texture pipeline."""

    # Normal maps
    normal_strength: float = 1.0

    # Border treatment
    border_size: int = 0
    wrap_left_right: bool = True
    wrap_top_bottom: bool = True

    # Font atlas
    atlas_size: int = 256
    glyph_back_color: tuple[int, int, int, int] = (0, 0, 0, 0)
    glyph_text_color: tuple[int, int, int, int] = (255, 255, 255, 255)

    # Output settings
    output_format: str = "PNG"
    compression_level: int = 6
    output_dir: str = "textures"

    # Logging
    log_level: str = "INFO"

    @classmethod
    def from_file(cls, config_path: Union[str, Path]) -> "ProcessingConfig":
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
    def _from_toml(cls, config_path: Path) -> "ProcessingConfig":
        """Load configuration from TOML file."""
        with open(config_path, 'rb') as f:
            data = tomllib.load(f)
        return cls._from_dict(data)

    @classmethod
    def _from_json(cls, config_path: Path) -> "ProcessingConfig":
        """Load configuration from JSON file."""
        with open(config_path, 'r') as f:
            data = json.load(f)
        return cls._from_dict(data)

    @classmethod
    def _from_dict(cls, data: Dict[str, Any]) -> "ProcessingConfig":
        """Create configuration from dictionary."""
        config_data = {}

        if 'normals' in data:
            normals = data['normals']
            config_data['normal_strength'] = float(normals.get('strength', 1.0))

        if 'borders' in data:
            borders = data['borders']
            config_data['border_size'] = borders.get('size', 0)
            config_data['wrap_left_right'] = borders.get('wrap_left_right', True)
            config_data['wrap_top_bottom'] = borders.get('wrap_top_bottom', True)

        if 'atlas' in data:
            atlas = data['atlas']
            config_data['atlas_size'] = atlas.get('size', 256)
            if 'back_color' in atlas:
                config_data['glyph_back_color'] = tuple(atlas['back_color'])
            if 'text_color' in atlas:
                config_data['glyph_text_color'] = tuple(atlas['text_color'])

        if 'output' in data:
            output = data['output']
            config_data['output_format'] = output.get('format', 'PNG').upper()
            config_data['compression_level'] = output.get('compression_level', 6)
            config_data['output_dir'] = output.get('dir', 'textures')

        if 'logging' in data:
            config_data['log_level'] = data['logging'].get('level', 'INFO')

        return cls(**config_data)

    @classmethod
    def default(cls) -> "ProcessingConfig":
        """Create default configuration with environment variable overrides."""
        return cls._apply_env_overrides(cls())

    @classmethod
    def from_env(cls) -> "ProcessingConfig":
        """Create configuration from environment variables only."""
        config = cls()
        return cls._apply_env_overrides(config)

    @classmethod
    def _apply_env_overrides(cls, config: "ProcessingConfig") -> "ProcessingConfig":
        """Apply environment variable overrides to configuration."""

        if os.getenv('TEXTURE_PIPELINE_NORMAL_STRENGTH'):
            config.normal_strength = float(os.getenv('TEXTURE_PIPELINE_NORMAL_STRENGTH', '1.0'))

        if os.getenv('TEXTURE_PIPELINE_BORDER_SIZE'):
            config.border_size = int(os.getenv('TEXTURE_PIPELINE_BORDER_SIZE', '0'))


        if os.getenv('TEXTURE_PIPELINE_WRAP_LEFT_RIGHT'):
            config.wrap_left_right = os.getenv('TEXTURE_PIPELINE_WRAP_LEFT_RIGHT', 'true').lower() == 'true'

        if os.getenv('TEXTURE_PIPELINE_WRAP_TOP_BOTTOM'):
            config.wrap_top_bottom = os.getenv('TEXTURE_PIPELINE_WRAP_TOP_BOTTOM', 'true').lower() == 'true'

        if os.getenv('TEXTURE_PIPELINE_ATLAS_SIZE'):
            config.atlas_size = int(os.getenv('TEXTURE_PIPELINE_ATLAS_SIZE', '256'))

        if os.getenv('TEXTURE_PIPELINE_GLYPH_BACK_COLOR'):
            config.glyph_back_color = _parse_color(os.getenv('TEXTURE_PIPELINE_GLYPH_BACK_COLOR', '0,0,0,0'))

        if os.getenv('TEXTURE_PIPELINE_GLYPH_TEXT_COLOR'):
            config.glyph_text_color = _parse_color(os.getenv('TEXTURE_PIPELINE_GLYPH_TEXT_COLOR', '255,255,255,255'))

        if os.getenv('TEXTURE_PIPELINE_OUTPUT_FORMAT'):
            config.output_format = os.getenv('TEXTURE_PIPELINE_OUTPUT_FORMAT', 'PNG').upper()

        if os.getenv('TEXTURE_PIPELINE_COMPRESSION_LEVEL'):
            config.compression_level = int(os.getenv('TEXTURE_PIPELINE_COMPRESSION_LEVEL', '6'))

        if os.getenv('TEXTURE_PIPELINE_OUTPUT_DIR'):
            config.output_dir = os.getenv('TEXTURE_PIPELINE_OUTPUT_DIR', 'textures')

        if os.getenv('TEXTURE_PIPELINE_LOG_LEVEL'):
            config.log_level = os.getenv('TEXTURE_PIPELINE_LOG_LEVEL', 'INFO').upper()

        return config

    def validate(self) -> List[str]:
        """Validate configuration and return list of errors."""
        errors = []

        if self.normal_strength < 0:
            errors.append("normal_strength must not be negative")

        if self.border_size < 0:
            errors.append("border_size must not be negative")

        if self.atlas_size <= 0:
            errors.append("atlas_size must be positive")

        for name in ('glyph_back_color', 'glyph_text_color'):
            color = getattr(self, name)
            if len(color) != 4 or not all(0 <= c <= 255 for c in color):
                errors.append(f"{name} must be four channels between 0 and 255")

        if not 0 <= self.compression_level <= 9:
            errors.append("compression_level must be between 0 and 9")

        if self.output_format.upper() not in ['PNG', 'WEBP']:
            errors.append("output_format must be PNG or WEBP")

        if self.log_level.upper() not in ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']:
            errors.append("log_level must be DEBUG, INFO, WARNING, ERROR or CRITICAL")

        return errors


ENV_VARS = [
    ("TEXTURE_PIPELINE_NORMAL_STRENGTH", "Normal map gradient strength", "1.0"),
    ("TEXTURE_PIPELINE_BORDER_SIZE", "Border width in pixels", "4"),
    ("TEXTURE_PIPELINE_WRAP_LEFT_RIGHT", "Wrap left/right borders (true/false)", "true"),
    ("TEXTURE_PIPELINE_WRAP_TOP_BOTTOM", "Wrap top/bottom borders (true/false)", "true"),
    ("TEXTURE_PIPELINE_ATLAS_SIZE", "Font atlas dimension", "256"),
    ("TEXTURE_PIPELINE_GLYPH_BACK_COLOR", "Glyph background colour r,g,b[,a]", "0,0,0,0"),
    ("TEXTURE_PIPELINE_GLYPH_TEXT_COLOR", "Glyph text colour r,g,b[,a]", "255,255,255,255"),
    ("TEXTURE_PIPELINE_OUTPUT_FORMAT", "Output image format", "PNG"),
    ("TEXTURE_PIPELINE_COMPRESSION_LEVEL", "Compression level (0-9)", "6"),
    ("TEXTURE_PIPELINE_OUTPUT_DIR", "Output directory path", "textures"),
    ("TEXTURE_PIPELINE_LOG_LEVEL", "Logging level", "INFO"),
]
