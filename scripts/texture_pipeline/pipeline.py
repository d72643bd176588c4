"""
Texture pipeline coordinator.
Turns indexed source art into engine-ready albedo, normal and emission maps.
"""

import time
import logging
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple, Union
from dataclasses import dataclass, field

from .config import ProcessingConfig
from .buffer import ImageProcessingError, IndexedBuffer, Palette, Rect, RgbaBuffer
from .processing.border import add_border, clamp_border, dilate, wrap_border
from .processing.convolution import sharpen
from .processing.glyph_atlas import GlyphAtlasResult, GlyphSource, pack_atlas
from .processing.normals import normal_map
from .processing.palette import MetalType, emission_map, tint
from .processing.resample import resize


class TextureStep(Enum):
    """Enumeration of texture preparation steps."""
    TINT = "tint"
    CONVERT = "convert"
    RESIZE = "resize"
    BORDER = "border"
    WRAP = "wrap"
    DILATE = "dilate"
    CLAMP = "clamp"
    SHARPEN = "sharpen"
    NORMAL = "normal"
    EMISSION = "emission"
    FONT_ATLAS = "font_atlas"


@dataclass
class StepResult:
    """Result of a single step execution."""
    step: TextureStep
    success: bool
    duration: float
    message: str


@dataclass
class TextureSettings:
    """Per-texture processing switches."""
    alpha_index: int = -1                   # Palette index made transparent (-1 disables)
    emission_index: int = -1                # Palette index that glows on emission maps
    border_size: int = 0                    # Padding added around the image
    copy_to_opposite_border: bool = False   # Wrap edges into the border; needs border
    dilate: bool = False                    # Bleed colour into the border; needs border
    clamp: bool = False                     # Stretch edge pixels into the border; needs border
    sharpen: bool = False
    create_normal_map: bool = False
    create_emission_map: bool = False
    normal_strength: Optional[float] = None  # Falls back to the config value
    metal_type: Optional[MetalType] = None
    target_size: Optional[Tuple[int, int]] = None
    flip_y: bool = False

    def validate(self) -> List[str]:
        """Validate settings and return list of errors."""
        errors = []
        border_modes = [self.copy_to_opposite_border, self.dilate, self.clamp]

        if self.border_size < 0:
            errors.append("border_size must not be negative")
        if sum(border_modes) > 1:
            errors.append("copy_to_opposite_border, dilate and clamp are mutually exclusive")
        if any(border_modes) and self.border_size == 0:
            errors.append("border treatment requires border_size > 0")
        if self.create_emission_map and not 0 <= self.emission_index <= 255:
            errors.append("create_emission_map requires an emission_index between 0 and 255")
        if self.target_size is not None and (self.target_size[0] <= 0 or self.target_size[1] <= 0):
            errors.append("target_size must have positive dimensions")

        return errors


@dataclass
class TextureResult:
    """Maps produced for one texture."""
    albedo: RgbaBuffer
    single_rect: Rect
    normal: Optional[RgbaBuffer] = None
    emission: Optional[RgbaBuffer] = None
    steps: List[StepResult] = field(default_factory=list)


class PipelineError(Exception):
    """Base exception for pipeline errors."""
    def __init__(self, message: str, step: Optional[TextureStep] = None, recoverable: bool = False):
        super().__init__(message)
        self.step = step
        self.recoverable = recoverable


class TexturePipeline:
    """
    Coordinates the texture operations for one texture at a time.

    The caller's source buffer is never modified; every in-place operation
    runs on a buffer the pipeline allocated itself.
    """

    def __init__(self, config: Optional[ProcessingConfig] = None, logger: Optional[logging.Logger] = None):
        """
        Initialize the texture pipeline.

        Args:
            config: Processing configuration
            logger: Logger to report through; a stream logger is set up when omitted
        """
        self.config = config or ProcessingConfig()
        self.logger = logger or self._setup_logging()

    def _setup_logging(self) -> logging.Logger:
        """Set up logging for the pipeline."""
        logger = logging.getLogger("texture_pipeline")
        logger.setLevel(getattr(logging, self.config.log_level.upper(), logging.INFO))

        if not logger.handlers:
            handler = logging.StreamHandler()
            formatter = logging.Formatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
            )
            handler.setFormatter(formatter)
            logger.addHandler(handler)

        return logger

    def _run_step(self, steps: List[StepResult], step: TextureStep, handler: Callable[[], Any]) -> Any:
        """Execute a single step with timing and error wrapping."""
        self.logger.debug(f"Executing step: {step.value}")
        start_time = time.time()

        try:
            result = handler()
        except ImageProcessingError as e:
            duration = time.time() - start_time
            steps.append(StepResult(step, False, duration, f"Step {step.value} failed: {e}"))
            self.logger.error(f"Step {step.value} failed after {duration:.2f}s: {e}")
            raise PipelineError(f"Step {step.value} failed: {e}", step) from e

        duration = time.time() - start_time
        steps.append(StepResult(step, True, duration, f"Step {step.value} completed successfully"))
        self.logger.debug(f"Step {step.value} completed in {duration:.4f}s")
        return result

    def prepare_texture(self, source: IndexedBuffer, palette: Palette,
                        settings: Optional[TextureSettings] = None) -> TextureResult:
        """
        Build albedo and optional normal and emission maps from indexed art.

        Args:
            source: Indexed source image (left untouched)
            palette: Palette used to resolve colours
            settings: Processing switches; defaults derive from the config

        Returns:
            TextureResult with the maps and the UV rect of the image inside its border

        Raises:
            PipelineError: If settings are invalid or a step fails
        """
        settings = settings or self.default_settings()
        errors = settings.validate()
        if errors:
            raise PipelineError(f"Invalid texture settings: {'; '.join(errors)}")

        steps: List[StepResult] = []
        indexed = source.copy()
        border = settings.border_size

        if settings.metal_type is not None:
            self._run_step(steps, TextureStep.TINT, lambda: tint(indexed, settings.metal_type))

        albedo = self._run_step(
            steps, TextureStep.CONVERT,
            lambda: indexed.to_rgba(palette, flip_y=settings.flip_y, alpha_index=settings.alpha_index)
        )

        if settings.target_size is not None:
            albedo = self._run_step(steps, TextureStep.RESIZE, lambda: resize(albedo, *settings.target_size))

        if border > 0:
            albedo = self._run_step(steps, TextureStep.BORDER, lambda: add_border(albedo, border))
            if settings.copy_to_opposite_border:
                self._run_step(steps, TextureStep.WRAP, lambda: wrap_border(
                    albedo, border, self.config.wrap_left_right, self.config.wrap_top_bottom))
            elif settings.dilate:
                self._run_step(steps, TextureStep.DILATE, lambda: dilate(albedo))
            elif settings.clamp:
                self._run_step(steps, TextureStep.CLAMP, lambda: clamp_border(albedo, border))

        if settings.sharpen:
            albedo = self._run_step(steps, TextureStep.SHARPEN, lambda: sharpen(albedo))

        normal = None
        if settings.create_normal_map:
            strength = settings.normal_strength
            if strength is None:
                strength = self.config.normal_strength
            normal = self._run_step(steps, TextureStep.NORMAL, lambda: normal_map(albedo, strength))

        emission = None
        if settings.create_emission_map:
            emission = self._run_step(steps, TextureStep.EMISSION,
                                      lambda: self._emission(indexed, palette, settings))

        single_rect = Rect(
            border / albedo.width,
            border / albedo.height,
            (albedo.width - border * 2) / albedo.width,
            (albedo.height - border * 2) / albedo.height,
        )

        self.logger.info(
            f"Prepared {albedo.width}x{albedo.height} texture in {len(steps)} steps"
        )
        return TextureResult(albedo=albedo, single_rect=single_rect, normal=normal,
                             emission=emission, steps=steps)

    def prepare_font_atlas(self, glyphs: GlyphSource) -> GlyphAtlasResult:
        """Pack a glyph source with the configured colours and atlas size."""
        steps: List[StepResult] = []
        result = self._run_step(steps, TextureStep.FONT_ATLAS, lambda: pack_atlas(
            glyphs, self.config.glyph_back_color, self.config.glyph_text_color, self.config.atlas_size))
        result.metadata["duration"] = steps[0].duration
        return result

    def default_settings(self) -> TextureSettings:
        """Texture settings derived from the config."""
        return TextureSettings(
            border_size=self.config.border_size,
            copy_to_opposite_border=self.config.border_size > 0,
            normal_strength=self.config.normal_strength,
        )

    def _emission(self, indexed: IndexedBuffer, palette: Palette,
                  settings: TextureSettings) -> RgbaBuffer:
        emission = emission_map(indexed, palette, settings.emission_index)
        if settings.flip_y:
            emission = RgbaBuffer.from_array(emission.pixels()[::-1])
        if settings.target_size is not None:
            emission = resize(emission, *settings.target_size)
        if settings.border_size > 0:
            emission = add_border(emission, settings.border_size)
        return emission


def prepare_texture(source: IndexedBuffer, palette: Palette,
                    settings: Optional[TextureSettings] = None,
                    config: Optional[Union[ProcessingConfig, Dict[str, Any]]] = None) -> TextureResult:
    """Convenience wrapper building a one-off pipeline."""
    if isinstance(config, dict):
        config = ProcessingConfig._from_dict(config)
    return TexturePipeline(config).prepare_texture(source, palette, settings)
