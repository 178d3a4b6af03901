#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Pipeline step base classes and data structures.

Design:
- Every step has an explicit input type and output type
- Steps pass results through dataclasses; feature outputs are frozen so a
  FeatureSet can never be mutated after creation
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Generic, Optional, Tuple, TypeVar

from loguru import logger

from ..buffer import PixelBuffer

RGB = Tuple[int, int, int]


# ============================================================================
# Base input/output types
# ============================================================================

@dataclass
class StepInput:
    """Base class for step inputs"""
    pass


@dataclass(frozen=True)
class StepOutput:
    """Base class for step outputs"""
    success: bool = True
    error_message: Optional[str] = None


@dataclass
class FrameInput(StepInput):
    """
    Input for the analyzer steps.

    Attributes:
        buffer: Validated pixel buffer, shared read-only by all analyzers
    """
    buffer: Optional[PixelBuffer] = None

    def validate(self) -> None:
        if self.buffer is None:
            raise ValueError("FrameInput requires a pixel buffer")


# ============================================================================
# Feature outputs
# ============================================================================

@dataclass(frozen=True)
class CompositionFeatures(StepOutput):
    """Composition scores (all in [0, 1])"""
    rule_of_thirds_score: float = 0.0
    balance_horizontal: float = 0.0
    balance_vertical: float = 0.0
    brightness_grid: Tuple[Tuple[float, ...], ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "rule_of_thirds_score": self.rule_of_thirds_score,
            "balance_horizontal": self.balance_horizontal,
            "balance_vertical": self.balance_vertical,
            "brightness_grid": [list(row) for row in self.brightness_grid],
        }


@dataclass(frozen=True)
class PaletteEntry:
    """A palette color and its share of the opaque samples (0-1)"""
    rgb: RGB
    percentage: float

    def to_dict(self) -> Dict[str, Any]:
        return {"rgb": list(self.rgb), "percentage": self.percentage}


@dataclass(frozen=True)
class ColorFeatures(StepOutput):
    """Dominant color, palette, contrast and saturation"""
    dominant: RGB = (0, 0, 0)
    palette: Tuple[PaletteEntry, ...] = ()
    contrast: float = 0.0
    saturation: float = 0.0
    sampled_pixels: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "dominant": list(self.dominant),
            "palette": [entry.to_dict() for entry in self.palette],
            "contrast": self.contrast,
            "saturation": self.saturation,
            "sampled_pixels": self.sampled_pixels,
        }


@dataclass(frozen=True)
class ElementFeatures(StepOutput):
    """Shape and text likelihood"""
    shapes_detected: bool = False
    shape_confidence: float = 0.0
    text_detected: bool = False
    text_confidence: float = 0.0
    edge_density: float = 0.0  # Percent of interior pixels
    high_contrast_ratio: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "shapes_detected": self.shapes_detected,
            "shape_confidence": self.shape_confidence,
            "text_detected": self.text_detected,
            "text_confidence": self.text_confidence,
            "edge_density": self.edge_density,
            "high_contrast_ratio": self.high_contrast_ratio,
        }


@dataclass(frozen=True)
class EffectFeatures(StepOutput):
    """Blur/noise/vignette estimates (strengths in [0, 1])"""
    blur_detected: bool = False
    blur_strength: float = 0.0
    noise_detected: bool = False
    noise_strength: float = 0.0
    vignette_detected: bool = False
    vignette_strength: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "blur_detected": self.blur_detected,
            "blur_strength": self.blur_strength,
            "noise_detected": self.noise_detected,
            "noise_strength": self.noise_strength,
            "vignette_detected": self.vignette_detected,
            "vignette_strength": self.vignette_strength,
        }

    def detected_effects(self) -> Tuple[str, ...]:
        names = []
        if self.blur_detected:
            names.append("blur")
        if self.noise_detected:
            names.append("noise")
        if self.vignette_detected:
            names.append("vignette")
        return tuple(names)


@dataclass(frozen=True)
class FeatureSet:
    """
    Aggregated, deterministic feature set for one frame.

    Built once after all analyzers have completed; never mutated.
    """
    composition: CompositionFeatures
    colors: ColorFeatures
    elements: ElementFeatures
    effects: EffectFeatures

    def to_dict(self) -> Dict[str, Any]:
        return {
            "composition": self.composition.to_dict(),
            "colors": self.colors.to_dict(),
            "elements": self.elements.to_dict(),
            "effects": self.effects.to_dict(),
        }


# ============================================================================
# Recommendations / insight / export
# ============================================================================

class Priority(str, Enum):
    """Recommendation priority"""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass(frozen=True)
class Recommendation:
    """A single actionable suggestion"""
    type: str
    priority: Priority
    message: str
    suggested_action: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "priority": self.priority.value,
            "message": self.message,
            "suggested_action": self.suggested_action,
        }


@dataclass
class RecommendationInput(StepInput):
    """Recommendation rules input"""
    feature_set: Optional[FeatureSet] = None
    insight: Optional[str] = None


@dataclass(frozen=True)
class RecommendationOutput(StepOutput):
    """Ordered recommendation list"""
    recommendations: Tuple[Recommendation, ...] = ()


@dataclass
class InsightInput(StepInput):
    """Insight generation input"""
    feature_set: Optional[FeatureSet] = None


@dataclass(frozen=True)
class InsightOutput(StepOutput):
    """Insight generation output (insight is None when unavailable)"""
    insight: Optional[str] = None
    attempts: int = 0


@dataclass
class AnalysisResult:
    """
    Complete analysis of one frame.

    Attributes:
        frame: The analyzed buffer (owned by the caller)
        feature_set: Computed features
        insight: AI-authored insight text, None when absent
        recommendations: Ordered recommendations
        timestamp: Analysis time in milliseconds
        cache_key: Key the result is cached under
        cache_hit: True if the features came from the cache
    """
    frame: PixelBuffer
    feature_set: FeatureSet
    insight: Optional[str] = None
    recommendations: Tuple[Recommendation, ...] = ()
    timestamp: int = 0
    cache_key: str = ""
    cache_hit: bool = False

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-serializable dict (frame metadata only, no pixel data)"""
        return {
            "frame": self.frame.describe(),
            "features": self.feature_set.to_dict(),
            "insight": self.insight,
            "recommendations": [r.to_dict() for r in self.recommendations],
            "timestamp": self.timestamp,
            "cache_key": self.cache_key,
            "cache_hit": self.cache_hit,
        }


@dataclass
class ExportInput(StepInput):
    """JSON export input"""
    result: Optional[AnalysisResult] = None
    output_path: str = "frame_analysis.json"
    indent: int = 2


@dataclass(frozen=True)
class ExportOutput(StepOutput):
    """JSON export output"""
    output_path: str = ""


# ============================================================================
# Step base class
# ============================================================================

InputT = TypeVar("InputT", bound=StepInput)
OutputT = TypeVar("OutputT", bound=StepOutput)


class PipelineStep(ABC, Generic[InputT, OutputT]):
    """
    Pipeline step base class.

    Every step implements:
    - name: step name
    - description: step description
    - run(): the step body

    Usage:
        step = ColorAnalysisStep()
        output = step.run(FrameInput(buffer=buffer))
        print(f"Dominant color: {output.dominant}")
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Step name"""
        pass

    @property
    @abstractmethod
    def description(self) -> str:
        """Step description"""
        pass

    @abstractmethod
    def run(self, input_data: InputT) -> OutputT:
        """
        Execute the step.

        Args:
            input_data: Step input

        Returns:
            Step output
        """
        pass

    def __str__(self) -> str:
        return f"{self.name}: {self.description}"

    def log_start(self, input_data: InputT) -> None:
        logger.debug(f"[{self.name}] starting...")

    def log_complete(self, output: OutputT) -> None:
        if output.success:
            logger.debug(f"[{self.name}] ✓ done")
        else:
            logger.error(f"[{self.name}] ✗ failed: {output.error_message}")
