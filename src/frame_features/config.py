#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Centralized Configuration for the Frame Feature Analyzer

All thresholds are defined here - no magic values in analyzer code!
"""

import dataclasses
import json
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple


@dataclass
class CompositionConfig:
    """Composition analysis hyperparameters"""
    grid_size: int = 3  # G x G brightness grid


@dataclass
class ColorConfig:
    """Color analysis hyperparameters"""
    sample_stride: int = 10  # Sample every Kth pixel
    min_samples: int = 64  # Tiny frames shrink the stride to keep this many samples
    alpha_threshold: int = 128  # Only pixels with alpha above this count
    palette_size: int = 8


@dataclass
class ElementsConfig:
    """Shape/text detection hyperparameters"""
    edge_magnitude_threshold: float = 100.0  # Sobel magnitude, 0-255 luminance scale
    shape_density_threshold: float = 30.0  # Percent of interior pixels
    shape_confidence_scale: float = 50.0
    contrast_threshold: float = 100.0  # Local contrast per pixel
    text_ratio_threshold: float = 0.05
    text_confidence_scale: float = 20.0


@dataclass
class EffectsConfig:
    """Blur/noise/vignette hyperparameters"""
    blur_normalizer: float = 1000.0
    blur_threshold: float = 0.7
    noise_threshold: float = 0.1
    vignette_threshold: float = 0.3


@dataclass
class CacheConfig:
    """Result cache hyperparameters"""
    enabled: bool = True
    max_entries: int = 20
    key_mode: str = "content"  # Options: "content", "frame" (hash prefix + timestamp)
    prefix_bytes: int = 1000  # Bytes hashed by the "frame" key mode

    def __post_init__(self):
        if self.key_mode not in ("content", "frame"):
            raise ValueError(f"Invalid cache key mode: {self.key_mode}. Valid options: content, frame")
        if self.max_entries < 1:
            raise ValueError("Cache max_entries must be at least 1")


@dataclass
class InsightConfig:
    """Insight generator (text generation) hyperparameters"""
    enabled: bool = True
    timeout_seconds: float = 20.0
    max_retries: int = 1  # At most one retry before degrading
    retry_backoff_seconds: float = 0.5

    # Anthropic Messages API
    model: str = "claude-sonnet-4-5"
    max_tokens: int = 1024


@dataclass
class RecommendationConfig:
    """Recommendation rule thresholds"""
    rule_of_thirds_min: float = 0.3
    balance_max: float = 0.4
    contrast_min: float = 0.5
    saturation_min: float = 0.1
    blur_strength_max: float = 0.8
    vignette_strength_max: float = 0.8


@dataclass
class SourceConfig:
    """Frame source hyperparameters"""
    # Uploaded images are drawn onto a fixed analysis canvas; None = native size
    canvas_size: Optional[Tuple[int, int]] = (1920, 1080)

    def __post_init__(self):
        if self.canvas_size is not None:
            self.canvas_size = tuple(int(v) for v in self.canvas_size)
            if len(self.canvas_size) != 2 or min(self.canvas_size) < 1:
                raise ValueError(f"Invalid canvas size: {self.canvas_size}")


@dataclass
class EngineConfig:
    """Complete engine configuration"""
    composition: CompositionConfig = field(default_factory=CompositionConfig)
    color: ColorConfig = field(default_factory=ColorConfig)
    elements: ElementsConfig = field(default_factory=ElementsConfig)
    effects: EffectsConfig = field(default_factory=EffectsConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)
    insight: InsightConfig = field(default_factory=InsightConfig)
    recommendations: RecommendationConfig = field(default_factory=RecommendationConfig)
    source: SourceConfig = field(default_factory=SourceConfig)

    # Analyzer fan-out (1 = sequential)
    max_workers: int = 4

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            "composition": dataclasses.asdict(self.composition),
            "color": dataclasses.asdict(self.color),
            "elements": dataclasses.asdict(self.elements),
            "effects": dataclasses.asdict(self.effects),
            "cache": dataclasses.asdict(self.cache),
            "insight": dataclasses.asdict(self.insight),
            "recommendations": dataclasses.asdict(self.recommendations),
            "source": dataclasses.asdict(self.source),
            "max_workers": self.max_workers,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EngineConfig":
        """Create from dictionary"""
        return cls(
            composition=CompositionConfig(**data.get("composition", {})),
            color=ColorConfig(**data.get("color", {})),
            elements=ElementsConfig(**data.get("elements", {})),
            effects=EffectsConfig(**data.get("effects", {})),
            cache=CacheConfig(**data.get("cache", {})),
            insight=InsightConfig(**data.get("insight", {})),
            recommendations=RecommendationConfig(**data.get("recommendations", {})),
            source=SourceConfig(**data.get("source", {})),
            max_workers=int(data.get("max_workers", 4)),
        )


def get_default_config() -> EngineConfig:
    """Get default configuration"""
    return EngineConfig()


def load_config_from_file(path: str) -> EngineConfig:
    """Load configuration from JSON file"""
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    return EngineConfig.from_dict(data)


def save_config_to_file(config: EngineConfig, path: str):
    """Save configuration to JSON file"""
    with open(path, "w", encoding="utf-8") as f:
        json.dump(config.to_dict(), f, indent=2)
