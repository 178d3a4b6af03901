#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Frame Feature Analyzer

Extracts composition, color, element and effect features from a single
rendered frame, with optional AI insight and rule-based recommendations.

Layout:
- steps/: independent analysis steps with explicit inputs and outputs
- pipeline_runner: FrameAnalyzer, fans the analyzers out and owns the cache
- metrics_*: low-level feature functions
"""

__version__ = "1.0.0"

# ============================================================================
# Modular steps
# ============================================================================

from .steps import (
    # Base types
    StepInput,
    StepOutput,
    PipelineStep,
    # Input types
    FrameInput,
    InsightInput,
    RecommendationInput,
    ExportInput,
    # Output types
    CompositionFeatures,
    PaletteEntry,
    ColorFeatures,
    ElementFeatures,
    EffectFeatures,
    InsightOutput,
    RecommendationOutput,
    ExportOutput,
    # Aggregates
    FeatureSet,
    Priority,
    Recommendation,
    AnalysisResult,
    # Step classes
    CompositionAnalysisStep,
    ColorAnalysisStep,
    ElementDetectionStep,
    EffectsAnalysisStep,
    InsightStep,
    RecommendationStep,
    ExportStep,
    generate_recommendations,
)

from .buffer import (
    PixelBuffer,
    FrameSource,
    NullFrameSource,
    ArrayFrameSource,
    ImageFileSource,
    buffer_from_array,
)
from .cache import CACHE_MAX_ENTRIES, CacheEntry, ResultCache, derive_cache_key
from .config import EngineConfig, get_default_config, load_config_from_file, save_config_to_file
from .errors import FrameAnalysisError, MalformedBuffer, InsightUnavailable
from .insight import (
    InsightGenerator,
    NullInsightGenerator,
    CallableInsightGenerator,
    AnthropicInsightGenerator,
    build_insight_prompt,
    parse_technical_analysis,
    parse_suggestions,
)
from .pipeline_runner import FrameAnalyzer, export_result_json

# ============================================================================
# Low-level functions
# ============================================================================

from .metrics_composition import analyze_composition
from .metrics_color import extract_color_palette
from .metrics_elements import detect_visual_elements
from .metrics_effects import analyze_effects

__all__ = [
    # Version
    "__version__",

    # Steps - base types
    "StepInput",
    "StepOutput",
    "PipelineStep",

    # Steps - input types
    "FrameInput",
    "InsightInput",
    "RecommendationInput",
    "ExportInput",

    # Steps - output types
    "CompositionFeatures",
    "PaletteEntry",
    "ColorFeatures",
    "ElementFeatures",
    "EffectFeatures",
    "InsightOutput",
    "RecommendationOutput",
    "ExportOutput",

    # Aggregates
    "FeatureSet",
    "Priority",
    "Recommendation",
    "AnalysisResult",

    # Steps - step classes
    "CompositionAnalysisStep",
    "ColorAnalysisStep",
    "ElementDetectionStep",
    "EffectsAnalysisStep",
    "InsightStep",
    "RecommendationStep",
    "ExportStep",
    "generate_recommendations",

    # Ingest
    "PixelBuffer",
    "FrameSource",
    "NullFrameSource",
    "ArrayFrameSource",
    "ImageFileSource",
    "buffer_from_array",

    # Cache
    "CACHE_MAX_ENTRIES",
    "CacheEntry",
    "ResultCache",
    "derive_cache_key",

    # Config / errors
    "EngineConfig",
    "get_default_config",
    "load_config_from_file",
    "save_config_to_file",
    "FrameAnalysisError",
    "MalformedBuffer",
    "InsightUnavailable",

    # Insight
    "InsightGenerator",
    "NullInsightGenerator",
    "CallableInsightGenerator",
    "AnthropicInsightGenerator",
    "build_insight_prompt",
    "parse_technical_analysis",
    "parse_suggestions",

    # Analyzer
    "FrameAnalyzer",
    "export_result_json",

    # Low-level functions
    "analyze_composition",
    "extract_color_palette",
    "detect_visual_elements",
    "analyze_effects",
]
