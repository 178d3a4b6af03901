#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Modular analysis steps

Independent, composable steps with explicit input and output types.

Usage:
    # Run a single analyzer
    from frame_features.steps import ColorAnalysisStep, FrameInput

    step = ColorAnalysisStep()
    output = step.run(FrameInput(buffer=buffer))
    print(f"Dominant color: {output.dominant}")

    # Turn a feature set into recommendations
    from frame_features.steps import generate_recommendations

    for rec in generate_recommendations(feature_set):
        print(rec.priority.value, rec.message)
"""

from .base import (
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
)
from .step_composition import CompositionAnalysisStep
from .step_color import ColorAnalysisStep
from .step_elements import ElementDetectionStep
from .step_effects import EffectsAnalysisStep
from .step_insight import InsightStep
from .step_recommend import RecommendationStep, generate_recommendations
from .step_export import ExportStep, result_to_export_dict

__all__ = [
    # Base types
    "StepInput",
    "StepOutput",
    "PipelineStep",
    # Input types
    "FrameInput",
    "InsightInput",
    "RecommendationInput",
    "ExportInput",
    # Output types
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
    # Steps
    "CompositionAnalysisStep",
    "ColorAnalysisStep",
    "ElementDetectionStep",
    "EffectsAnalysisStep",
    "InsightStep",
    "RecommendationStep",
    "ExportStep",
    # Helpers
    "generate_recommendations",
    "result_to_export_dict",
]
