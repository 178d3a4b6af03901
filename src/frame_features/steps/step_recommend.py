#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Recommendation rules

A pure mapping from a FeatureSet (plus optional insight text) to an ordered
recommendation list. Every rule that fires is emitted, in declaration order,
without deduplication.
"""

from typing import List, Optional

from .base import (
    PipelineStep,
    FeatureSet,
    Priority,
    Recommendation,
    RecommendationInput,
    RecommendationOutput,
)
from ..config import RecommendationConfig
from ..insight import parse_suggestions


def generate_recommendations(
    feature_set: FeatureSet,
    insight: Optional[str] = None,
    config: Optional[RecommendationConfig] = None
) -> List[Recommendation]:
    """
    Apply the recommendation rules.

    Args:
        feature_set: Computed features
        insight: Optional AI insight text
        config: Rule thresholds

    Returns:
        Recommendations in rule declaration order
    """
    cfg = config or RecommendationConfig()
    composition = feature_set.composition
    colors = feature_set.colors
    elements = feature_set.elements
    effects = feature_set.effects

    recommendations = []

    # Composition
    if composition.rule_of_thirds_score < cfg.rule_of_thirds_min:
        recommendations.append(Recommendation(
            type="composition",
            priority=Priority.MEDIUM,
            message="Consider using rule of thirds for better composition",
            suggested_action="Adjust element positions to align with thirds grid",
        ))

    if composition.balance_horizontal > cfg.balance_max:
        recommendations.append(Recommendation(
            type="balance",
            priority=Priority.LOW,
            message="Frame is visually heavier on one side",
            suggested_action="Redistribute bright elements between the left and right thirds",
        ))

    # Color
    if colors.contrast < cfg.contrast_min:
        recommendations.append(Recommendation(
            type="color",
            priority=Priority.HIGH,
            message="Low contrast detected - improve readability",
            suggested_action="Increase contrast between foreground and background",
        ))

    if colors.saturation < cfg.saturation_min:
        recommendations.append(Recommendation(
            type="color",
            priority=Priority.LOW,
            message="Colors are very desaturated",
            suggested_action="Add an accent color or a saturation boost if a muted look is not intended",
        ))

    # Effects
    if effects.blur_strength > cfg.blur_strength_max:
        recommendations.append(Recommendation(
            type="effects",
            priority=Priority.MEDIUM,
            message="Heavy blur detected - may reduce sharpness",
            suggested_action="Reduce blur amount or add sharpening",
        ))

    if effects.noise_detected:
        recommendations.append(Recommendation(
            type="effects",
            priority=Priority.MEDIUM,
            message="Visible noise or grain detected",
            suggested_action="Apply noise reduction or lower the grain amount",
        ))

    if effects.vignette_strength > cfg.vignette_strength_max:
        recommendations.append(Recommendation(
            type="effects",
            priority=Priority.LOW,
            message="Strong vignette darkens the frame edges",
            suggested_action="Soften the vignette or reduce its amount",
        ))

    # Readability
    if elements.text_detected and colors.contrast < cfg.contrast_min:
        recommendations.append(Recommendation(
            type="readability",
            priority=Priority.HIGH,
            message="Text-like detail sits on low-contrast colors",
            suggested_action="Add a backing shape, stroke or shadow behind text",
        ))

    # AI insight
    if insight:
        suggestions = parse_suggestions(insight)
        if suggestions:
            recommendations.append(Recommendation(
                type="insight",
                priority=Priority.LOW,
                message=suggestions[0],
                suggested_action="; ".join(suggestions[1:4]) or suggestions[0],
            ))

    return recommendations


class RecommendationStep(PipelineStep[RecommendationInput, RecommendationOutput]):
    """
    Recommendation step

    Input: RecommendationInput (feature set, optional insight)
    Output: RecommendationOutput (ordered recommendations)
    """

    def __init__(self, config: Optional[RecommendationConfig] = None):
        self.config = config or RecommendationConfig()

    @property
    def name(self) -> str:
        return "recommendations"

    @property
    def description(self) -> str:
        return "Map features to prioritized recommendations"

    def run(self, input_data: RecommendationInput) -> RecommendationOutput:
        self.log_start(input_data)
        if input_data.feature_set is None:
            raise ValueError("RecommendationInput requires a feature set")

        recommendations = generate_recommendations(
            input_data.feature_set, input_data.insight, self.config
        )
        output = RecommendationOutput(success=True, recommendations=tuple(recommendations))
        self.log_complete(output)
        return output
