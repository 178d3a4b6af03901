#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Composition analysis step

Grid-based brightness sampling:
- rule-of-thirds score
- left/right and top/bottom balance
"""

from typing import Optional

from .base import PipelineStep, FrameInput, CompositionFeatures
from ..config import CompositionConfig
from ..metrics_composition import analyze_composition


class CompositionAnalysisStep(PipelineStep[FrameInput, CompositionFeatures]):
    """
    Composition analysis step

    Input: FrameInput (pixel buffer)
    Output: CompositionFeatures (rule-of-thirds score, balance)
    """

    def __init__(self, config: Optional[CompositionConfig] = None):
        self.config = config or CompositionConfig()

    @property
    def name(self) -> str:
        return "composition"

    @property
    def description(self) -> str:
        return "Rule-of-thirds and balance scores from a brightness grid"

    def run(self, input_data: FrameInput) -> CompositionFeatures:
        self.log_start(input_data)

        try:
            input_data.validate()
            raw = analyze_composition(input_data.buffer, self.config.grid_size)
            output = CompositionFeatures(
                success=True,
                rule_of_thirds_score=raw["rule_of_thirds_score"],
                balance_horizontal=raw["balance_horizontal"],
                balance_vertical=raw["balance_vertical"],
                brightness_grid=raw["brightness_grid"],
            )
            self.log_complete(output)
            return output

        except Exception as e:
            self.log_complete(CompositionFeatures(success=False, error_message=str(e)))
            raise
