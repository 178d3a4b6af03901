#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
JSON export step

Serializes an AnalysisResult into a downloadable JSON artifact.
"""

import json
from pathlib import Path
from typing import Any, Dict

from loguru import logger

from .base import PipelineStep, AnalysisResult, ExportInput, ExportOutput
from ..insight import parse_suggestions, parse_technical_analysis
from ..utils import ensure_dir


def result_to_export_dict(result: AnalysisResult) -> Dict[str, Any]:
    """AnalysisResult dict plus the structure parsed out of the insight text."""
    data = result.to_dict()
    if result.insight:
        data["insight_details"] = {
            "technical_analysis": parse_technical_analysis(result.insight),
            "suggestions": parse_suggestions(result.insight),
        }
    return data


class ExportStep(PipelineStep[ExportInput, ExportOutput]):
    """
    JSON export step

    Input: ExportInput (analysis result, output path)
    Output: ExportOutput (written file path)
    """

    @property
    def name(self) -> str:
        return "export"

    @property
    def description(self) -> str:
        return "Write the analysis result as JSON"

    def run(self, input_data: ExportInput) -> ExportOutput:
        self.log_start(input_data)

        try:
            if input_data.result is None:
                raise ValueError("ExportInput requires an analysis result")

            output_path = Path(input_data.output_path)
            ensure_dir(output_path.parent)
            with open(output_path, "w", encoding="utf-8") as f:
                json.dump(result_to_export_dict(input_data.result), f, indent=input_data.indent, ensure_ascii=False)

            output = ExportOutput(success=True, output_path=str(output_path))
            self.log_complete(output)
            logger.info(f"  → saved: {output_path}")
            return output

        except Exception as e:
            self.log_complete(ExportOutput(success=False, error_message=str(e)))
            raise
