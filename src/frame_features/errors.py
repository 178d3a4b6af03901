#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Exception types raised by the frame analysis engine.
"""


class FrameAnalysisError(Exception):
    """Base class for frame analysis errors"""


class MalformedBuffer(FrameAnalysisError, ValueError):
    """
    Raised at ingest when a pixel buffer violates the size invariant
    (len(data) == width * height * 4) or has non-positive dimensions.

    Fatal for the single analysis call only.
    """

    def __init__(self, message: str, width=None, height=None, length=None):
        super().__init__(message)
        self.width = width
        self.height = height
        self.length = length


class InsightUnavailable(FrameAnalysisError):
    """Raised when the insight generator failed or timed out after retries."""

    def __init__(self, message: str, attempts: int = 0):
        super().__init__(message)
        self.attempts = attempts
