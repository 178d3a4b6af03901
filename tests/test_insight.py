"""Insight generation: prompt, parsing, retries and degradation."""
import os
import subprocess
import sys
import textwrap
import threading
import time
from pathlib import Path
from types import SimpleNamespace

import pytest

from frame_features import insight as insight_module
from frame_features.config import InsightConfig
from frame_features.errors import InsightUnavailable
from frame_features.insight import (
    AnthropicInsightGenerator,
    CallableInsightGenerator,
    NullInsightGenerator,
    build_generator,
    build_insight_prompt,
    parse_suggestions,
    parse_technical_analysis,
)
from frame_features.steps import InsightInput, InsightStep

from conftest import build_feature_set


class CountingGenerator(CallableInsightGenerator):
    """Replays scripted responses; an Exception instance is raised instead of returned."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = 0
        super().__init__(self._next)

    def _next(self, prompt):
        self.calls += 1
        response = self.responses[min(self.calls, len(self.responses)) - 1]
        if isinstance(response, Exception):
            raise response
        return response


def fast_config(**overrides):
    values = {"timeout_seconds": 2.0, "max_retries": 1, "retry_backoff_seconds": 0.0}
    values.update(overrides)
    return InsightConfig(**values)


# =============================================================================
# Prompt / parsing
# =============================================================================

class TestPrompt:
    def test_prompt_summarizes_features(self):
        features = build_feature_set(text_detected=True, noise_detected=True, contrast=0.25)
        prompt = build_insight_prompt(features)
        assert "motion-graphics frame" in prompt
        assert '"rule_of_thirds_score": 0.5' in prompt
        assert "1 colors detected" in prompt
        assert "contrast 0.25" in prompt
        assert "- Elements: text" in prompt
        assert "- Effects: noise" in prompt
        assert "4. Similar techniques or styles to explore" in prompt

    def test_prompt_with_nothing_detected(self):
        prompt = build_insight_prompt(build_feature_set())
        assert "- Elements: none" in prompt
        assert "- Effects: none" in prompt


class TestParsing:
    def test_technical_analysis(self):
        text = "A dusk scene.\nLighting is warm and low.\nThe composition is centered."
        assert parse_technical_analysis(text) == {
            "lighting": "Lighting is warm and low.",
            "composition": "The composition is centered.",
            "effects": "Minimal effects",
        }

    def test_technical_analysis_defaults(self):
        assert parse_technical_analysis("") == {
            "lighting": "Standard lighting",
            "composition": "Balanced composition",
            "effects": "Minimal effects",
        }

    def test_suggestions(self):
        text = (
            "Overview of the frame\n"
            "1. Use warmer tones\n"
            "• Add rim light\n"
            "I suggest a slower push-in\n"
            "plain closing line\n"
        )
        assert parse_suggestions(text) == ["Use warmer tones", "Add rim light", "I suggest a slower push-in"]

    def test_no_suggestions(self):
        assert parse_suggestions("Nothing to add.") == []


# =============================================================================
# Generators
# =============================================================================

class TestGenerators:
    def test_null_generator(self):
        generator = NullInsightGenerator()
        assert generator.available is False
        with pytest.raises(RuntimeError):
            generator.generate("prompt")

    def test_build_generator(self):
        assert isinstance(build_generator(InsightConfig(enabled=False)), NullInsightGenerator)
        generator = build_generator(InsightConfig(model="claude-test", max_tokens=256, timeout_seconds=7.5))
        assert isinstance(generator, AnthropicInsightGenerator)
        assert generator.model == "claude-test"
        assert generator.max_tokens == 256
        assert generator.timeout == 7.5
        assert generator.max_retries == 0

    def test_client_enforces_timeout_without_sdk_retries(self, monkeypatch):
        built = []

        class FakeAnthropic:
            def __init__(self, **kwargs):
                built.append(kwargs)

        monkeypatch.setattr(insight_module.anthropic, "Anthropic", FakeAnthropic)
        generator = build_generator(InsightConfig(timeout_seconds=3.0))

        assert isinstance(generator._get_client(), FakeAnthropic)
        generator._get_client()
        assert built == [{"timeout": 3.0, "max_retries": 0}]

    def test_explicit_api_key_reaches_client(self, monkeypatch):
        built = []
        monkeypatch.setattr(insight_module.anthropic, "Anthropic", lambda **kwargs: built.append(kwargs))
        AnthropicInsightGenerator(model="m", api_key="sk-test", timeout=1.0)._get_client()
        assert built == [{"timeout": 1.0, "max_retries": 0, "api_key": "sk-test"}]

    def test_anthropic_generator_uses_messages_api(self):
        captured = {}

        class FakeMessages:
            def create(self, **kwargs):
                captured.update(kwargs)
                return SimpleNamespace(content=[SimpleNamespace(text="  Lighting is soft.  ")])

        generator = AnthropicInsightGenerator(model="claude-test", max_tokens=64)
        generator._client = SimpleNamespace(messages=FakeMessages())

        assert generator.generate("hello") == "Lighting is soft."
        assert captured == {
            "model": "claude-test",
            "max_tokens": 64,
            "messages": [{"role": "user", "content": "hello"}],
        }


# =============================================================================
# Insight step
# =============================================================================

class TestInsightStep:
    def test_absent_generator_is_not_called(self):
        step = InsightStep(NullInsightGenerator(), fast_config())
        output = step.run(InsightInput(feature_set=build_feature_set()))
        assert output.insight is None
        assert output.attempts == 0

    def test_disabled_in_config(self):
        generator = CountingGenerator("text")
        step = InsightStep(generator, fast_config(enabled=False))
        assert step.run(InsightInput(feature_set=build_feature_set())).insight is None
        assert generator.calls == 0

    def test_success(self):
        generator = CountingGenerator("  1. Add glow  ")
        output = InsightStep(generator, fast_config()).run(InsightInput(feature_set=build_feature_set()))
        assert output.insight == "1. Add glow"
        assert output.attempts == 1

    def test_retry_then_success(self):
        generator = CountingGenerator(RuntimeError("503"), "Lighting is fine.")
        output = InsightStep(generator, fast_config()).run(InsightInput(feature_set=build_feature_set()))
        assert output.insight == "Lighting is fine."
        assert output.attempts == 2
        assert generator.calls == 2

    def test_retried_at_most_once(self):
        generator = CountingGenerator(RuntimeError("down"))
        step = InsightStep(generator, fast_config())
        with pytest.raises(InsightUnavailable) as exc_info:
            step.run(InsightInput(feature_set=build_feature_set()))
        assert exc_info.value.attempts == 2
        assert generator.calls == 2

    def test_empty_response_is_a_failure(self):
        generator = CountingGenerator("   ")
        with pytest.raises(InsightUnavailable):
            InsightStep(generator, fast_config(max_retries=0)).run(InsightInput(feature_set=build_feature_set()))
        assert generator.calls == 1

    @pytest.mark.slow
    def test_timeout(self):
        release = threading.Event()

        def hang(prompt):
            release.wait(5.0)
            return "too late"

        step = InsightStep(CallableInsightGenerator(hang), fast_config(timeout_seconds=0.05))
        try:
            with pytest.raises(InsightUnavailable) as exc_info:
                step.run(InsightInput(feature_set=build_feature_set()))
            assert "timed out" in str(exc_info.value)
        finally:
            release.set()

    @pytest.mark.slow
    def test_hung_generator_does_not_block_exit(self):
        script = textwrap.dedent("""
            import time

            import numpy as np

            from frame_features.buffer import buffer_from_array
            from frame_features.config import EngineConfig
            from frame_features.insight import CallableInsightGenerator
            from frame_features.pipeline_runner import FrameAnalyzer

            config = EngineConfig()
            config.max_workers = 1
            config.insight.timeout_seconds = 0.2
            config.insight.max_retries = 0
            generator = CallableInsightGenerator(lambda prompt: time.sleep(10) or "late")
            frame = np.full((8, 8, 4), 128, dtype=np.uint8)
            with FrameAnalyzer(config, insight_generator=generator) as analyzer:
                result = analyzer.analyze(buffer_from_array(frame))
            print("insight", result.insight)
        """)
        env = dict(os.environ)
        src = str(Path(__file__).resolve().parents[1] / "src")
        env["PYTHONPATH"] = os.pathsep.join(filter(None, [src, env.get("PYTHONPATH")]))

        started = time.monotonic()
        completed = subprocess.run(
            [sys.executable, "-c", script], env=env, capture_output=True, text=True, timeout=30
        )
        elapsed = time.monotonic() - started

        assert completed.returncode == 0, completed.stderr
        assert "insight None" in completed.stdout
        assert elapsed < 5.0
