"""Engine configuration."""
import json

import pytest

from frame_features.config import (
    CacheConfig,
    EngineConfig,
    SourceConfig,
    get_default_config,
    load_config_from_file,
    save_config_to_file,
)


def test_defaults():
    config = get_default_config()
    assert config.composition.grid_size == 3
    assert config.color.sample_stride == 10
    assert config.color.alpha_threshold == 128
    assert config.elements.edge_magnitude_threshold == 100.0
    assert config.effects.blur_threshold == 0.7
    assert config.cache.max_entries == 20
    assert config.cache.key_mode == "content"
    assert config.insight.max_retries == 1
    assert config.source.canvas_size == (1920, 1080)


def test_file_round_trip(tmp_path):
    config = EngineConfig()
    config.cache.key_mode = "frame"
    config.source.canvas_size = (640, 360)
    config.max_workers = 2

    path = tmp_path / "engine.json"
    save_config_to_file(config, str(path))
    loaded = load_config_from_file(str(path))

    assert loaded == config
    assert json.loads(path.read_text())["source"]["canvas_size"] == [640, 360]


def test_partial_dict_keeps_defaults():
    config = EngineConfig.from_dict({"effects": {"noise_threshold": 0.2}, "max_workers": 1})
    assert config.effects.noise_threshold == 0.2
    assert config.effects.blur_threshold == 0.7
    assert config.max_workers == 1


def test_native_canvas():
    assert SourceConfig(canvas_size=None).canvas_size is None


@pytest.mark.parametrize("kwargs", [
    {"key_mode": "lru"},
    {"max_entries": 0},
])
def test_invalid_cache_config(kwargs):
    with pytest.raises(ValueError):
        CacheConfig(**kwargs)


def test_invalid_canvas():
    with pytest.raises(ValueError):
        SourceConfig(canvas_size=(0, 100))


def test_unknown_key_is_rejected():
    with pytest.raises(TypeError):
        EngineConfig.from_dict({"color": {"bins": 12}})


def test_package_metadata():
    import frame_features

    assert frame_features.__version__ == "1.0.0"
    assert "__author__" not in frame_features.__all__
    assert not hasattr(frame_features, "__author__")
