import annotate_edit.utils.i18n  # noqa:F401

from easydict import EasyDict as edict

from .env import load_cfg_from_env
from .config import load_config


def test_load_cfg_from_env():
    input_dict = {"ANNOTATE_EDIT_a": 2, "ANNOTATE_EDIT_view__zoom": 3}
    loaded = load_cfg_from_env(edict(), input_dict)
    assert loaded.a == 2
    assert loaded.view.zoom == 3


def test_load_cfg_from_env_ignores_other_prefixes():
    loaded = load_cfg_from_env(edict(), {"HOME": "/root", "OTHER_APP_a": 1})
    assert loaded == {}


def test_env_values_follow_default_types():
    cfg = load_config(
        {
            "ANNOTATE_EDIT_ZOOM_MAX": "4",
            "ANNOTATE_EDIT_HISTORY_LIMIT": "10",
            "ANNOTATE_EDIT_DEFAULT_COLOR": "0,1,0,1",
        }
    )
    assert cfg.zoom_max == 4.0
    assert isinstance(cfg.zoom_max, float)
    assert cfg.history_limit == 10
    assert cfg.default_color == (0.0, 1.0, 0.0, 1.0)


def test_load_config_does_not_share_defaults():
    first = load_config({})
    first.hit_margin = 100.0
    assert load_config({}).hit_margin == 8.0
