import json

from backdrop.control.config import DEFAULTS, TOOLTIPS, default_config, load_config, merge_config


def test_defaults_match_original_constants():
    network = DEFAULTS["network"]
    assert network["particleCount"] == 80
    assert network["narrowParticleCount"] == 40
    assert network["linkDistance"] == 120.0
    assert network["influenceRadius"] == 150.0
    assert network["speed"] == 0.5
    assert DEFAULTS["shapes"]["shapeCount"] == 15
    assert DEFAULTS["system"]["narrowBreakpoint"] == 768


def test_every_setting_has_a_tooltip():
    keys = {f"{section}.{key}" for section, values in DEFAULTS.items() for key in values}
    assert keys == set(TOOLTIPS)


def test_default_config_is_a_copy():
    config = default_config()
    config["network"]["particleCount"] = 3
    assert DEFAULTS["network"]["particleCount"] == 80


def test_merge_coerces_values():
    config = merge_config(None, {
        "network": {"particleCount": "25", "linkDistance": 90},
        "system": {"transparent": "no", "style": "shapes"},
    })
    assert config["network"]["particleCount"] == 25
    assert config["network"]["linkDistance"] == 90.0
    assert isinstance(config["network"]["linkDistance"], float)
    assert config["system"]["transparent"] is False
    assert config["system"]["style"] == "shapes"
    assert config["network"]["speed"] == 0.5


def test_merge_rejects_invalid_values(capsys):
    config = merge_config(None, {
        "network": {"particleCount": "many", "influenceRadius": -1, "unknown": 1},
        "system": {"style": "stars", "frameIntervalMs": -5},
        "colors": {"x": 1},
    })
    assert config["network"]["particleCount"] == 80
    assert config["network"]["influenceRadius"] == 150.0
    assert "unknown" not in config["network"]
    assert "colors" not in config
    assert config["system"]["style"] == "particles"
    assert config["system"]["frameIntervalMs"] == 0
    err = capsys.readouterr().err
    assert "[Backdrop][WARN]" in err
    assert "network.unknown" in err


def test_merge_on_top_of_base():
    base = merge_config(None, {"network": {"particleCount": 10}})
    merged = merge_config(base, {"network": {"linkDistance": 60}})
    assert merged["network"]["particleCount"] == 10
    assert merged["network"]["linkDistance"] == 60.0
    assert base["network"]["linkDistance"] == 120.0


def test_load_config(tmp_path):
    path = tmp_path / "backdrop.json"
    path.write_text(json.dumps({"shapes": {"shapeCount": 4}}), encoding="utf-8")
    config = load_config(path)
    assert config["shapes"]["shapeCount"] == 4
    assert config["network"] == DEFAULTS["network"]


def test_load_config_falls_back_to_defaults(tmp_path, capsys):
    assert load_config(None) == DEFAULTS
    assert load_config(tmp_path / "missing.json") == DEFAULTS
    broken = tmp_path / "broken.json"
    broken.write_text("{not json", encoding="utf-8")
    assert load_config(broken) == DEFAULTS
    listing = tmp_path / "list.json"
    listing.write_text("[1, 2]", encoding="utf-8")
    assert load_config(listing) == DEFAULTS
    assert capsys.readouterr().err.count("[Backdrop][WARN]") == 3


def test_non_finite_numbers_keep_the_defaults(tmp_path, capsys):
    path = tmp_path / "overflow.json"
    path.write_text(
        '{"network": {"particleCount": 1e400, "influenceRadius": NaN, "linkDistance": -Infinity}}',
        encoding="utf-8",
    )
    config = load_config(path)
    assert config["network"]["particleCount"] == 80
    assert config["network"]["influenceRadius"] == 150.0
    assert config["network"]["linkDistance"] == 120.0
    err = capsys.readouterr().err
    assert "network.particleCount" in err
    assert "network.influenceRadius" in err
    assert "network.linkDistance" in err
