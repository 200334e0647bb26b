import json

import pytest

from folioexif.cli import main
from folioexif.config import CONFIG_ENV_VAR


@pytest.fixture(autouse=True)
def no_env_config(monkeypatch):
    monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)


@pytest.fixture
def photo(tmp_path, camera_jpeg):
    path = tmp_path / "Light-16.jpg"
    path.write_bytes(camera_jpeg)
    return path


def test_text_output_with_default_fallback(photo, capsys):
    assert main(['--follow-rational-offsets', str(photo)]) == 0

    out = capsys.readouterr().out.splitlines()
    assert out[0] == f"======== {photo}"
    assert "Camera: Sony A7R III" in out
    assert "Shutter Speed: 1/200s" in out
    assert "Aperture: f/4.0" in out
    assert "Photographer: Simon Hajduk" in out


def test_missing_file_shows_fallback(tmp_path, capsys):
    assert main([str(tmp_path / "missing.jpg")]) == 0

    out = capsys.readouterr().out.splitlines()
    assert out[1:] == [
        "Camera: Sony A7R III",
        "Lens: Sony 20-70mm f/4 G",
        "Photographer: Simon Hajduk",
    ]


def test_json_raw_output(photo, capsys):
    assert main(['--raw', '--json', '--follow-rational-offsets', str(photo)]) == 0

    data = json.loads(capsys.readouterr().out)
    assert data[str(photo)]['ISO'] == '400'
    assert data[str(photo)]['FNumber'] == '4'


def test_config_fallback(photo, tmp_path, capsys):
    config = tmp_path / "portfolio.json"
    config.write_text(json.dumps({"camera": {"make": "Nikon", "model": "Z8", "lens": "", "photographer": "Kim"}}))

    assert main(['--config', str(config), '--json', str(photo)]) == 0

    fields = json.loads(capsys.readouterr().out)[str(photo)]
    assert fields['Camera'] == 'Nikon Z8'
    assert fields['Photographer'] == 'Kim'
    assert 'Lens' not in fields


def test_config_from_environment(photo, tmp_path, monkeypatch, capsys):
    config = tmp_path / "env.json"
    config.write_text(json.dumps({"settings": {"enableMetadataExtraction": False}}))
    monkeypatch.setenv(CONFIG_ENV_VAR, str(config))

    assert main(['--json', str(photo)]) == 0

    fields = json.loads(capsys.readouterr().out)[str(photo)]
    assert fields == {
        'Camera': 'Canon EOS R5',
        'Lens': 'RF 24-70mm f/2.8L IS USM',
        'Photographer': 'Photographer',
    }


def test_bad_config_exit_status(photo, tmp_path, capsys):
    assert main(['--config', str(tmp_path / "nope.json"), str(photo)]) == 2
    assert "Error:" in capsys.readouterr().err
