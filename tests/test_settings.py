from __future__ import annotations

from pathlib import Path

from gifflow.settings import GifSettings, load_gif_settings


def test_gif_settings_from_yaml(tmp_path: Path) -> None:
    config = tmp_path / "app.yml"
    config.write_text(
        "bot:\n"
        "  gif_settings:\n"
        "    gif_limit: 4\n"
        "    gif_randomised: true\n"
        "    gif_width: 320\n"
        "    gif_height: 180\n"
    )

    assert load_gif_settings(str(config)) == GifSettings(limit=4, randomised=True, width=320, height=180)


def test_partial_config_keeps_defaults(tmp_path: Path) -> None:
    config = tmp_path / "app.yml"
    config.write_text("bot:\n  gif_settings:\n    gif_width: 100\n")

    assert load_gif_settings(str(config)) == GifSettings(width=100)


def test_missing_or_broken_config_uses_defaults(tmp_path: Path) -> None:
    broken = tmp_path / "broken.yml"
    broken.write_text("bot: [unclosed")

    assert load_gif_settings(str(tmp_path / "absent.yml")) == GifSettings()
    assert load_gif_settings(str(broken)) == GifSettings()
