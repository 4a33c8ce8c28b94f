"""Smoke tests for the UI module and CLI (no display required)."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import pytest

from cohortdispersal.ui.pygame_client import PygameRenderer


def test_pygame_renderer_importable() -> None:
    """PygameRenderer class is importable without initialising pygame."""
    assert PygameRenderer is not None


def test_main_module_importable() -> None:
    """The __main__ module is importable and exposes main()."""
    from cohortdispersal.__main__ import main

    assert callable(main)


def test_headless_run(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    caplog: pytest.LogCaptureFixture,
) -> None:
    """--headless runs the requested steps and logs a summary."""
    from cohortdispersal.__main__ import main

    yaml_file = tmp_path / "tiny.yaml"
    yaml_file.write_text(
        "min_lat: -10.0\nmax_lat: 10.0\ncell_size_deg: 20.0\ncohorts_per_cell: 1\n",
    )
    monkeypatch.setattr(
        sys,
        "argv",
        ["cohortdispersal", "-c", str(yaml_file), "--headless", "--steps", "2"],
    )
    with caplog.at_level(logging.INFO):
        main()
    assert "2 steps complete" in caplog.text
