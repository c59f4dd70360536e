"""Pytest fixtures for lazypick tests."""

from __future__ import annotations

import os

import pytest


@pytest.fixture(autouse=True)
def clean_lazypick_env(monkeypatch, tmp_path):
    """Keep LAZYPICK_* variables and stray .env files out of every test."""
    for key in list(os.environ):
        if key.startswith("LAZYPICK_"):
            monkeypatch.delenv(key)
    monkeypatch.chdir(tmp_path)
