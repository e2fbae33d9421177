"""Shared fixtures."""

import pytest

from trimwire.pruning import tokens


@pytest.fixture(autouse=True)
def _offline_tokenizer(monkeypatch):
    """Use the character heuristic so tests never download an encoding."""
    estimator = tokens.TokenEstimator()
    estimator._unavailable = True
    monkeypatch.setattr(tokens, "default_estimator", estimator)
