"""Unit tests for public API."""

from __future__ import annotations

import derivcheck
from derivcheck import CentralDifferenceEstimator, CheckReport, ModelCheckKit


def test_main_classes_importable_from_top_level():
    """Test that the main classes can be imported from top level."""
    assert ModelCheckKit is not None
    assert CentralDifferenceEstimator is not None
    assert CheckReport is not None


def test_public_all_names_exist():
    """Test that every name in __all__ is an attribute of the package."""
    for name in derivcheck.__all__:
        assert hasattr(derivcheck, name), name


def test_kit_reports_top_level_module():
    """Test that the kit presents as coming from the top-level package."""
    assert ModelCheckKit.__module__ == "derivcheck"
