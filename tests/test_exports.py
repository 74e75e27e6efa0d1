"""Tests for the public package surface."""

import importlib

import pytest

import tindatrack


class TestPackageExports:
    def test_version(self):
        assert tindatrack.__version__ == "0.1.0"

    @pytest.mark.parametrize("name", tindatrack.__all__)
    def test_all_names_resolve(self, name):
        assert hasattr(tindatrack, name)

    @pytest.mark.parametrize(
        "module",
        ["tindatrack.adapters", "tindatrack.backup", "tindatrack.config", "tindatrack.schema"],
    )
    def test_subpackage_all_resolves(self, module):
        mod = importlib.import_module(module)
        for name in mod.__all__:
            assert hasattr(mod, name), f"{module}.{name}"
