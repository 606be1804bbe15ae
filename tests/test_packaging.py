from __future__ import annotations

from pathlib import Path

from setuptools import find_namespace_packages

ROOT = Path(__file__).resolve().parents[1]


def test_server_modules_are_packaged() -> None:
    # scholarmatch/ and scholarmatch/server/ carry no __init__.py
    packages = find_namespace_packages(where=str(ROOT), include=["scholarmatch*"])

    assert "scholarmatch" in packages
    assert "scholarmatch.server" in packages
    assert (ROOT / "scholarmatch" / "server" / "app.py").is_file()


def test_package_discovery_includes_namespace_packages() -> None:
    pyproject = (ROOT / "pyproject.toml").read_text(encoding="utf-8")
    section = pyproject.split("[tool.setuptools.packages.find]", 1)[1].split("\n[", 1)[0]

    assert 'include = ["scholarmatch*"]' in section
    assert "namespaces = true" in section
