# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import json
from pathlib import Path
from typing import Callable

import pytest

from leolint.tests.leo_sources import program_source, write_file

PackageFactory = Callable[..., Path]


@pytest.fixture
def make_package(tmp_path: Path) -> PackageFactory:
	"""
	Write a package `<tmp_path>/<name>` with a manifest and `src/main.leo`.

	`deps` entries are either a local package name (path `../<name>`) or a
	full manifest dependency object.
	"""

	def _make(name: str, source: str | None = None, *, deps: list | None = None, files: dict[str, str] | None = None) -> Path:
		root = tmp_path / name
		manifest: dict = {"program": f"{name}.aleo", "version": "0.1.0"}
		if deps:
			entries = []
			for dep in deps:
				if isinstance(dep, str):
					entries.append({"name": f"{dep}.aleo", "location": "local", "path": f"../{dep}"})
				else:
					entries.append(dep)
			manifest["dependencies"] = entries
		write_file(root / "program.json", json.dumps(manifest, indent=2))
		write_file(root / "src" / "main.leo", source if source is not None else program_source(name))
		for rel, text in (files or {}).items():
			write_file(root / "src" / rel, text)
		return root

	return _make


@pytest.fixture
def home(tmp_path: Path) -> Path:
	path = tmp_path / "home"
	path.mkdir()
	return path
