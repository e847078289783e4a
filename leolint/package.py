# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Package directory helpers.

A package directory looks like:

	<package>/
	  program.json
	  src/main.leo        (plus any other *.leo files below src/)
	  build/              scratch, recreated by each build
	  outputs/            scratch, recreated by each build
"""

from __future__ import annotations

import shutil
from pathlib import Path

from leolint.manifest import Manifest
from leolint.program_id import ProgramID

SOURCE_DIRECTORY_NAME = "src"
BUILD_DIRECTORY_NAME = "build"
OUTPUTS_DIRECTORY_NAME = "outputs"
SOURCE_FILE_EXTENSION = ".leo"
MAIN_ALEO_FILENAME = "main.aleo"


class PackageError(Exception):
	pass


class Package:
	@staticmethod
	def create(build_path: Path, program_id: ProgramID) -> Path:
		"""
		Create a package scaffold for `program_id` at `build_path`.

		The directory must not exist yet. It receives a manifest and a
		`main.aleo` declaring the program.
		"""
		if build_path.exists():
			raise PackageError(f"cannot create package for '{program_id}': {build_path} already exists")
		try:
			build_path.mkdir(parents=True)
			Manifest(program=str(program_id)).write_to_dir(build_path)
			(build_path / MAIN_ALEO_FILENAME).write_text(f"program {program_id};\n", encoding="utf-8")
		except OSError as err:
			raise PackageError(f"cannot create package for '{program_id}' at {build_path}: {err}") from err
		return build_path


class _ScratchDirectory:
	NAME = ""

	@classmethod
	def path(cls, package_path: Path) -> Path:
		return package_path / cls.NAME

	@classmethod
	def create(cls, package_path: Path) -> Path:
		"""Create `<package>/<NAME>` fresh, clearing whatever an earlier run left there."""
		path = cls.path(package_path)
		try:
			if path.is_symlink() or (path.exists() and not path.is_dir()):
				raise PackageError(f"cannot create {cls.NAME} directory: {path} exists and is not a directory")
			if path.exists():
				shutil.rmtree(path)
			path.mkdir(parents=True)
		except OSError as err:
			raise PackageError(f"cannot create {cls.NAME} directory {path}: {err}") from err
		return path

	@classmethod
	def remove(cls, package_path: Path) -> None:
		path = cls.path(package_path)
		try:
			shutil.rmtree(path)
		except OSError as err:
			raise PackageError(f"cannot remove {cls.NAME} directory {path}: {err}") from err


class BuildDirectory(_ScratchDirectory):
	NAME = BUILD_DIRECTORY_NAME


class OutputsDirectory(_ScratchDirectory):
	NAME = OUTPUTS_DIRECTORY_NAME


class SourceDirectory:
	@staticmethod
	def files(package_path: Path) -> list[Path]:
		src = package_path / SOURCE_DIRECTORY_NAME
		if not src.is_dir():
			raise PackageError(f"missing source directory {src}")
		try:
			return sorted(p for p in src.rglob("*" + SOURCE_FILE_EXTENSION) if p.is_file())
		except OSError as err:
			raise PackageError(f"cannot list source files in {src}: {err}") from err

	@staticmethod
	def check_files(paths: list[Path]) -> None:
		for path in paths:
			if path.suffix != SOURCE_FILE_EXTENSION:
				raise PackageError(f"invalid source file {path}: expected '{SOURCE_FILE_EXTENSION}' extension")
			if not path.is_file():
				raise PackageError(f"invalid source file {path}: not a regular file")
			try:
				path.read_bytes().decode("utf-8")
			except OSError as err:
				raise PackageError(f"cannot read source file {path}: {err}") from err
			except UnicodeDecodeError as err:
				raise PackageError(f"invalid source file {path}: not UTF-8 ({err.reason} at byte {err.start})") from err


__all__ = [
	"BuildDirectory",
	"OutputsDirectory",
	"Package",
	"PackageError",
	"SourceDirectory",
	"SOURCE_FILE_EXTENSION",
]
