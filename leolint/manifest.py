# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Package manifest (`program.json`).

The manifest names the package's program and lists its dependencies:

	{
	  "program": "hello.aleo",
	  "version": "0.1.0",
	  "description": "",
	  "license": "MIT",
	  "dependencies": [
	    {"name": "token.aleo", "location": "local", "path": "../token"},
	    {"name": "credits.aleo", "location": "network", "network": "testnet"}
	  ]
	}
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from leolint.program_id import NetworkName, ProgramID

MANIFEST_FILENAME = "program.json"

LOCATION_LOCAL = "local"
LOCATION_NETWORK = "network"


class ManifestError(ValueError):
	pass


@dataclass(frozen=True)
class Dependency:
	name: str  # "<program>.aleo"
	location: str  # "local" | "network"
	path: Path | None = None  # resolved; set for local dependencies
	network: NetworkName | None = None

	@property
	def symbol(self) -> str:
		return ProgramID.parse(self.name).name

	def to_dict(self, *, base: Path | None = None) -> dict[str, Any]:
		out: dict[str, Any] = {"name": self.name, "location": self.location}
		if self.path is not None:
			out["path"] = str(self.path.relative_to(base)) if base is not None and self.path.is_relative_to(base) else str(self.path)
		if self.network is not None:
			out["network"] = self.network.value
		return out


@dataclass(frozen=True)
class Manifest:
	program: str
	version: str = "0.0.0"
	description: str = ""
	license: str = "MIT"
	dependencies: tuple[Dependency, ...] = ()

	@property
	def program_id(self) -> ProgramID:
		return ProgramID.parse(self.program)

	@classmethod
	def read_from_dir(cls, package_dir: Path) -> "Manifest":
		path = package_dir / MANIFEST_FILENAME
		try:
			text = path.read_text(encoding="utf-8")
		except OSError as err:
			raise ManifestError(f"cannot read manifest {path}: {err}") from err
		try:
			data = json.loads(text)
		except json.JSONDecodeError as err:
			raise ManifestError(f"manifest {path} is not valid JSON: {err}") from err
		return cls.from_dict(data, base=package_dir, origin=str(path))

	@classmethod
	def from_dict(cls, data: Any, *, base: Path, origin: str = MANIFEST_FILENAME) -> "Manifest":
		if not isinstance(data, dict):
			raise ManifestError(f"manifest {origin} must be a JSON object")
		program = data.get("program")
		if not isinstance(program, str) or not program:
			raise ManifestError(f"manifest {origin} is missing 'program'")
		try:
			ProgramID.parse(program)
		except ValueError as err:
			raise ManifestError(f"manifest {origin}: {err}") from err
		for key in ("version", "description", "license"):
			if key in data and not isinstance(data[key], str):
				raise ManifestError(f"manifest {origin} field '{key}' must be a string")

		raw_deps = data.get("dependencies")
		if raw_deps is None:
			raw_deps = []
		if not isinstance(raw_deps, list):
			raise ManifestError(f"manifest {origin} field 'dependencies' must be a list")
		deps: list[Dependency] = []
		seen: set[str] = set()
		for raw in raw_deps:
			dep = _parse_dependency(raw, base=base, origin=origin)
			if dep.name in seen:
				raise ManifestError(f"manifest {origin} lists dependency '{dep.name}' more than once")
			if dep.name == program:
				raise ManifestError(f"manifest {origin}: program '{program}' cannot depend on itself")
			seen.add(dep.name)
			deps.append(dep)

		return cls(
			program=program,
			version=str(data.get("version", "0.0.0")),
			description=str(data.get("description", "")),
			license=str(data.get("license", "MIT")),
			dependencies=tuple(deps),
		)

	def to_dict(self, *, base: Path | None = None) -> dict[str, Any]:
		out: dict[str, Any] = {
			"program": self.program,
			"version": self.version,
			"description": self.description,
			"license": self.license,
		}
		if self.dependencies:
			out["dependencies"] = [d.to_dict(base=base) for d in self.dependencies]
		return out

	def write_to_dir(self, package_dir: Path) -> Path:
		path = package_dir / MANIFEST_FILENAME
		path.write_text(json.dumps(self.to_dict(base=package_dir), indent=2) + "\n", encoding="utf-8")
		return path


def _parse_dependency(raw: Any, *, base: Path, origin: str) -> Dependency:
	if not isinstance(raw, dict):
		raise ManifestError(f"manifest {origin}: dependency entries must be objects")
	name = raw.get("name")
	if not isinstance(name, str) or not name:
		raise ManifestError(f"manifest {origin}: dependency is missing 'name'")
	try:
		ProgramID.parse(name)
	except ValueError as err:
		raise ManifestError(f"manifest {origin}: {err}") from err

	location = raw.get("location")
	if location not in (LOCATION_LOCAL, LOCATION_NETWORK):
		raise ManifestError(f"manifest {origin}: dependency '{name}' location must be 'local' or 'network', got {location!r}")

	network: NetworkName | None = None
	raw_network = raw.get("network")
	if raw_network is not None:
		try:
			network = NetworkName(raw_network)
		except ValueError as err:
			raise ManifestError(f"manifest {origin}: dependency '{name}' has unknown network {raw_network!r}") from err

	path: Path | None = None
	if location == LOCATION_LOCAL:
		raw_path = raw.get("path")
		if not isinstance(raw_path, str) or not raw_path:
			raise ManifestError(f"manifest {origin}: local dependency '{name}' requires 'path'")
		path = (base / raw_path).resolve()

	return Dependency(name=name, location=location, path=path, network=network)


__all__ = ["Dependency", "MANIFEST_FILENAME", "Manifest", "ManifestError", "LOCATION_LOCAL", "LOCATION_NETWORK"]
