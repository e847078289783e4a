# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Dependency retrieval for a package.

`retrieve()` walks the `local` dependencies of the root manifest and returns
them in build order: every dependency comes before each package that
depends on it. `prepare_local()` then hands out the path of one package
together with stubs for its direct dependencies.

Network dependencies are never walked. Their interfaces are read from the
registry cache under the home directory when present:

	<home>/<network>/<name>.aleo
"""

from __future__ import annotations

import sys
from dataclasses import dataclass
from pathlib import Path

from leolint.compiler.parser import ParseError, parse_file
from leolint.compiler.stubs import Stub
from leolint.manifest import LOCATION_LOCAL, Dependency, Manifest, ManifestError
from leolint.package import SOURCE_DIRECTORY_NAME
from leolint.program_id import NetworkName

MAIN_FILENAME = "main.leo"


class RetrieverError(Exception):
	pass


@dataclass(frozen=True)
class _LocalPackage:
	symbol: str
	path: Path
	manifest: Manifest


class Retriever:
	def __init__(
		self,
		name: str,
		path: Path,
		home: Path,
		endpoint: str,
		*,
		network: NetworkName = NetworkName.TESTNET,
	) -> None:
		self.name = sys.intern(name)
		self.path = path
		self.home = home
		self.endpoint = endpoint
		self.network = network
		try:
			manifest = Manifest.read_from_dir(path)
		except ManifestError as err:
			raise RetrieverError(str(err)) from err
		if manifest.program_id.name != self.name:
			raise RetrieverError(f"manifest in {path} declares '{manifest.program}', expected '{self.name}.aleo'")
		self._packages: dict[str, _LocalPackage] = {self.name: _LocalPackage(self.name, path, manifest)}
		self._stubs: dict[str, Stub] = {}
		self._retrieved = False
		# Network dependencies whose interface was not cached; calls into them go unchecked.
		self._unchecked: list[str] = []

	def retrieve(self) -> list[str]:
		order: list[str] = []
		done: set[str] = set()
		visiting: list[str] = []

		def visit(symbol: str) -> None:
			visiting.append(symbol)
			for dep in self._packages[symbol].manifest.dependencies:
				if dep.location != LOCATION_LOCAL:
					continue
				dep_symbol = sys.intern(dep.symbol)
				if dep_symbol in visiting:
					cycle = visiting[visiting.index(dep_symbol) :] + [dep_symbol]
					raise RetrieverError(f"dependency cycle: {' -> '.join(cycle)}")
				self._load_local(dep_symbol, dep, dependent=symbol)
				if dep_symbol not in done:
					visit(dep_symbol)
			visiting.pop()
			done.add(symbol)
			if symbol != self.name:
				order.append(symbol)

		visit(self.name)
		self._retrieved = True
		return order

	def prepare_local(self, symbol: str) -> tuple[Path, dict[str, Stub]]:
		pkg = self._packages.get(symbol)
		if pkg is None or (symbol != self.name and not self._retrieved):
			raise RetrieverError(f"unknown local dependency '{symbol}'")
		stubs: dict[str, Stub] = {}
		for dep in pkg.manifest.dependencies:
			dep_symbol = sys.intern(dep.symbol)
			stubs[dep_symbol] = self._stub(dep_symbol, dep)
		return pkg.path, stubs

	def drain_unchecked(self) -> list[str]:
		"""Return the network dependencies stubbed opaquely since the last call, and forget them."""
		names, self._unchecked = self._unchecked, []
		return names

	def cache_path(self, dep: Dependency) -> Path:
		network = dep.network or self.network
		return self.home / network.value / dep.name

	@staticmethod
	def _local_path(dep: Dependency) -> Path:
		if dep.path is None:
			raise RetrieverError(f"local dependency '{dep.name}' has no path")
		return dep.path

	def _load_local(self, symbol: str, dep: Dependency, *, dependent: str) -> None:
		dep_path = self._local_path(dep)
		known = self._packages.get(symbol)
		if known is not None:
			if known.path.resolve() != dep_path.resolve():
				raise RetrieverError(
					f"'{dep.name}' is required from two locations: {known.path} and {dep_path} (by '{dependent}')"
				)
			return
		try:
			manifest = Manifest.read_from_dir(dep_path)
		except ManifestError as err:
			raise RetrieverError(f"cannot load dependency '{dep.name}' of '{dependent}': {err}") from err
		if manifest.program != dep.name:
			raise RetrieverError(
				f"dependency '{dep.name}' of '{dependent}' points at {dep_path}, which declares '{manifest.program}'"
			)
		self._packages[symbol] = _LocalPackage(symbol, dep_path, manifest)

	def _stub(self, symbol: str, dep: Dependency) -> Stub:
		cached = self._stubs.get(symbol)
		if cached is not None:
			return cached
		if dep.location == LOCATION_LOCAL:
			main = self._local_path(dep) / SOURCE_DIRECTORY_NAME / MAIN_FILENAME
			try:
				stub = Stub.from_program(parse_file(main))
			except (OSError, UnicodeDecodeError) as err:
				raise RetrieverError(f"cannot read '{dep.name}' sources at {main}: {err}") from err
			except ParseError as err:
				raise RetrieverError(f"cannot stub '{dep.name}': {err.span.render()}: {err.message}") from err
		else:
			path = self.cache_path(dep)
			if path.is_file():
				try:
					stub = Stub.from_aleo(path.read_text(encoding="utf-8"))
				except (OSError, UnicodeDecodeError, ValueError) as err:
					raise RetrieverError(f"cannot read cached interface of '{dep.name}' at {path}: {err}") from err
			else:
				stub = Stub.opaque_for(dep.name)
				self._unchecked.append(dep.name)
		self._stubs[symbol] = stub
		return stub


__all__ = ["Retriever", "RetrieverError"]
