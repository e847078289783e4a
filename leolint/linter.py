# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
The lint/format pass over a package and its local dependencies.

For the root package and every local dependency (dependencies first):

1. stage the package and the stubs of its direct dependencies,
2. compile every source file into fresh `outputs/` and `build/` scratch
   directories (verification only, the output is dropped),
3. remove the scratch directories,
4. rewrite every source file in canonical form.

The first failure aborts the pass. Files rewritten before the failure stay
rewritten.
"""

from __future__ import annotations

import shutil
import sys
from dataclasses import dataclass, field
from pathlib import Path

from leolint.compiler import CompileError, Compiler, CompilerOptions, Handler
from leolint.compiler.stubs import Stub
from leolint.errors import (
	KIND_COMPILE,
	KIND_FILESYSTEM,
	KIND_PROGRAM_ID,
	KIND_RETRIEVAL,
	LintError,
	LintIdentity,
)
from leolint.normalizer import normalize_code
from leolint.package import BuildDirectory, OutputsDirectory, Package, PackageError, SourceDirectory
from leolint.program_id import NetworkName, ProgramID
from leolint.retriever import Retriever, RetrieverError

DEFAULT_ENDPOINT = "https://api.explorer.aleo.org/v1"


@dataclass(frozen=True)
class LintOptions:
	program_id: ProgramID
	package_path: Path
	home_path: Path
	endpoint: str = DEFAULT_ENDPOINT
	network: NetworkName = NetworkName.TESTNET
	compiler_options: CompilerOptions = field(default_factory=CompilerOptions)
	verbose: bool = False


class Linter:
	def __init__(self, opts: LintOptions) -> None:
		self.opts = opts

	def _note(self, msg: str) -> None:
		if self.opts.verbose:
			print(f"[lint] {msg}", file=sys.stderr)

	def _identity(self, program: str | None = None) -> LintIdentity:
		return LintIdentity(program=program or str(self.opts.program_id), network=self.opts.network.value)

	def lint(self) -> None:
		opts = self.opts
		build_directory = opts.package_path / "build"
		if build_directory.exists():
			try:
				shutil.rmtree(build_directory)
			except OSError as err:
				raise LintError(
					reason_code="BUILD_DIR_REMOVE_FAILED",
					message=f"failed to remove build directory: {err}",
					kind=KIND_FILESYSTEM,
					identity=self._identity(),
					path=str(build_directory),
				) from err
		try:
			Package.create(build_directory, opts.program_id)
		except PackageError as err:
			raise LintError(
				reason_code="PACKAGE_CREATE_FAILED",
				message=str(err),
				kind=KIND_FILESYSTEM,
				identity=self._identity(),
				path=str(build_directory),
			) from err

		main_sym = sys.intern(opts.program_id.name)
		try:
			retriever = Retriever(main_sym, opts.package_path, opts.home_path, opts.endpoint, network=opts.network)
			local_dependencies = retriever.retrieve()
		except RetrieverError as err:
			raise LintError(
				reason_code="RETRIEVE_FAILED",
				message=f"failed to retrieve dependencies: {err}",
				kind=KIND_RETRIEVAL,
				identity=self._identity(),
				path=str(opts.package_path),
			) from err
		local_dependencies.append(main_sym)
		self._note("order: " + ", ".join(local_dependencies))

		for dependency in local_dependencies:
			self._lint_dependency(retriever, dependency)

	def _lint_dependency(self, retriever: Retriever, dependency: str) -> None:
		program = f"{dependency}.aleo"
		try:
			local_path, stubs = retriever.prepare_local(dependency)
		except RetrieverError as err:
			raise LintError(
				reason_code="RETRIEVE_FAILED",
				message=f"failed to prepare '{program}': {err}",
				kind=KIND_RETRIEVAL,
				identity=self._identity(program),
			) from err
		for name in retriever.drain_unchecked():
			self._note(f"interface of {name} is not cached under {self.opts.home_path}; calls into it are unchecked (fetch from {retriever.endpoint})")
		# Manifests validate program names on load, so through `lint()` this
		# only fails for a symbol that did not come from a manifest.
		try:
			program_id = ProgramID.parse(program)
		except ValueError as err:
			raise LintError(
				reason_code="PROGRAM_ID_INVALID",
				message=f"failed to build program id: {err}",
				kind=KIND_PROGRAM_ID,
				identity=self._identity(program),
				path=str(local_path),
			) from err

		try:
			source_files = self._verify(program_id, local_path, stubs)
		except Exception:
			# Leave no scratch space behind for the next run.
			for scratch in (BuildDirectory, OutputsDirectory):
				shutil.rmtree(scratch.path(local_path), ignore_errors=True)
			raise

		for scratch in (BuildDirectory, OutputsDirectory):
			try:
				scratch.remove(local_path)
			except PackageError as err:
				raise LintError(
					reason_code="SCRATCH_REMOVE_FAILED",
					message=str(err),
					kind=KIND_FILESYSTEM,
					identity=self._identity(program),
					path=str(scratch.path(local_path)),
				) from err
		self._note(f"{program}: removed scratch directories")

		for file_path in source_files:
			self._rewrite(program, file_path)

	def _verify(self, program_id: ProgramID, local_path: Path, stubs: dict[str, Stub]) -> list[Path]:
		"""Create scratch space, validate the sources and compile each of them."""
		program = str(program_id)
		try:
			outputs_directory = OutputsDirectory.create(local_path)
			BuildDirectory.create(local_path)
		except PackageError as err:
			raise LintError(
				reason_code="SCRATCH_CREATE_FAILED",
				message=str(err),
				kind=KIND_FILESYSTEM,
				identity=self._identity(program),
				path=str(local_path),
			) from err
		try:
			source_files = SourceDirectory.files(local_path)
			SourceDirectory.check_files(source_files)
		except PackageError as err:
			raise LintError(
				reason_code="SOURCE_FILES_INVALID",
				message=str(err),
				kind=KIND_FILESYSTEM,
				identity=self._identity(program),
				path=str(local_path),
			) from err

		# One handler per package; the first file with errors ends the pass.
		handler = Handler()
		for file_path in source_files:
			self._note(f"{program}: compiling {file_path}")
			compiler = Compiler(
				program_id.name,
				program_id.network,
				handler,
				file_path,
				outputs_directory,
				self.opts.compiler_options,
				stubs,
			)
			try:
				compiler.compile()
			except CompileError as err:
				raise LintError(
					reason_code="COMPILE_FAILED",
					message=err.message,
					kind=KIND_COMPILE,
					identity=self._identity(program),
					path=str(file_path),
					diagnostics=tuple(d.render() for d in handler.errors),
				) from err
		return source_files

	def _rewrite(self, program: str, file_path: Path) -> None:
		try:
			code = file_path.read_text(encoding="utf-8")
		except (OSError, UnicodeDecodeError) as err:
			raise LintError(
				reason_code="SOURCE_READ_FAILED",
				message=f"failed to read file: {err}",
				kind=KIND_FILESYSTEM,
				identity=self._identity(program),
				path=str(file_path),
			) from err
		try:
			file_path.write_text(normalize_code(code), encoding="utf-8")
		except OSError as err:
			raise LintError(
				reason_code="SOURCE_WRITE_FAILED",
				message=f"failed to write file: {err}",
				kind=KIND_FILESYSTEM,
				identity=self._identity(program),
				path=str(file_path),
			) from err
		self._note(f"{program}: formatted {file_path}")


def lint(
	program_id: ProgramID,
	endpoint: str,
	package_path: Path,
	home_path: Path,
	*,
	network: NetworkName = NetworkName.TESTNET,
	compiler_options: CompilerOptions | None = None,
	verbose: bool = False,
) -> None:
	"""Run the lint/format pass for the package rooted at `package_path`. Raises `LintError`."""
	opts = LintOptions(
		program_id=program_id,
		package_path=package_path,
		home_path=home_path,
		endpoint=endpoint,
		network=network,
		compiler_options=compiler_options or CompilerOptions(),
		verbose=verbose,
	)
	Linter(opts).lint()


__all__ = ["DEFAULT_ENDPOINT", "LintOptions", "Linter", "lint"]
