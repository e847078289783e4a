# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Signature-only views of programs.

A stub lets the compiler check calls into a dependency without compiling
its bodies. Stubs come from parsed Leo sources (local dependencies) or
from Aleo instruction files (cached network dependencies). A dependency
whose interface is not available gets an opaque stub: it may be imported,
but calls into it are not checked.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from leolint.compiler.ast import ProgramAst

_ALEO_PROGRAM_RE = re.compile(r"^\s*program\s+([A-Za-z][A-Za-z0-9_]*\.aleo)\s*;")
_ALEO_IMPORT_RE = re.compile(r"^\s*import\s+([A-Za-z][A-Za-z0-9_]*\.aleo)\s*;")
_ALEO_HEADER_RE = re.compile(r"^\s*(struct|record|mapping|function|closure|finalize)\s+([A-Za-z_][A-Za-z0-9_]*)\s*:")
_ALEO_INPUT_RE = re.compile(r"^\s*input\s+(r[0-9]+)\s+as\s+([^;]+);")
_ALEO_OUTPUT_RE = re.compile(r"^\s*output\s+(r[0-9]+)\s+as\s+([^;]+);")


@dataclass(frozen=True)
class FunctionStub:
	name: str
	kind: str  # "transition" | "function" | "inline" | "finalize"
	is_async: bool = False
	inputs: tuple[str, ...] = ()
	output: str | None = None


@dataclass(frozen=True)
class Stub:
	program: str  # "<name>.aleo"
	imports: tuple[str, ...] = ()
	structs: tuple[str, ...] = ()
	records: tuple[str, ...] = ()
	mappings: tuple[str, ...] = ()
	functions: tuple[FunctionStub, ...] = ()
	opaque: bool = False

	def function(self, name: str) -> FunctionStub | None:
		for fn in self.functions:
			if fn.name == name:
				return fn
		return None

	@classmethod
	def opaque_for(cls, program: str) -> "Stub":
		return cls(program=program, opaque=True)

	@classmethod
	def from_program(cls, ast: ProgramAst) -> "Stub":
		return cls(
			program=ast.program,
			imports=tuple(i.program for i in ast.imports),
			structs=tuple(s.name for s in ast.structs if not s.is_record),
			records=tuple(s.name for s in ast.structs if s.is_record),
			mappings=tuple(m.name for m in ast.mappings),
			functions=tuple(
				FunctionStub(
					name=f.name,
					kind=f.kind,
					is_async=f.is_async,
					inputs=tuple(p.render() for p in f.params),
					output=f.output,
				)
				for f in ast.functions
			),
		)

	@classmethod
	def from_aleo(cls, text: str) -> "Stub":
		"""
		Read the interface headers of an Aleo instructions file.

		Aleo `function`s are Leo transitions and `closure`s are Leo functions;
		a `finalize` block marks the function of the same name as async.
		"""
		program: str | None = None
		imports: list[str] = []
		structs: list[str] = []
		records: list[str] = []
		mappings: list[str] = []
		functions: list[dict] = []
		current: dict | None = None
		for line in text.splitlines():
			m = _ALEO_PROGRAM_RE.match(line)
			if m:
				program = m.group(1)
				current = None
				continue
			m = _ALEO_IMPORT_RE.match(line)
			if m:
				imports.append(m.group(1))
				continue
			m = _ALEO_HEADER_RE.match(line)
			if m:
				kind, name = m.group(1), m.group(2)
				current = None
				if kind == "struct":
					structs.append(name)
				elif kind == "record":
					records.append(name)
				elif kind == "mapping":
					mappings.append(name)
				elif kind == "finalize":
					for fn in functions:
						if fn["name"] == name:
							fn["is_async"] = True
				else:
					current = {
						"name": name,
						"kind": "transition" if kind == "function" else "function",
						"is_async": False,
						"inputs": [],
						"output": None,
					}
					functions.append(current)
				continue
			if current is None:
				continue
			m = _ALEO_INPUT_RE.match(line)
			if m:
				current["inputs"].append(f"{m.group(1)}: {m.group(2).strip()}")
				continue
			m = _ALEO_OUTPUT_RE.match(line)
			if m:
				current["output"] = m.group(2).strip()
		if program is None:
			raise ValueError("aleo file has no program declaration")
		return cls(
			program=program,
			imports=tuple(imports),
			structs=tuple(structs),
			records=tuple(records),
			mappings=tuple(mappings),
			functions=tuple(
				FunctionStub(
					name=fn["name"],
					kind=fn["kind"],
					is_async=fn["is_async"],
					inputs=tuple(fn["inputs"]),
					output=fn["output"],
				)
				for fn in functions
			),
		)


__all__ = ["FunctionStub", "Stub"]
