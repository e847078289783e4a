# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Compile a single Leo source file for verification.

The compiler parses the file and checks it against the stubs of the
package's dependencies. Every problem found is emitted to the shared
`Handler`; `compile()` raises `CompileError` if the file produced any.
On success it returns the program's interface as Aleo instructions
(headers and typed inputs, no bodies).
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Mapping

from lark import Tree

from leolint.compiler.ast import FunctionDecl, ProgramAst
from leolint.compiler.diagnostics import Diagnostic, Handler, Span
from leolint.compiler.parser import ParseError, parse_program
from leolint.compiler.stubs import Stub

CODE_IO = "io"
CODE_SYNTAX = "syntax"
CODE_PROGRAM_MISMATCH = "program-mismatch"
CODE_DUPLICATE = "duplicate-definition"
CODE_UNKNOWN_IMPORT = "unknown-import"
CODE_UNKNOWN_PROGRAM = "unknown-program"
CODE_UNKNOWN_FUNCTION = "unknown-function"
CODE_NOT_TRANSITION = "not-a-transition"
CODE_CONDITIONAL_DEPTH = "conditional-depth"


@dataclass(frozen=True)
class CompilerOptions:
	# Deepest allowed nesting of `if` blocks inside a function body.
	conditional_block_max_depth: int = 10


class CompileError(Exception):
	def __init__(self, message: str, diagnostics: list[Diagnostic]) -> None:
		super().__init__(message)
		self.message = message
		self.diagnostics = diagnostics


class Compiler:
	def __init__(
		self,
		program_name: str,
		network: str,
		handler: Handler,
		main_file_path: Path,
		output_directory: Path,
		options: CompilerOptions | None = None,
		stubs: Mapping[str, Stub] | None = None,
	) -> None:
		self.program_name = program_name
		self.network = network
		self.handler = handler
		self.main_file_path = main_file_path
		self.output_directory = output_directory
		self.options = options or CompilerOptions()
		self.stubs: Mapping[str, Stub] = stubs or {}
		self._emitted: list[Diagnostic] = []

	@property
	def expected_program(self) -> str:
		return f"{self.program_name}.{self.network}"

	def compile(self) -> str:
		self._emitted = []
		file = str(self.main_file_path)
		if not self.output_directory.is_dir():
			self._error(f"output directory {self.output_directory} does not exist", code=CODE_IO, span=Span(file=file))
			self._fail()
		try:
			source = self.main_file_path.read_text(encoding="utf-8")
		except (OSError, UnicodeDecodeError) as err:
			self._error(f"cannot read source file: {err}", code=CODE_IO, span=Span(file=file))
			self._fail()
		try:
			ast = parse_program(source, file=file)
		except ParseError as err:
			self._error(err.message, code=CODE_SYNTAX, span=err.span)
			self._fail()

		self._check_program_name(ast)
		self._check_duplicates(ast)
		imported = self._check_imports(ast)
		for fn in ast.functions:
			self._check_external_calls(fn, imported, file)
			self._check_conditional_depth(fn, file)
		if self._emitted:
			self._fail()
		return render_aleo(ast)

	def _error(self, message: str, *, code: str, span: Span) -> None:
		diag = self.handler.error(message, code=code, span=span)
		self._emitted.append(diag)

	def _fail(self) -> None:
		raise CompileError(f"failed to compile {self.main_file_path}", list(self._emitted))

	def _check_program_name(self, ast: ProgramAst) -> None:
		if ast.program != self.expected_program:
			self._error(
				f"program '{ast.program}' does not match the package name '{self.expected_program}'",
				code=CODE_PROGRAM_MISMATCH,
				span=ast.span,
			)

	def _check_duplicates(self, ast: ProgramAst) -> None:
		namespaces: list[tuple[str, list[tuple[str, Span]]]] = [
			("type", [(s.name, s.span) for s in ast.structs]),
			("mapping", [(m.name, m.span) for m in ast.mappings]),
			("constant", [(c.name, c.span) for c in ast.consts]),
			("function", [(f.name, f.span) for f in ast.functions if f.kind != "finalize"]),
		]
		for what, entries in namespaces:
			seen: set[str] = set()
			for name, span in entries:
				if name in seen:
					self._error(f"duplicate {what} definition '{name}'", code=CODE_DUPLICATE, span=span)
				seen.add(name)

	def _check_imports(self, ast: ProgramAst) -> set[str]:
		imported: set[str] = set()
		for imp in ast.imports:
			if imp.symbol in imported:
				self._error(f"duplicate import '{imp.program}'", code=CODE_DUPLICATE, span=imp.span)
				continue
			imported.add(imp.symbol)
			if imp.symbol not in self.stubs:
				self._error(
					f"imported program '{imp.program}' is not a dependency of '{self.expected_program}'",
					code=CODE_UNKNOWN_IMPORT,
					span=imp.span,
				)
		return imported

	def _check_external_calls(self, fn: FunctionDecl, imported: set[str], file: str) -> None:
		if fn.body is None:
			return
		for call in fn.body.find_data("external_call"):
			program = str(call.children[0])
			callee = str(call.children[1])
			symbol = program.split(".", 1)[0]
			span = Span.from_meta(call.meta, file=file)
			if symbol not in imported:
				self._error(f"call to '{program}/{callee}' but '{program}' is not imported", code=CODE_UNKNOWN_PROGRAM, span=span)
				continue
			stub = self.stubs.get(symbol)
			if stub is None or stub.opaque:
				continue
			target = stub.function(callee)
			if target is None:
				self._error(f"program '{program}' has no function '{callee}'", code=CODE_UNKNOWN_FUNCTION, span=span)
			elif target.kind != "transition":
				self._error(
					f"'{program}/{callee}' is a {target.kind}; only transitions can be called from another program",
					code=CODE_NOT_TRANSITION,
					span=span,
				)

	def _check_conditional_depth(self, fn: FunctionDecl, file: str) -> None:
		if fn.body is None:
			return
		limit = self.options.conditional_block_max_depth
		for node, depth in _conditionals(fn.body):
			if depth > limit:
				self._error(
					f"conditional nesting depth {depth} in '{fn.name}' exceeds the maximum of {limit}",
					code=CODE_CONDITIONAL_DEPTH,
					span=Span.from_meta(node.meta, file=file),
				)
				# One report per function.
				return


def _conditionals(body: Tree) -> Iterator[tuple[Tree, int]]:
	"""
	Yield every `if_stmt` with its nesting depth (outermost is 1). An
	`else if` continues the chain it belongs to and keeps its depth.
	"""
	stack: list[tuple[Tree, int]] = [(body, 0)]
	while stack:
		node, depth = stack.pop()
		for child in node.children:
			if not isinstance(child, Tree):
				continue
			if str(child.data) == "if_stmt":
				child_depth = depth if str(node.data) == "if_stmt" else depth + 1
				yield child, child_depth
				stack.append((child, child_depth))
			else:
				stack.append((child, depth))


def _aleo_type(type_text: str, visibility: str | None, *, with_visibility: bool) -> str:
	if not with_visibility:
		return type_text
	return f"{type_text}.{visibility or 'private'}"


def _aleo_output(output: str) -> str:
	# "public u8" -> "u8.public"
	head, _, rest = output.partition(" ")
	if head in ("public", "private", "constant") and rest:
		return f"{rest}.{head}"
	return output


def render_aleo(ast: ProgramAst) -> str:
	"""Render the interface of `ast` as Aleo instructions."""
	lines: list[str] = [f"import {imp.program};" for imp in ast.imports]
	lines.append(f"program {ast.program};")
	for struct in ast.structs:
		lines.append("")
		lines.append(f"{'record' if struct.is_record else 'struct'} {struct.name}:")
		for m in struct.members:
			lines.append(f"    {m.name} as {_aleo_type(m.type, m.visibility, with_visibility=struct.is_record)};")
	for mapping in ast.mappings:
		lines.append("")
		lines.append(f"mapping {mapping.name}:")
		lines.append(f"    key as {mapping.key_type}.public;")
		lines.append(f"    value as {mapping.value_type}.public;")
	for fn in ast.functions:
		if fn.kind == "inline":
			continue
		header = {"transition": "function", "function": "closure", "finalize": "finalize"}[fn.kind]
		is_transition = fn.kind == "transition"
		lines.append("")
		lines.append(f"{header} {fn.name}:")
		for idx, p in enumerate(fn.params):
			lines.append(f"    input r{idx} as {_aleo_type(p.type, p.visibility, with_visibility=is_transition)};")
		if fn.output:
			lines.append(f"    output r{len(fn.params)} as {_aleo_output(fn.output)};")
	return "\n".join(lines) + "\n"


__all__ = ["CompileError", "Compiler", "CompilerOptions", "render_aleo"]
