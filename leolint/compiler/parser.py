# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

from pathlib import Path
from typing import List, Optional

from lark import Lark, Token, Tree
from lark.exceptions import UnexpectedCharacters, UnexpectedEOF, UnexpectedInput, UnexpectedToken

from .ast import (
	ConstDecl,
	FunctionDecl,
	ImportDecl,
	MappingDecl,
	Member,
	Param,
	ProgramAst,
	StructDecl,
)
from .diagnostics import Span

_GRAMMAR_PATH = Path(__file__).with_name("grammar.lark")
_GRAMMAR_SRC = _GRAMMAR_PATH.read_text(encoding="utf-8")

# Earley keeps `if cond { ... }` and struct initializers (`Point { x: 1u8 }`)
# apart without a contextual lexer hack.
_PARSER = Lark(
	_GRAMMAR_SRC,
	parser="earley",
	lexer="basic",
	start="start",
	propagate_positions=True,
	maybe_placeholders=False,
)


class ParseError(Exception):
	def __init__(self, message: str, span: Span) -> None:
		super().__init__(message)
		self.message = message
		self.span = span


def parse_program(source: str, *, file: str | None = None) -> ProgramAst:
	try:
		tree = _PARSER.parse(source)
	except UnexpectedInput as exc:
		line = getattr(exc, "line", None)
		column = getattr(exc, "column", None)
		span = Span(
			file=file,
			line=line if isinstance(line, int) and line > 0 else None,
			column=column if isinstance(column, int) and column > 0 else None,
		)
		raise ParseError(_describe(exc), span) from exc
	return _build_program(tree, source, file)


def parse_file(path: Path) -> ProgramAst:
	return parse_program(path.read_text(encoding="utf-8"), file=str(path))


def _describe(exc: UnexpectedInput) -> str:
	if isinstance(exc, UnexpectedEOF):
		return "unexpected end of input"
	if isinstance(exc, UnexpectedToken):
		tok = exc.token
		if tok.type == "$END":
			return "unexpected end of input"
		return f"unexpected token '{tok}'"
	if isinstance(exc, UnexpectedCharacters):
		return f"unexpected character {exc.char!r}"
	return "syntax error"


def _name(node: Tree) -> str:
	return str(node.data)


def _span(node: Tree, file: str | None) -> Span:
	return Span.from_meta(node.meta, file=file)


def _text(node: Tree, source: str) -> str:
	"""Source text of `node` with runs of whitespace collapsed."""
	meta = node.meta
	if getattr(meta, "empty", True):
		return ""
	return " ".join(source[meta.start_pos : meta.end_pos].split())


def _build_program(tree: Tree, source: str, file: str | None) -> ProgramAst:
	imports: List[ImportDecl] = []
	program_node: Optional[Tree] = None
	for child in tree.children:
		if not isinstance(child, Tree):
			continue
		kind = _name(child)
		if kind == "import_decl":
			imports.append(ImportDecl(program=str(child.children[0]), span=_span(child, file)))
		elif kind == "program_decl":
			program_node = child
	if program_node is None:
		raise ParseError("missing program declaration", Span(file=file))

	program_id = ""
	structs: List[StructDecl] = []
	mappings: List[MappingDecl] = []
	consts: List[ConstDecl] = []
	functions: List[FunctionDecl] = []
	for child in program_node.children:
		if isinstance(child, Token):
			if child.type == "PROGRAM_ID":
				program_id = str(child)
			continue
		kind = _name(child)
		if kind in ("struct_decl", "record_decl"):
			structs.append(_build_struct(child, source, file))
		elif kind == "mapping_decl":
			mappings.append(_build_mapping(child, source, file))
		elif kind == "const_decl":
			consts.append(_build_const(child, source, file))
		elif kind == "function_decl":
			functions.append(_build_function(child, source, file))

	return ProgramAst(
		program=program_id,
		imports=tuple(imports),
		structs=tuple(structs),
		mappings=tuple(mappings),
		consts=tuple(consts),
		functions=tuple(functions),
		span=_span(program_node, file),
		tree=tree,
	)


def _visibility(node: Tree) -> str:
	return str(node.children[0])


def _build_struct(node: Tree, source: str, file: str | None) -> StructDecl:
	name = ""
	members: List[Member] = []
	for child in node.children:
		if isinstance(child, Token) and child.type == "NAME":
			name = str(child)
		elif isinstance(child, Tree) and _name(child) == "member":
			vis, mname, mtype = _named_typed(child, source)
			members.append(Member(name=mname, type=mtype, visibility=vis))
	return StructDecl(
		name=name,
		members=tuple(members),
		is_record=_name(node) == "record_decl",
		span=_span(node, file),
	)


def _build_mapping(node: Tree, source: str, file: str | None) -> MappingDecl:
	name = str(node.children[0])
	key_type, value_type = (_text(c, source) for c in node.children[1:3])
	return MappingDecl(name=name, key_type=key_type, value_type=value_type, span=_span(node, file))


def _build_const(node: Tree, source: str, file: str | None) -> ConstDecl:
	return ConstDecl(name=str(node.children[0]), type=_text(node.children[1], source), span=_span(node, file))


def _named_typed(node: Tree, source: str) -> tuple[str | None, str, str]:
	"""Split a `param`/`member` node into (visibility, name, type text)."""
	visibility: str | None = None
	name = ""
	type_text = ""
	for child in node.children:
		if isinstance(child, Token):
			if child.type == "NAME":
				name = str(child)
		elif _name(child) == "visibility":
			visibility = _visibility(child)
		else:
			type_text = _text(child, source)
	return visibility, name, type_text


def _build_function(node: Tree, source: str, file: str | None) -> FunctionDecl:
	annotations: List[str] = []
	is_async = False
	kind = ""
	name = ""
	params: List[Param] = []
	output: str | None = None
	body: Optional[Tree] = None
	for child in node.children:
		if isinstance(child, Token):
			if child.type == "NAME":
				name = str(child)
			continue
		k = _name(child)
		if k == "annotation":
			annotations.append(str(child.children[0]))
		elif k == "async_mod":
			is_async = True
		elif k == "function_kind":
			kind = str(child.children[0])
		elif k == "param":
			vis, pname, ptype = _named_typed(child, source)
			params.append(Param(name=pname, type=ptype, visibility=vis))
		elif k == "output":
			output = _text(child, source)
		elif k == "block":
			body = child
	return FunctionDecl(
		name=name,
		kind=kind,
		is_async=is_async,
		params=tuple(params),
		output=output,
		annotations=tuple(annotations),
		span=_span(node, file),
		body=body,
	)


__all__ = ["ParseError", "parse_file", "parse_program"]
