# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Top-level declarations of a parsed Leo program.

Only declarations are modeled; function bodies stay as lark trees and are
inspected by the compiler checks directly.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from leolint.compiler.diagnostics import Span


@dataclass(frozen=True)
class Param:
	name: str
	type: str
	visibility: str | None = None

	def render(self) -> str:
		prefix = f"{self.visibility} " if self.visibility else ""
		return f"{prefix}{self.name}: {self.type}"


@dataclass(frozen=True)
class Member:
	name: str
	type: str
	visibility: str | None = None


@dataclass(frozen=True)
class StructDecl:
	name: str
	members: tuple[Member, ...]
	is_record: bool
	span: Span = field(default_factory=Span)


@dataclass(frozen=True)
class MappingDecl:
	name: str
	key_type: str
	value_type: str
	span: Span = field(default_factory=Span)


@dataclass(frozen=True)
class ConstDecl:
	name: str
	type: str
	span: Span = field(default_factory=Span)


@dataclass(frozen=True)
class FunctionDecl:
	name: str
	kind: str  # "transition" | "function" | "inline" | "finalize"
	is_async: bool
	params: tuple[Param, ...]
	output: str | None
	annotations: tuple[str, ...] = ()
	span: Span = field(default_factory=Span)
	body: Any = None  # lark Tree for the block

	def signature(self) -> str:
		prefix = "async " if self.is_async else ""
		params = ", ".join(p.render() for p in self.params)
		out = f" -> {self.output}" if self.output else ""
		return f"{prefix}{self.kind} {self.name}({params}){out}"


@dataclass(frozen=True)
class ImportDecl:
	program: str  # "<name>.aleo"
	span: Span = field(default_factory=Span)

	@property
	def symbol(self) -> str:
		return self.program.split(".", 1)[0]


@dataclass(frozen=True)
class ProgramAst:
	program: str  # "<name>.aleo" as declared
	imports: tuple[ImportDecl, ...]
	structs: tuple[StructDecl, ...]
	mappings: tuple[MappingDecl, ...]
	consts: tuple[ConstDecl, ...]
	functions: tuple[FunctionDecl, ...]
	span: Span = field(default_factory=Span)
	tree: Any = None  # full lark Tree

	@property
	def name(self) -> str:
		return self.program.split(".", 1)[0]


__all__ = [
	"ConstDecl",
	"FunctionDecl",
	"ImportDecl",
	"MappingDecl",
	"Member",
	"Param",
	"ProgramAst",
	"StructDecl",
]
