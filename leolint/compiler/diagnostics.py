# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Compiler diagnostics and the handler that collects them.

A `Handler` is shared by every compile of a lint pass; each `Compiler`
emits into it and reports failure when it emitted at least one error.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass(frozen=True)
class Span:
	"""Represents a source span (best-effort file/line/column)."""

	file: Optional[str] = None
	line: Optional[int] = None
	column: Optional[int] = None
	end_line: Optional[int] = None
	end_column: Optional[int] = None

	@classmethod
	def from_meta(cls, meta: Any, *, file: str | None = None) -> "Span":
		"""
		Construct a Span from a lark `Meta` (or any object carrying the same
		attribute names). Missing positions yield an unknown span.
		"""
		if meta is None or getattr(meta, "empty", False):
			return cls(file=file)
		return cls(
			file=file,
			line=getattr(meta, "line", None),
			column=getattr(meta, "column", None),
			end_line=getattr(meta, "end_line", None),
			end_column=getattr(meta, "end_column", None),
		)

	def render(self) -> str:
		parts = [self.file or "<unknown>"]
		if self.line is not None and self.line > 0:
			parts.append(str(self.line))
			if self.column is not None and self.column > 0:
				parts.append(str(self.column))
		return ":".join(parts)


@dataclass
class Diagnostic:
	"""Represents a compiler diagnostic (error/warning/etc.)."""

	message: str
	code: str | None = None
	severity: str = "error"
	span: Span = field(default_factory=Span)  # Source location (Span() denotes unknown).
	notes: list[str] = field(default_factory=list)

	def __post_init__(self) -> None:
		if self.span is None:  # type: ignore[unreachable]
			self.span = Span()

	def render(self) -> str:
		code = f"[{self.code}] " if self.code else ""
		out = f"{self.span.render()}: {self.severity}: {code}{self.message}"
		for note in self.notes:
			out += f"\n    note: {note}"
		return out


class Handler:
	def __init__(self) -> None:
		self.diagnostics: list[Diagnostic] = []

	def emit(self, diag: Diagnostic) -> None:
		self.diagnostics.append(diag)

	def error(self, message: str, *, code: str | None = None, span: Span | None = None) -> Diagnostic:
		diag = Diagnostic(message=message, code=code, span=span or Span())
		self.emit(diag)
		return diag

	@property
	def errors(self) -> list[Diagnostic]:
		return [d for d in self.diagnostics if d.severity == "error"]

	def error_count(self) -> int:
		return len(self.errors)


__all__ = ["Diagnostic", "Handler", "Span"]
