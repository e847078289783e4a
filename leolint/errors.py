# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

from dataclasses import dataclass
from typing import Any

# Error kinds surfaced to callers.
KIND_FILESYSTEM = "filesystem"
KIND_RETRIEVAL = "retrieval"
KIND_COMPILE = "compile"
KIND_PROGRAM_ID = "program_id"
KIND_MANIFEST = "manifest"


@dataclass(frozen=True)
class LintIdentity:
	program: str | None = None
	network: str | None = None

	def to_dict(self) -> dict[str, Any]:
		return {"program": self.program, "network": self.network}


@dataclass(frozen=True)
class LintError(Exception):
	"""
	A structured, serializable error for the lint/format pass.

	`reason_code` is stable; `kind` groups codes into filesystem, retrieval,
	compile, program id and manifest failures.
	"""

	reason_code: str
	message: str
	kind: str
	identity: LintIdentity | None = None
	path: str | None = None
	diagnostics: tuple[str, ...] = ()

	def __str__(self) -> str:
		return self.format_human()

	def to_dict(self) -> dict[str, Any]:
		return {
			"reason_code": self.reason_code,
			"message": self.message,
			"kind": self.kind,
			"identity": self.identity.to_dict() if self.identity is not None else None,
			"path": self.path,
			"diagnostics": list(self.diagnostics),
		}

	def format_human(self) -> str:
		parts: list[str] = [f"[{self.reason_code}] {self.message}"]
		if self.identity is not None and self.identity.program:
			parts.append(f"program={self.identity.program}")
		if self.path:
			parts.append(f"path={self.path}")
		head = " ".join(parts)
		if not self.diagnostics:
			return head
		return "\n".join([head, *(f"  {d}" for d in self.diagnostics)])
