# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Network-qualified program identifiers (`name.aleo`).
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum

PROGRAM_NETWORK = "aleo"
MAX_NAME_LEN = 31

_NAME_RE = re.compile(r"^[A-Za-z][A-Za-z0-9_]*$")

# Words the compiler reserves; a program may not be named after one.
RESERVED_NAMES = frozenset(
	{
		"aleo",
		"as",
		"assert",
		"assert_eq",
		"assert_neq",
		"async",
		"const",
		"else",
		"false",
		"finalize",
		"for",
		"function",
		"if",
		"import",
		"in",
		"inline",
		"let",
		"mapping",
		"private",
		"program",
		"public",
		"record",
		"return",
		"self",
		"struct",
		"then",
		"transition",
		"true",
	}
)


class NetworkName(str, Enum):
	MAINNET = "mainnet"
	TESTNET = "testnet"
	CANARY = "canary"

	def __str__(self) -> str:
		return self.value


def validate_program_name(name: str) -> None:
	if not name:
		raise ValueError("program name must be non-empty")
	if len(name) > MAX_NAME_LEN:
		raise ValueError(f"program name '{name}' exceeds {MAX_NAME_LEN} characters")
	if not _NAME_RE.match(name):
		raise ValueError(f"program name '{name}' must start with a letter and contain only letters, digits and '_'")
	if "__" in name:
		raise ValueError(f"program name '{name}' must not contain '__'")
	if name in RESERVED_NAMES:
		raise ValueError(f"program name '{name}' is a reserved word")


@dataclass(frozen=True)
class ProgramID:
	name: str
	network: str = PROGRAM_NETWORK

	@classmethod
	def parse(cls, text: str) -> "ProgramID":
		parts = text.split(".")
		if len(parts) != 2:
			raise ValueError(f"invalid program id '{text}': expected '<name>.{PROGRAM_NETWORK}'")
		name, network = parts
		if network != PROGRAM_NETWORK:
			raise ValueError(f"invalid program id '{text}': network must be '{PROGRAM_NETWORK}', got '{network}'")
		try:
			validate_program_name(name)
		except ValueError as err:
			raise ValueError(f"invalid program id '{text}': {err}") from err
		return cls(name=name, network=network)

	def __str__(self) -> str:
		return f"{self.name}.{self.network}"


__all__ = ["NetworkName", "PROGRAM_NETWORK", "ProgramID", "RESERVED_NAMES", "validate_program_name"]
