# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
leolint: the `format` pass for Leo packages.

Every package in the local dependency closure is compile-checked and its
sources are rewritten in canonical layout (see `leolint.normalizer`).
"""

from leolint.errors import LintError, LintIdentity
from leolint.linter import DEFAULT_ENDPOINT, LintOptions, Linter, lint
from leolint.normalizer import normalize_code
from leolint.program_id import NetworkName, ProgramID

__all__ = [
	"DEFAULT_ENDPOINT",
	"LintError",
	"LintIdentity",
	"LintOptions",
	"Linter",
	"NetworkName",
	"ProgramID",
	"lint",
	"normalize_code",
]
