# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Leo front-end used by the lint pass to verify sources and to stub
dependencies.
"""

from leolint.compiler.compiler import CompileError, Compiler, CompilerOptions, render_aleo
from leolint.compiler.diagnostics import Diagnostic, Handler, Span
from leolint.compiler.parser import ParseError, parse_file, parse_program
from leolint.compiler.stubs import FunctionStub, Stub

__all__ = [
	"CompileError",
	"Compiler",
	"CompilerOptions",
	"Diagnostic",
	"FunctionStub",
	"Handler",
	"ParseError",
	"Span",
	"Stub",
	"parse_file",
	"parse_program",
	"render_aleo",
]
