# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Canonical text form for Leo sources.

The normalizer is a single forward pass over the characters of a file. It
looks back only at emitted output (the last character, and the trailing
spaces a `}` trims off its preceding line) and ahead by one input
character. Line breaks in the output come exclusively from `{`, `}`, `;`
and the end of a `//` comment; line breaks in the input are dropped.

The pass knows nothing about string literals: any of `{ } ; : ( ) /` inside
a string is formatted as if it were code.
"""

from __future__ import annotations

from dataclasses import dataclass

INDENT_WIDTH = 4


@dataclass
class _State:
	indent_level: int = 0
	inside_brace: bool = False
	inside_comment: bool = False


def _indent(out: list[str], level: int) -> None:
	out.append(" " * (INDENT_WIDTH * level))


def _trim_line(out: list[str]) -> None:
	"""Drop trailing spaces of the current output line."""
	while out:
		chunk = out[-1].rstrip(" ")
		if chunk:
			out[-1] = chunk
			return
		out.pop()


def _last(out: list[str]) -> str:
	for chunk in reversed(out):
		if chunk:
			return chunk[-1]
	return ""


def normalize_code(code: str) -> str:
	"""
	Return the canonical form of `code`.

	Pure and total; `normalize_code(normalize_code(s)) == normalize_code(s)`.
	"""
	out: list[str] = []
	st = _State()
	i = 0
	n = len(code)
	while i < n:
		c = code[i]
		i += 1

		if st.inside_comment:
			if c == "\n":
				st.inside_comment = False
				out.append("\n")
				_indent(out, st.indent_level)
			else:
				out.append(c)
			continue

		if c == "{":
			out.append("{\n")
			st.indent_level += 1
			_indent(out, st.indent_level)
			st.inside_brace = True
		elif c == "}":
			# `inside_brace` tracks `indent_level > 0`; an unmatched `}` is dropped.
			if st.inside_brace:
				st.indent_level -= 1
				# The `}` line carries its own indentation; a blank line keeps none.
				_trim_line(out)
				out.append("\n")
				_indent(out, st.indent_level)
				out.append("}\n")
				_indent(out, st.indent_level)
				st.inside_brace = st.indent_level > 0
		elif c == ";":
			out.append(";\n")
			_indent(out, st.indent_level)
		elif c == ":":
			out.append(": ")
		elif c == "(":
			out.append("( ")
		elif c == ")":
			if _last(out) != " ":
				out.append(" ")
			out.append(")")
		elif c == "/":
			if i < n and code[i] == "/":
				st.inside_comment = True
				out.append("//")
				i += 1
			elif _last(out) == "/":
				# A dropped newline or `}` glued two slashes together.
				st.inside_comment = True
				out.append("/")
			else:
				out.append("/")
		elif c == "\n":
			continue
		elif c == " ":
			if _last(out) != " ":
				out.append(" ")
		else:
			out.append(c)

	return "".join(out).rstrip()


__all__ = ["INDENT_WIDTH", "normalize_code"]
