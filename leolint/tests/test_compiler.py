# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

from pathlib import Path
from typing import Mapping

import pytest

from leolint.compiler import (
	CompileError,
	Compiler,
	CompilerOptions,
	Handler,
	ParseError,
	Stub,
	parse_program,
	render_aleo,
)
from leolint.normalizer import normalize_code
from leolint.tests.leo_sources import HELLO_SOURCE, TOKEN_SOURCE, write_file

COUNTER_SOURCE = """\
program counter.aleo {
    mapping counts: address => u64;

    transition bump() {
        return then finalize(self.caller);
    }

    finalize bump(caller: address) {
        let current: u64 = Mapping::get_or_use(counts, caller, 0u64);
        Mapping::set(counts, caller, current + 1u64);
    }
}
"""

CREDITS_ALEO = """\
program credits.aleo;

mapping account:
    key as address.public;
    value as u64.public;

function transfer_public:
    input r0 as address.public;
    input r1 as u64.public;
    async transfer_public self.caller r0 r1 into r2;
    output r2 as credits.aleo/transfer_public.future;

finalize transfer_public:
    input r0 as address.public;

closure helper:
    input r0 as u64;
    add r0 r0 into r1;
    output r1 as u64;
"""


def _token_stubs() -> dict[str, Stub]:
	return {"token": Stub.from_program(parse_program(TOKEN_SOURCE))}


def _compile(
	tmp_path: Path,
	name: str,
	source: str,
	*,
	stubs: Mapping[str, Stub] | None = None,
	options: CompilerOptions | None = None,
	handler: Handler | None = None,
) -> str:
	main = write_file(tmp_path / name / "src" / "main.leo", source)
	outputs = tmp_path / name / "outputs"
	outputs.mkdir(exist_ok=True)
	return Compiler(name, "aleo", handler or Handler(), main, outputs, options, stubs).compile()


def _codes(exc: pytest.ExceptionInfo) -> list[str | None]:
	return [d.code for d in exc.value.diagnostics]


def test_parse_program_collects_declarations() -> None:
	ast = parse_program(TOKEN_SOURCE, file="main.leo")
	assert ast.program == "token.aleo"
	assert ast.name == "token"
	assert [s.name for s in ast.structs] == ["Token"]
	assert ast.structs[0].is_record
	assert [(m.name, m.type) for m in ast.structs[0].members] == [("owner", "address"), ("amount", "u64")]
	assert [(m.name, m.key_type, m.value_type) for m in ast.mappings] == [("account", "address", "u64")]
	assert [f.signature() for f in ast.functions] == [
		"transition mint(receiver: address, amount: u64) -> Token",
		"transition transfer(token: Token, to: address, amount: u64) -> (Token, Token)",
		"inline double(x: u64) -> u64",
	]
	assert ast.span.file == "main.leo"
	assert ast.span.line == 1


def test_parse_program_imports_and_visibility() -> None:
	ast = parse_program(HELLO_SOURCE)
	assert [i.program for i in ast.imports] == ["token.aleo"]
	main, pay = ast.functions
	assert main.params[0].visibility == "public"
	assert main.params[0].render() == "public a: u32"
	assert pay.output == "token.aleo/Token"


def test_parse_program_reports_position() -> None:
	with pytest.raises(ParseError) as exc:
		parse_program("program a.aleo {\n    transition f( {\n}\n", file="a.leo")
	assert exc.value.span.file == "a.leo"
	assert exc.value.span.line == 2


def test_compile_returns_interface(tmp_path: Path) -> None:
	text = _compile(tmp_path, "token", TOKEN_SOURCE)
	lines = text.splitlines()
	assert lines[0] == "program token.aleo;"
	assert "record Token:" in lines
	assert "    owner as address.private;" in lines
	assert "    key as address.public;" in lines
	assert "function mint:" in lines
	assert "    input r1 as u64.private;" in lines
	assert "    output r3 as (Token, Token);" in lines
	# Inline functions have no instructions of their own.
	assert not any("double" in line for line in lines)


def test_compile_finalize_shares_name_with_transition(tmp_path: Path) -> None:
	text = _compile(tmp_path, "counter", COUNTER_SOURCE)
	assert "function bump:" in text
	assert "finalize bump:" in text


def test_compile_accepts_canonical_layout(tmp_path: Path) -> None:
	_compile(tmp_path, "counter", normalize_code(COUNTER_SOURCE))
	_compile(tmp_path, "hello", normalize_code(HELLO_SOURCE), stubs=_token_stubs())


def test_compile_syntax_error(tmp_path: Path) -> None:
	with pytest.raises(CompileError) as exc:
		_compile(tmp_path, "broken", "program broken.aleo {\n    transition f( {\n}\n")
	assert _codes(exc) == ["syntax"]
	assert exc.value.diagnostics[0].span.line == 2


def test_compile_program_name_mismatch(tmp_path: Path) -> None:
	main = write_file(tmp_path / "src" / "main.leo", TOKEN_SOURCE)
	with pytest.raises(CompileError) as exc:
		Compiler("wallet", "aleo", Handler(), main, tmp_path).compile()
	assert _codes(exc) == ["program-mismatch"]
	assert "wallet.aleo" in exc.value.diagnostics[0].message


def test_compile_missing_output_directory(tmp_path: Path) -> None:
	main = write_file(tmp_path / "src" / "main.leo", TOKEN_SOURCE)
	with pytest.raises(CompileError) as exc:
		Compiler("token", "aleo", Handler(), main, tmp_path / "outputs").compile()
	assert _codes(exc) == ["io"]


def test_compile_duplicate_definitions(tmp_path: Path) -> None:
	source = """\
program dup.aleo {
    struct Point { x: u8 }
    struct Point { y: u8 }
    transition f() -> u8 { return 1u8; }
    transition f() -> u8 { return 2u8; }
}
"""
	with pytest.raises(CompileError) as exc:
		_compile(tmp_path, "dup", source)
	assert _codes(exc) == ["duplicate-definition", "duplicate-definition"]


def test_compile_import_needs_a_dependency(tmp_path: Path) -> None:
	with pytest.raises(CompileError) as exc:
		_compile(tmp_path, "hello", HELLO_SOURCE)
	assert _codes(exc) == ["unknown-import"]

	text = _compile(tmp_path, "hello", HELLO_SOURCE, stubs=_token_stubs())
	assert text.startswith("import token.aleo;\nprogram hello.aleo;\n")


@pytest.mark.parametrize(
	"call,code",
	[
		("token.aleo/burn(to, amount)", "unknown-function"),
		("token.aleo/double(amount)", "not-a-transition"),
		("wallet.aleo/mint(to, amount)", "unknown-program"),
	],
)
def test_compile_checks_external_calls(tmp_path: Path, call: str, code: str) -> None:
	source = f"""\
import token.aleo;

program calls.aleo {{
    transition pay(to: address, amount: u64) -> u64 {{
        let r: u64 = {call};
        return r;
    }}
}}
"""
	with pytest.raises(CompileError) as exc:
		_compile(tmp_path, "calls", source, stubs=_token_stubs())
	assert _codes(exc) == [code]


def test_compile_opaque_stub_leaves_calls_unchecked(tmp_path: Path) -> None:
	source = """\
import credits.aleo;

program payer.aleo {
    transition pay(to: address, amount: u64) {
        credits.aleo/anything(to, amount);
    }
}
"""
	_compile(tmp_path, "payer", source, stubs={"credits": Stub.opaque_for("credits.aleo")})
	with pytest.raises(CompileError) as exc:
		_compile(tmp_path, "payer", source, stubs={"credits": Stub.from_aleo(CREDITS_ALEO)})
	assert _codes(exc) == ["unknown-function"]


DEEP_SOURCE = """\
program deep.aleo {
    transition f(a: u8) -> u8 {
        if a > 1u8 {
            if a > 2u8 {
                if a > 3u8 {
                    return a;
                }
            }
        }
        if a == 1u8 {
            return 1u8;
        } else if a == 2u8 {
            return 2u8;
        } else if a == 3u8 {
            return 3u8;
        } else {
            return 0u8;
        }
    }
}
"""


def test_compile_conditional_depth_limit(tmp_path: Path) -> None:
	_compile(tmp_path, "deep", DEEP_SOURCE, options=CompilerOptions(conditional_block_max_depth=3))
	with pytest.raises(CompileError) as exc:
		_compile(tmp_path, "deep", DEEP_SOURCE, options=CompilerOptions(conditional_block_max_depth=2))
	assert _codes(exc) == ["conditional-depth"]
	assert "depth 3" in exc.value.diagnostics[0].message


def test_compile_else_if_chain_does_not_nest(tmp_path: Path) -> None:
	source = """\
program chain.aleo {
    transition f(a: u8) -> u8 {
        if a == 1u8 {
            return 1u8;
        } else if a == 2u8 {
            return 2u8;
        } else if a == 3u8 {
            return 3u8;
        } else {
            return 0u8;
        }
    }
}
"""
	_compile(tmp_path, "chain", source, options=CompilerOptions(conditional_block_max_depth=1))


def test_handler_is_shared_across_compiles(tmp_path: Path) -> None:
	handler = Handler()
	_compile(tmp_path, "token", TOKEN_SOURCE, handler=handler)
	for name in ("one", "two"):
		with pytest.raises(CompileError):
			_compile(tmp_path, name, TOKEN_SOURCE, handler=handler)
	assert handler.error_count() == 2
	assert all(d.code == "program-mismatch" for d in handler.errors)


def test_stub_from_aleo_reads_headers() -> None:
	stub = Stub.from_aleo(CREDITS_ALEO)
	assert stub.program == "credits.aleo"
	assert stub.mappings == ("account",)
	transfer = stub.function("transfer_public")
	assert transfer is not None
	assert transfer.kind == "transition"
	assert transfer.is_async
	assert transfer.inputs == ("r0: address.public", "r1: u64.public")
	assert transfer.output == "credits.aleo/transfer_public.future"
	helper = stub.function("helper")
	assert helper is not None and helper.kind == "function"
	assert stub.function("missing") is None


def test_stub_from_aleo_requires_program() -> None:
	with pytest.raises(ValueError):
		Stub.from_aleo("function f:\n    input r0 as u8.public;\n")


def test_stub_reads_rendered_interface() -> None:
	ast = parse_program(TOKEN_SOURCE)
	stub = Stub.from_aleo(render_aleo(ast))
	assert stub.program == "token.aleo"
	assert stub.records == ("Token",)
	assert [(f.name, f.kind) for f in stub.functions] == [("mint", "transition"), ("transfer", "transition")]
