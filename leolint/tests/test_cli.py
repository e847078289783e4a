# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import json
import subprocess
import sys
from pathlib import Path

from leolint.cli import main as leolint_main
from leolint.normalizer import normalize_code
from leolint.tests.leo_sources import TOKEN_SOURCE, write_file


def _run_leolint(argv: list[str]) -> subprocess.CompletedProcess[str]:
	return subprocess.run([sys.executable, "-m", "leolint", *argv], text=True, capture_output=True)


def test_cli_format_success(make_package, home: Path) -> None:
	root = make_package("token", TOKEN_SOURCE)
	cp = _run_leolint(["format", "--path", str(root), "--home", str(home)])
	assert cp.returncode == 0, cp.stderr
	assert cp.stdout == ""
	assert (root / "src" / "main.leo").read_text(encoding="utf-8") == normalize_code(TOKEN_SOURCE)


def test_cli_format_json_report(make_package, home: Path) -> None:
	root = make_package("token", TOKEN_SOURCE)
	cp = _run_leolint(["format", "--path", str(root), "--home", str(home), "--json"])
	assert cp.returncode == 0, cp.stderr
	report = json.loads(cp.stdout)
	assert report == {"ok": True, "program": "token.aleo", "error": None}


def test_cli_format_compile_failure(make_package, home: Path) -> None:
	root = make_package("app", "program app.aleo {\n    transition f( {\n}\n")
	cp = _run_leolint(["format", "--path", str(root), "--home", str(home)])
	assert cp.returncode == 2
	assert cp.stderr.startswith("[COMPILE_FAILED] ")
	assert "program=app.aleo" in cp.stderr
	assert "[syntax]" in cp.stderr


def test_cli_format_json_failure(make_package, home: Path) -> None:
	root = make_package("app", deps=["ghost"])
	cp = _run_leolint(["format", "--path", str(root), "--home", str(home), "--json"])
	assert cp.returncode == 2
	report = json.loads(cp.stdout)
	assert report["ok"] is False
	assert report["program"] == "app.aleo"
	assert report["error"]["reason_code"] == "RETRIEVE_FAILED"
	assert report["error"]["kind"] == "retrieval"


def test_cli_format_invalid_manifest(tmp_path: Path, home: Path, capsys) -> None:
	write_file(tmp_path / "pkg" / "program.json", "{}")
	code = leolint_main(["format", "--path", str(tmp_path / "pkg"), "--home", str(home), "--json"])
	assert code == 2
	report = json.loads(capsys.readouterr().out)
	assert report["program"] is None
	assert report["error"]["reason_code"] == "MANIFEST_INVALID"
	assert report["error"]["kind"] == "manifest"


def test_cli_format_network_flag_selects_cache(make_package, home: Path, capsys) -> None:
	root = make_package(
		"app",
		"import credits.aleo;\n\nprogram app.aleo {\n    transition f() {\n        credits.aleo/missing();\n    }\n}\n",
		deps=[{"name": "credits.aleo", "location": "network"}],
	)
	write_file(home / "mainnet" / "credits.aleo", "program credits.aleo;\n\nfunction transfer_public:\n    input r0 as u64.public;\n")
	# Not cached for testnet: the call is left unchecked.
	assert leolint_main(["format", "--path", str(root), "--home", str(home), "-v"]) == 0
	assert "credits.aleo" in capsys.readouterr().err
	assert leolint_main(["format", "--path", str(root), "--home", str(home), "--network", "mainnet"]) == 2
	assert "[unknown-function]" in capsys.readouterr().err
