# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from leolint.compiler import CompilerOptions
from leolint.errors import KIND_MANIFEST, LintError, LintIdentity
from leolint.linter import DEFAULT_ENDPOINT, lint
from leolint.manifest import Manifest, ManifestError
from leolint.program_id import NetworkName

DEFAULT_HOME = Path("~") / ".aleo" / "registry"


def _build_parser() -> argparse.ArgumentParser:
	p = argparse.ArgumentParser(prog="leolint", description="Leo package linting and formatting")
	sub = p.add_subparsers(dest="cmd", required=True)

	fmt = sub.add_parser("format", help="Compile-check a package and its local dependencies, then rewrite their sources")
	fmt.add_argument("--path", type=Path, default=Path("."), help="Package directory holding program.json (default: .)")
	fmt.add_argument(
		"--home",
		type=Path,
		default=DEFAULT_HOME,
		help="Registry home; cached network interfaces live in <home>/<network>/ (default: ~/.aleo/registry)",
	)
	fmt.add_argument("--endpoint", type=str, default=DEFAULT_ENDPOINT, help=f"Network endpoint (default: {DEFAULT_ENDPOINT})")
	fmt.add_argument(
		"--network",
		choices=[n.value for n in NetworkName],
		default=NetworkName.TESTNET.value,
		help="Network for dependencies that do not name one (default: testnet)",
	)
	fmt.add_argument(
		"--conditional-block-max-depth",
		type=int,
		default=CompilerOptions().conditional_block_max_depth,
		help="Deepest allowed nesting of if blocks (default: %(default)s)",
	)
	fmt.add_argument("--json", action="store_true", help="Emit a machine-readable JSON report on stdout")
	fmt.add_argument("-v", "--verbose", action="store_true", help="Report progress on stderr")
	return p


def _report(program: str | None, err: LintError | None) -> dict:
	return {
		"ok": err is None,
		"program": program,
		"error": err.to_dict() if err is not None else None,
	}


def _format(args: argparse.Namespace) -> int:
	package_path: Path = args.path.resolve()
	network = NetworkName(args.network)
	program: str | None = None
	try:
		try:
			manifest = Manifest.read_from_dir(package_path)
		except ManifestError as err:
			raise LintError(
				reason_code="MANIFEST_INVALID",
				message=str(err),
				kind=KIND_MANIFEST,
				identity=LintIdentity(network=network.value),
				path=str(package_path),
			) from err
		program = manifest.program
		lint(
			manifest.program_id,
			args.endpoint,
			package_path,
			args.home.expanduser(),
			network=network,
			compiler_options=CompilerOptions(conditional_block_max_depth=args.conditional_block_max_depth),
			verbose=bool(args.verbose),
		)
	except LintError as err:
		if args.json:
			print(json.dumps(_report(program, err), sort_keys=True, separators=(",", ":")))
		else:
			print(err.format_human(), file=sys.stderr)
		return 2
	if args.json:
		print(json.dumps(_report(program, None), sort_keys=True, separators=(",", ":")))
	return 0


def main(argv: list[str] | None = None) -> int:
	p = _build_parser()
	args = p.parse_args(argv)

	if args.cmd == "format":
		return _format(args)

	raise AssertionError("unreachable")
