# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from leolint.cli import main

raise SystemExit(main())
