#!/usr/bin/env python3
"""
Fail if core imports the orchestration layer.
Checks all Python files under src/feathers_rest/core/.
"""

from __future__ import annotations

import ast
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parent.parent
CORE_DIR = REPO_ROOT / "src" / "feathers_rest" / "core"

FORBIDDEN_PREFIXES = (
    "feathers_rest.provider",
    "feathers_rest.application",
)
# Relative imports climbing out of core (``from ..provider import X``).
FORBIDDEN_RELATIVE = ("provider", "application")


def is_forbidden(module: str) -> bool:
    return any(
        module == prefix or module.startswith(prefix + ".")
        for prefix in FORBIDDEN_PREFIXES
    )


def scan_file(path: Path) -> list[str]:
    errors: list[str] = []
    tree = ast.parse(path.read_text())
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            for alias in node.names:
                if is_forbidden(alias.name):
                    errors.append(f"{path}: forbidden import '{alias.name}'")
        elif isinstance(node, ast.ImportFrom):
            mod = node.module or ""
            if node.level == 0 and is_forbidden(mod):
                errors.append(f"{path}: forbidden import '{mod}'")
            elif node.level >= 2:
                head = mod.split(".")[0] if mod else ""
                names = [head] if head else [a.name for a in node.names]
                for name in names:
                    if name in FORBIDDEN_RELATIVE:
                        errors.append(f"{path}: forbidden import '..{name}'")
    return errors


def main() -> int:
    violations: list[str] = []
    for py_file in CORE_DIR.rglob("*.py"):
        violations.extend(scan_file(py_file))

    if violations:
        for v in violations:
            print(v, file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
