#!/usr/bin/env python3
from __future__ import annotations

import ast
from pathlib import Path
import sys


ROOT = Path(__file__).resolve().parents[1]

EXPORTS = ROOT / "src" / "bigdigit_interchange" / "exports.py"
SOURCES = (
    ROOT / "src" / "bigdigit_core" / "layout.py",
    ROOT / "src" / "bigdigit_core" / "modes.py",
    ROOT / "src" / "bigdigit_core" / "config.py",
    ROOT / "src" / "bigdigit_core" / "errors.py",
    ROOT / "src" / "bigdigit_value" / "value.py",
    ROOT / "src" / "bigdigit_interchange" / "export.py",
    ROOT / "src" / "bigdigit_interchange" / "writer.py",
    ROOT / "src" / "bigdigit_interchange" / "batch.py",
)


def _defined_names(path: Path) -> set[str]:
    tree = ast.parse(path.read_text(encoding="utf-8"))
    names: set[str] = set()
    for node in tree.body:
        if isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef, ast.ClassDef)):
            names.add(node.name)
        elif isinstance(node, ast.Assign):
            for target in node.targets:
                if isinstance(target, ast.Name):
                    names.add(target.id)
        elif isinstance(node, ast.AnnAssign):
            if isinstance(node.target, ast.Name):
                names.add(node.target.id)
    return names


def _all_list(path: Path) -> list[str]:
    tree = ast.parse(path.read_text(encoding="utf-8"))
    for node in tree.body:
        if isinstance(node, ast.Assign):
            for target in node.targets:
                if isinstance(target, ast.Name) and target.id == "__all__":
                    value = node.value
                    if isinstance(value, (ast.List, ast.Tuple)):
                        return [
                            elt.value
                            for elt in value.elts
                            if isinstance(elt, ast.Constant) and isinstance(elt.value, str)
                        ]
    raise SystemExit(f"__all__ not found or not a literal list in {path}")


def check_exports(
    exports_path: Path = EXPORTS, source_paths: tuple[Path, ...] = SOURCES
) -> list[str]:
    available: set[str] = set()
    for path in source_paths:
        available |= _defined_names(path)
    return [name for name in _all_list(exports_path) if name not in available]


def main() -> int:
    missing = check_exports()
    if missing:
        print("Missing exports detected:")
        for name in missing:
            print(f"  - {name}")
        return 1
    print(f"export smoke: ok (bigdigit={len(_all_list(EXPORTS))})")
    return 0


if __name__ == "__main__":
    sys.exit(main())
