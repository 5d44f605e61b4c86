#!/usr/bin/env python3
"""
Fail CI on exception handlers that hide failures.

- Scans only *.py (default: the level_exploder package).
- Flags bare `except:` handlers.
- Flags handlers whose body only passes/continues (swallowed exceptions).
- Handlers that record diagnostics, return a value or re-raise are fine.
"""

from __future__ import annotations

import argparse
import ast
import os
import sys
from dataclasses import dataclass
from typing import Iterable, List

DEFAULT_PATHS = ["level_exploder"]

KIND_BARE = "bare-except"
KIND_SWALLOWED = "swallowed"


@dataclass(frozen=True)
class Hit:
    path: str
    lineno: int
    kind: str


def _iter_py_files(target: str) -> Iterable[str]:
    if os.path.isfile(target):
        if target.endswith(".py"):
            yield target
        return

    for root, _, files in os.walk(target):
        for fn in files:
            if fn.endswith(".py"):
                yield os.path.join(root, fn)


def _repo_rel(path: str) -> str:
    rel = os.path.relpath(path, os.getcwd())
    return rel.replace("\\", "/")


def _is_swallowed(handler: ast.ExceptHandler) -> bool:
    for stmt in handler.body:
        if isinstance(stmt, (ast.Pass, ast.Continue)):
            continue
        if isinstance(stmt, ast.Expr) and isinstance(stmt.value, ast.Constant):
            # docstring-like literal or `...`
            continue
        return False
    return True


def scan_source(source: str, path: str = "<string>") -> List[Hit]:
    hits: List[Hit] = []
    tree = ast.parse(source, filename=path)
    for node in ast.walk(tree):
        if not isinstance(node, ast.ExceptHandler):
            continue
        if node.type is None:
            hits.append(Hit(path=path, lineno=node.lineno, kind=KIND_BARE))
        elif _is_swallowed(node):
            hits.append(Hit(path=path, lineno=node.lineno, kind=KIND_SWALLOWED))
    return hits


def scan(paths: List[str]) -> List[Hit]:
    expanded: List[str] = []
    for p in paths:
        if not os.path.exists(p):
            raise SystemExit(f"Path not found: {p}")
        expanded.extend(_iter_py_files(p))

    hits: List[Hit] = []
    for p in sorted(set(expanded)):
        with open(p, "r", encoding="utf-8", errors="replace") as f:
            hits.extend(scan_source(f.read(), _repo_rel(p)))
    return hits


def main(argv: List[str]) -> int:
    ap = argparse.ArgumentParser()
    ap.add_argument("--paths", nargs="+", default=DEFAULT_PATHS, help="Files/dirs to scan")
    args = ap.parse_args(argv)

    hits = scan(args.paths)

    if hits:
        print("ERROR: exception handlers hiding failures:")
        for h in hits:
            print(f"  {h.path}:{h.lineno}: {h.kind}")
        print("")
        print("Fix: catch a named exception, record it in Diagnostics, then return a default or re-raise.")
        return 2

    print("OK: exception handling clean in scanned paths.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
