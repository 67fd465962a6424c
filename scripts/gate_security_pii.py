#!/usr/bin/env python3
"""Gate: customer identity must never reach the logs.

Fails if, anywhere under src/:
- print( is used in runtime code
- a logger call reads a customer field (name, email, phone, notes) or a
  whole request body/payload outside safe_log_context(...)

Usage:
    python scripts/gate_security_pii.py
"""

from __future__ import annotations

import ast
import sys
from pathlib import Path

LOG_METHODS = frozenset({"debug", "info", "warning", "error", "critical", "exception"})

# Attribute or variable names that carry customer identity
SENSITIVE_NAMES = frozenset(
    {
        "customer_name",
        "customer_email",
        "customer_phone",
        "notes",
        "payload",
        "body",
    }
)

REDACTION_CALLS = frozenset({"safe_log_context", "redact_value", "redact_string"})


def _call_name(node: ast.Call) -> str | None:
    if isinstance(node.func, ast.Name):
        return node.func.id
    if isinstance(node.func, ast.Attribute):
        return node.func.attr
    return None


def _is_logger_call(node: ast.Call) -> bool:
    func = node.func
    return (
        isinstance(func, ast.Attribute)
        and func.attr in LOG_METHODS
        and isinstance(func.value, ast.Name)
        and func.value.id in ("logger", "log", "logging")
    )


def _sensitive_reads(node: ast.AST) -> list[str]:
    """Names read inside *node*, skipping anything passed through a redaction helper."""
    if isinstance(node, ast.Call) and _call_name(node) in REDACTION_CALLS:
        return []

    found: list[str] = []
    if isinstance(node, ast.Attribute) and node.attr in SENSITIVE_NAMES:
        found.append(node.attr)
    elif isinstance(node, ast.Name) and node.id in SENSITIVE_NAMES:
        found.append(node.id)

    for child in ast.iter_child_nodes(node):
        found.extend(_sensitive_reads(child))
    return found


def check_source(source: str, filename: str = "<string>") -> list[str]:
    """Check one module's source. Returns a list of error messages."""
    errors: list[str] = []
    tree = ast.parse(source, filename=filename)

    for node in ast.walk(tree):
        if not isinstance(node, ast.Call):
            continue

        if _call_name(node) == "print" and isinstance(node.func, ast.Name):
            errors.append(f"{filename}:{node.lineno}: print() not allowed in runtime code")
            continue

        if not _is_logger_call(node):
            continue

        arguments = [*node.args, *(kw.value for kw in node.keywords)]
        for arg in arguments:
            for name in sorted(set(_sensitive_reads(arg))):
                errors.append(
                    f"{filename}:{node.lineno}: logger call reads '{name}' "
                    "without redaction (use safe_log_context)"
                )
    return errors


def check_tree(src_dir: Path) -> list[str]:
    all_errors: list[str] = []
    for pyfile in sorted(src_dir.rglob("*.py")):
        all_errors.extend(check_source(pyfile.read_text(encoding="utf-8"), str(pyfile)))
    return all_errors


def main() -> int:
    """Run gate check on src directory."""
    src_dir = Path("src")
    if not src_dir.exists():
        src_dir = Path(__file__).parent.parent / "src"
    if not src_dir.exists():
        sys.stderr.write("Error: src directory not found\n")
        return 1

    errors = check_tree(src_dir)
    if errors:
        sys.stderr.write("PII gate FAILED:\n")
        for err in errors:
            sys.stderr.write(f"  {err}\n")
        return 1

    sys.stdout.write("PII gate PASSED\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
