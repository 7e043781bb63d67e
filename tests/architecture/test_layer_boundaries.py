"""
Layer boundary tests.

1. costing_kernel/** may NOT import costing_engines, costing_services or
   costing_config. The kernel never depends upward.
2. costing_engines/** may NOT import costing_services or costing_config.
3. The costing invariants declaration is complete and non-empty.

These tests read source code via AST -- they cannot break anything.
"""

import ast
from pathlib import Path

from costing_kernel.invariants import (
    ALL_COSTING_INVARIANTS,
    FORBIDDEN_KERNEL_IMPORTS,
    CostingInvariant,
)

ROOT = Path(__file__).resolve().parents[2]


def _python_files(package: str) -> list[Path]:
    return sorted((ROOT / package).rglob("*.py"))


def _extract_imports(path: Path) -> list[tuple[int, str]]:
    tree = ast.parse(path.read_text(), filename=str(path))
    results: list[tuple[int, str]] = []
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            for alias in node.names:
                results.append((node.lineno, alias.name))
        elif isinstance(node, ast.ImportFrom) and node.module:
            results.append((node.lineno, node.module))
    return results


def _violations(package: str, forbidden: tuple[str, ...]) -> list[str]:
    found: list[str] = []
    for path in _python_files(package):
        for lineno, module in _extract_imports(path):
            for prefix in forbidden:
                if module == prefix or module.startswith(f"{prefix}."):
                    found.append(f"  {path.relative_to(ROOT)}:{lineno} imports '{module}'")
    return found


class TestKernelNoUpwardDependencies:

    def test_kernel_does_not_import_forbidden_packages(self):
        violations = _violations("costing_kernel", FORBIDDEN_KERNEL_IMPORTS)
        assert not violations, "Kernel boundary violation:\n" + "\n".join(violations)

    def test_kernel_files_found(self):
        assert _python_files("costing_kernel")


class TestEnginesStayPure:

    def test_engines_do_not_import_services_or_config(self):
        violations = _violations("costing_engines", ("costing_services", "costing_config"))
        assert not violations, "Engine boundary violation:\n" + "\n".join(violations)


class TestInvariantsDeclaration:

    def test_all_invariants_listed(self):
        assert ALL_COSTING_INVARIANTS == frozenset(CostingInvariant)
        assert len(ALL_COSTING_INVARIANTS) > 0

    def test_values_are_snake_case(self):
        for invariant in CostingInvariant:
            assert invariant.value == invariant.name.lower()
