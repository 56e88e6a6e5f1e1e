#!/usr/bin/env python3
"""Print the role/feature permission matrix for compliance review.

Usage:
    python scripts/dump_permissions.py
    python scripts/dump_permissions.py --format json
    python scripts/dump_permissions.py --levels
"""

from __future__ import annotations

import argparse
import json
import sys

from expensemanager.rbac import PERMISSIONS, Role


def _levels() -> dict[str, dict[str, int]]:
    return {
        feature: {role.value: int(PERMISSIONS.level(role, feature)) for role in Role}
        for feature in PERMISSIONS.features
    }


def _render_text(matrix: dict[str, dict[str, object]]) -> str:
    roles = [role.value for role in Role]
    width = max(len(f) for f in matrix) + 2
    lines = ["feature".ljust(width) + "".join(r.ljust(12) for r in roles)]
    lines.append("-" * (width + 12 * len(roles)))
    for feature, row in matrix.items():
        cells = []
        for role in roles:
            value = row[role]
            if isinstance(value, bool):
                value = "yes" if value else "-"
            cells.append(str(value).ljust(12))
        lines.append(feature.ljust(width) + "".join(cells))
    return "\n".join(lines)


def main() -> None:
    parser = argparse.ArgumentParser(description="Dump the Expense Manager permission matrix")
    parser.add_argument("--format", choices=["text", "json"], default="text")
    parser.add_argument(
        "--levels", action="store_true", help="Show access levels (0-3) instead of allowed/denied"
    )
    args = parser.parse_args()

    matrix = _levels() if args.levels else PERMISSIONS.as_matrix()
    if args.format == "json":
        json.dump(matrix, sys.stdout, indent=2)
        sys.stdout.write("\n")
    else:
        print(_render_text(matrix))


if __name__ == "__main__":
    main()
