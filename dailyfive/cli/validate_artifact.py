from __future__ import annotations

import argparse
import sys
from pathlib import Path

from ..utils.validation import SchemaValidationError, validate_artifact_file


def main(argv: list[str] | None = None) -> int:
    ap = argparse.ArgumentParser(
        prog="python -m dailyfive.cli.validate_artifact",
        description=(
            "Validate a daily artifact against the front-end contract.\n"
            "Exits 4 on schema failures."
        ),
    )
    ap.add_argument("artifact", help="Path to the daily JSON artifact")
    args = ap.parse_args(argv)

    path = Path(args.artifact)
    try:
        payload = validate_artifact_file(path)
    except FileNotFoundError:
        print(f"[validate_artifact] Error: artifact not found: {path}")
        return 1
    except SchemaValidationError as e:
        # Dedicated exit code for schema failures to distinguish from other errors
        print("[validate_artifact] Schema validation failed.")
        for err in e.errors or [str(e)]:
            print(f"[validate_artifact] {err}")
        return 4
    print(f"[validate_artifact] OK: {path} (day {payload['day']}, index {payload['dayIndex']})")
    return 0


if __name__ == "__main__":
    sys.exit(main())
