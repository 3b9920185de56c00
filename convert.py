import argparse
import sys
from typing import List, Optional

from sb3decompile.constants import DecompileSettings
from sb3decompile.errors import ProjectInputError
from sb3decompile.project_io import decompile_sb3


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Decompile a Scratch .sb3 project into a jvavscratch project.")
    parser.add_argument("input", help="Path to the .sb3 project file")
    parser.add_argument("--output-dir", default="Project", help="Output directory for the decompiled project")
    parser.add_argument("--name", help="Project name written to jvavscratch.toml (default: the .sb3 file name)")
    parser.add_argument("--temp-dir", help="Directory to extract the .sb3 into (default: a temporary directory)")
    parser.add_argument("--no-clean", action="store_true", help="Do not clear the output directory before writing")
    parser.add_argument(
        "--no-fallback-vars",
        action="store_true",
        help="Do not declare the conventional loop/accumulator variables (i, j, k, len, ...)",
    )
    parser.add_argument("--workers", type=int, default=1, help="Number of actors to decompile in parallel")
    parser.add_argument("--verbose", "-v", action="store_true", help="Also print informational diagnostics")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    settings = DecompileSettings()
    if args.no_fallback_vars:
        settings.fallback_variables = {}

    try:
        diag_collector = decompile_sb3(
            args.input,
            args.output_dir,
            project_name=args.name,
            temp_dir=args.temp_dir,
            settings=settings,
            workers=args.workers,
            clean=not args.no_clean,
        )
    except ProjectInputError as exc:
        print(f"Error: {exc}")
        return 1

    if diag_collector.reportable(args.verbose):
        print()
        diag_collector.print_all(args.verbose)
        print()
        print(f"Decompilation completed with {diag_collector.summary()}")
    else:
        print(f"Successfully decompiled {args.input} to {args.output_dir}")
    return 1 if diag_collector.has_errors() else 0


if __name__ == "__main__":
    sys.exit(main())
