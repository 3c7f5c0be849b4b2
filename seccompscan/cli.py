from __future__ import annotations

import argparse
import logging
from typing import Sequence, Optional

from ._types import DisassemblyError, UnsupportedArchitectureError, UnsupportedBinaryError
from .scanner import scan


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        prog="seccompscan",
        description="Generate a seccomp allow-list profile from the syscalls a Go binary can make",
    )

    parser.add_argument("binary_path", help="Path to the Go binary to analyze.")
    parser.add_argument("profile_path", help="Where to write the seccomp profile (JSON).")

    parser.add_argument(
        "--disassembly-file",
        type=str,
        default=None,
        help="Write/load the objdump listing at this path."
    )

    parser.add_argument(
        "--overwrite",
        action="store_true",
        help="Disassemble again even if the disassembly file exists."
    )

    parser.add_argument(
        "--report-file",
        type=str,
        default=None,
        help="Write JSON scan report to this path."
    )

    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to YAML configuration file."
    )

    parser.add_argument(
        "--no-print",
        action="store_true",
        help="Do not print the detected syscalls to stdout."
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging."
    )

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    logger = logging.getLogger("seccompscan")

    try:
        scan(
            binary_path=args.binary_path,
            profile_path=args.profile_path,
            disassembly_file=args.disassembly_file,
            report_file=args.report_file,
            overwrite=args.overwrite,
            config_path=args.config,
            print_res=not args.no_print,
        )
    except (UnsupportedBinaryError, UnsupportedArchitectureError, DisassemblyError) as e:
        logger.error("%s", e, exc_info=logger.isEnabledFor(logging.DEBUG))
        return 1
    except (OSError, ValueError) as e:
        logger.error("Scan failed for %s: %r", args.binary_path, e, exc_info=logger.isEnabledFor(logging.DEBUG))
        return 1

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
