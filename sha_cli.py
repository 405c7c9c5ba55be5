"""Command-line front end for the SHA-1 / SHA-512 digest engine.

Usage:
    sha-digest                              # SHA-1 of the empty string
    sha-digest SHA-1 -t "message"           # hash UTF-8 text
    sha-digest SHA-2 -f path/to/file        # hash a file's raw bytes
    sha-digest SHA-2 -t abc --format yaml   # also write output-SHA-2.yaml

The digest is printed as ``<FAMILY>: <hex>`` and, unless ``--no-output`` is
given, written to ``output-<FAMILY>.txt`` (or ``.yaml``) in ``--output-dir``.
"""

from __future__ import annotations

import argparse
import os
import sys
from typing import Dict

import yaml

from family_loader import load_descriptor, resolve_family
from secure_hash import SecureHashAlgorithm
from sha_exceptions import SecureHashError


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sha-digest",
        description="Compute the SHA-1 or SHA-512 (SHA-2) digest of text or a file",
    )
    parser.add_argument(
        "family",
        nargs="?",
        default="SHA-1",
        help="Hash family: SHA-1 or SHA-2 (SHA-512) (default: SHA-1)",
    )
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument(
        "-t",
        "--text",
        dest="text",
        default=None,
        help="Hash the UTF-8 encoding of TEXT (default: empty string)",
    )
    mode.add_argument(
        "-f",
        "--file",
        dest="file",
        default=None,
        help="Hash the raw bytes of FILE",
    )
    parser.add_argument(
        "--output-dir",
        type=str,
        default=".",
        help="Directory for the output file (default: current directory)",
    )
    parser.add_argument(
        "--format",
        type=str,
        choices=["text", "yaml"],
        default="text",
        help="Output file format: text or yaml (default: text)",
    )
    parser.add_argument(
        "--no-output",
        action="store_true",
        help="Only print the digest, do not write an output file",
    )
    parser.add_argument(
        "--resource-dir",
        type=str,
        default=None,
        help="Directory holding the family constant tables (default: bundled tables)",
    )
    return parser


def _write_output(args, family_name: str, digest_hex: str) -> str:
    """Write the digest to the output directory and return the file path."""
    os.makedirs(args.output_dir, exist_ok=True)

    if args.format == "yaml":
        output_path = os.path.join(args.output_dir, f"output-{family_name}.yaml")
        record: Dict = {
            "family": family_name,
            "mode": "file" if args.file is not None else "text",
            "input": args.file if args.file is not None else (args.text or ""),
            "digest_hex": digest_hex,
        }
        with open(output_path, "w") as f:
            yaml.dump(record, f, default_flow_style=False, sort_keys=False)
    else:
        output_path = os.path.join(args.output_dir, f"output-{family_name}.txt")
        with open(output_path, "w") as f:
            f.write(digest_hex)
    return output_path


def main(argv: list[str] | None = None) -> int:
    """CLI entry point. Returns the process exit code."""
    args = build_parser().parse_args(argv)

    try:
        family = resolve_family(args.family)
        if args.resource_dir is not None:
            engine = SecureHashAlgorithm(load_descriptor(family, args.resource_dir))
        else:
            engine = SecureHashAlgorithm(family)
    except SecureHashError as e:
        sys.stderr.write(f"error: {e}\n")
        return 1

    family_name = family.value
    if args.file is not None:
        try:
            with open(args.file, "rb") as f:
                digest_hex = engine.digest(f)
        except OSError as e:
            sys.stderr.write(f"error: could not open the file '{args.file}': {e}\n")
            return 1
    else:
        digest_hex = engine.digest(args.text or "")

    print(f"{family_name}: {digest_hex}")

    if not args.no_output:
        try:
            _write_output(args, family_name, digest_hex)
        except OSError as e:
            sys.stderr.write(f"error: could not write output: {e}\n")
            return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
