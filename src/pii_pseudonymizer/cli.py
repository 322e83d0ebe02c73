# Copyright 2025 Lars Marowsky-Brée <lars@marowsky-bree.eu>
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Command-line interface for the PII pseudonymizer."""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import NoReturn

from .config import load_config_file, validate_config_file
from .errors import ConfigError, PseudonymizerError
from .pipeline import TransformMap
from .strategy import PseudonymizeStrategy


def _identity(value: str) -> str:
    return value


def cmd_validate(args: argparse.Namespace) -> int:
    """Validate a configuration file."""
    path = Path(args.config)
    errors = validate_config_file(path)
    if errors:
        print(f"Validation errors in {path}:", file=sys.stderr)
        for err in errors:
            print(f"  {err}", file=sys.stderr)
        return 1
    print(f"{path}: OK")
    return 0


def cmd_apply(args: argparse.Namespace) -> int:
    """Pseudonymize the fields of an event read from stdin."""
    try:
        enrichment = load_config_file(Path(args.config))
    except ConfigError as e:
        print(f"Invalid configuration {args.config}:", file=sys.stderr)
        for msg in e.messages:
            print(f"  {msg}", file=sys.stderr)
        return 1

    try:
        event = json.load(sys.stdin)
    except json.JSONDecodeError as e:
        print(f"Invalid JSON input: {e}", file=sys.stderr)
        return 1
    if not isinstance(event, dict) or not all(isinstance(v, str) for v in event.values()):
        print("Error: input must be a JSON object of string fields", file=sys.stderr)
        return 1

    # Fields are already converted, so each entry just passes its value through
    transform_map: TransformMap = {name: (_identity, name) for name in event}
    transform_map = enrichment.transformer(transform_map)

    result: dict[str, str] = {}
    for name, (func, output_field) in transform_map.items():
        try:
            result[output_field] = func(event[name])
        except PseudonymizerError as e:
            print(f"Error in field '{name}': {e}", file=sys.stderr)
            return 1

    json.dump(result, sys.stdout)
    sys.stdout.write("\n")
    return 0


def cmd_hash(args: argparse.Namespace) -> int:
    """Print the pseudonym of each value."""
    try:
        strategy = PseudonymizeStrategy(args.hash_function)
    except PseudonymizerError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    for value in args.values:
        print(strategy.scramble(value))
    return 0


def main() -> int | NoReturn:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="pii-pseudonymize", description="Pseudonymize PII fields of enriched events"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # validate subcommand
    validate_parser = subparsers.add_parser("validate", help="Validate a configuration file")
    validate_parser.add_argument("config", help="Self-describing JSON or YAML configuration")

    # apply subcommand
    apply_parser = subparsers.add_parser(
        "apply", help="Pseudonymize a JSON object of event fields read from stdin"
    )
    apply_parser.add_argument("--config", required=True, help="Configuration file")

    # hash subcommand
    hash_parser = subparsers.add_parser("hash", help="Print the pseudonym of each value")
    hash_parser.add_argument("values", nargs="+", help="Values to pseudonymize")
    hash_parser.add_argument("--hash-function", default="SHA-256", help="Hash function name")

    args = parser.parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, stream=sys.stderr)

    if args.command == "validate":
        return cmd_validate(args)
    if args.command == "apply":
        return cmd_apply(args)
    if args.command == "hash":
        return cmd_hash(args)

    parser.print_help()
    return 1
