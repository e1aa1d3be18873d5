"""
deepwalk command-line front end.

Runs one deepwalk operation on JSON documents and emits a JSON payload:

    deepwalk equal a.json b.json
    deepwalk replace doc.json --map '{"old": "new"}' --order pre
    deepwalk keys doc.json --case snake
    deepwalk trace doc.json --order post

Any document argument may be "-" to read stdin. Every payload carries the
schema tag below; the schema itself ships in deepwalk/schemas/.

Exit status: 0 ok, 1 the operation failed (payload has ok=false), 2 bad
input.
"""

from __future__ import annotations

import argparse
import hashlib
import json
import logging
import sys
from typing import Any, Callable, List, Optional

from deepwalk import config
from deepwalk.equality import equal
from deepwalk.forms import Entry, PList
from deepwalk.policies import camel_case_keys, postwalk_replace, prewalk_replace, snake_case_keys
from deepwalk.walk_engine import walk_trace

logger = logging.getLogger(__name__)

SCHEMA_TAG = "deepwalk-cli.v1"
SCHEMA_FILE = "schemas/cli_result.v1.json"


def _read_document(source: str) -> Any:
    if source == "-":
        text = sys.stdin.read()
    else:
        with open(source, encoding="utf-8") as fh:
            text = fh.read()
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise ValueError(f"{source}: not valid JSON ({e})") from e


def _parse_map(text: str) -> dict[str, Any]:
    try:
        smap = json.loads(text)
    except json.JSONDecodeError as e:
        raise ValueError(f"--map must be a JSON object. Parse error: {e}") from e
    if not isinstance(smap, dict):
        raise ValueError("--map must be a JSON object")
    return smap


def _to_json(value: Any) -> Any:
    """Render walk output (which may hold Entry nodes) as plain JSON."""
    if isinstance(value, Entry):
        return [_to_json(value.key), _to_json(value.value)]
    if isinstance(value, (list, tuple, PList)):
        return [_to_json(x) for x in value]
    if isinstance(value, dict):
        return {str(k): _to_json(v) for k, v in value.items()}
    return value


def _inputs_hash(command: str, inputs: List[Any]) -> str:
    payload = json.dumps({"command": command, "inputs": inputs}, sort_keys=True, separators=(",", ":"))
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


def _emit(payload: dict[str, Any], pretty: bool) -> None:
    if pretty:
        print(json.dumps(payload, ensure_ascii=False, indent=2))
    else:
        print(json.dumps(payload, ensure_ascii=False))


# =============================================================================
# Commands
# =============================================================================


def _cmd_equal(args: argparse.Namespace) -> tuple[List[Any], Callable[[], Any]]:
    if args.left == "-" and args.right == "-":
        raise ValueError("stdin can supply only one of the two documents")
    a, b = _read_document(args.left), _read_document(args.right)
    return [a, b], lambda: equal(a, b)


def _cmd_replace(args: argparse.Namespace) -> tuple[List[Any], Callable[[], Any]]:
    doc = _read_document(args.document)
    smap = _parse_map(args.map)
    replace = prewalk_replace if args.order == "pre" else postwalk_replace
    return [doc, smap], lambda: replace(smap, doc)


def _cmd_keys(args: argparse.Namespace) -> tuple[List[Any], Callable[[], Any]]:
    doc = _read_document(args.document)
    convert = snake_case_keys if args.case == "snake" else camel_case_keys
    return [doc], lambda: convert(doc)


def _cmd_trace(args: argparse.Namespace) -> tuple[List[Any], Callable[[], Any]]:
    doc = _read_document(args.document)
    return [doc], lambda: _to_json(walk_trace(args.order, doc))


COMMANDS = {
    "equal": _cmd_equal,
    "replace": _cmd_replace,
    "keys": _cmd_keys,
    "trace": _cmd_trace,
}


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="deepwalk", description="Stack-safe walks and deep equality over JSON documents.")
    ap.add_argument("--pretty", action="store_true", help="Pretty-print JSON output.")
    ap.add_argument("--verbose", "-v", action="store_true", help="Log at DEBUG level to stderr.")
    ap.add_argument("--schema", action="store_true", help="Print schema tag + schema file and exit.")
    sub = ap.add_subparsers(dest="command")

    p = sub.add_parser("equal", help="Deep equality of two JSON documents.")
    p.add_argument("left", help="JSON file, or - for stdin")
    p.add_argument("right", help="JSON file, or - for stdin")

    p = sub.add_parser("replace", help="Substitute values found in a replacement map.")
    p.add_argument("document", help="JSON file, or - for stdin")
    p.add_argument("--map", required=True, help='JSON object of replacements, e.g. \'{"a": "b"}\'')
    p.add_argument("--order", choices=("pre", "post"), default="pre", help="Top-down (pre) or bottom-up (post).")

    p = sub.add_parser("keys", help="Convert the casing of every map key.")
    p.add_argument("document", help="JSON file, or - for stdin")
    p.add_argument("--case", choices=("snake", "camel"), required=True)

    p = sub.add_parser("trace", help="List nodes in walk visitation order.")
    p.add_argument("document", help="JSON file, or - for stdin")
    p.add_argument("--order", choices=("pre", "post"), default="pre")

    return ap


def main(argv: Optional[List[str]] = None) -> int:
    ap = build_parser()
    args = ap.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else config.log_level())

    if args.schema:
        print(f"{SCHEMA_TAG} {SCHEMA_FILE}")
        return 0

    if not args.command:
        ap.error("a command is required unless --schema is used")

    try:
        inputs, operation = COMMANDS[args.command](args)
    except (OSError, ValueError) as e:
        print(f"Invalid input: {e}", file=sys.stderr)
        return 2

    logger.info("running %s", args.command)
    warnings: List[str] = []
    try:
        result = operation()
        ok = True
    except Exception as e:
        logger.exception("%s failed", args.command)
        ok = False
        result = None
        warnings.append(str(e))

    payload: dict[str, Any] = {
        "schema": SCHEMA_TAG,
        "command": args.command,
        "ok": ok,
        "result": result,
        "warnings": warnings,
        "meta": {
            "tool": "deepwalk.cli",
            "inputs_hash": _inputs_hash(args.command, inputs),
        },
    }

    _emit(payload, pretty=bool(args.pretty))
    return 0 if ok else 1


if __name__ == "__main__":
    raise SystemExit(main())
