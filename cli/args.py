"""Command line parsing for the CMD connector scripts.

Invocation shape (as issued by the orchestrator):

    cmdb-person OPERATION SYSTEM [UID] [NAME] [key=value ...] [--debug]
"""

import argparse
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence


@dataclass
class ScriptArgs:
    """Parsed command line arguments for all scripts."""
    operation: str
    system: str
    uid: str = ""
    name: str = ""
    attributes: Dict[str, str] = field(default_factory=dict)
    debug: bool = False
    config_path: Optional[str] = None
    json_logs: bool = False


def parse_attributes(tokens: Iterable[str]) -> Dict[str, str]:
    """Parse ``key=value`` tokens.

    Tokens are split on the first ``=``, so values may contain ``=``.
    Tokens without ``=`` or with an empty key are ignored.
    """
    attributes: Dict[str, str] = {}
    for token in tokens:
        if "=" not in token:
            continue
        key, value = token.split("=", 1)
        if key:
            attributes[key] = value
    return attributes


def build_parser(operations: Sequence[str]) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cmdb-person",
        description="Person operations against a system of record, for the midPoint CMD connector",
    )
    parser.add_argument("operation", choices=list(operations), help="Operation to perform")
    parser.add_argument("system", help='System identifier (e.g. "itop")')
    parser.add_argument("uid", nargs="?", default="", help="Person identifier in the target system")
    parser.add_argument("name", nargs="?", default="", help="Person name")
    parser.add_argument("attributes", nargs="*", default=[], help="key=value attribute pairs")
    parser.add_argument("-d", "--debug", action="store_true", help="Log request/response details to stderr")
    parser.add_argument("--config", dest="config_path", default=None, help="Path to the JSON configuration file")
    parser.add_argument("--json-logs", action="store_true", help="Emit logs as JSON lines")
    return parser


def parse_args(operations: Sequence[str], argv: Optional[List[str]] = None) -> ScriptArgs:
    """Parse argv into ScriptArgs (argparse exits with status 2 on bad usage)."""
    parser = build_parser(operations)
    ns = parser.parse_intermixed_args(argv)
    return ScriptArgs(
        operation=ns.operation,
        system=ns.system,
        uid=ns.uid or "",
        name=ns.name or "",
        attributes=parse_attributes(ns.attributes),
        debug=ns.debug,
        config_path=ns.config_path,
        json_logs=ns.json_logs,
    )
