"""Entry point: ``python -m cli OPERATION SYSTEM [UID] [NAME] [key=value ...]``."""

import asyncio
import logging
import sys
from typing import List, Optional

from cli.args import parse_args
from cli.scripts import SCRIPTS
from core.observability.logging import configure_logging


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(sorted(SCRIPTS), argv)
    configure_logging(
        level=logging.DEBUG if args.debug else logging.WARNING,
        json_format=args.json_logs,
    )

    script = SCRIPTS[args.operation](args)
    return asyncio.run(script.run())


if __name__ == "__main__":
    sys.exit(main())
