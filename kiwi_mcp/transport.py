from __future__ import annotations

import json
import logging
import sys
from typing import IO, Optional

from .server import ContextServer

logger = logging.getLogger(__name__)


def serve(
    server: ContextServer,
    stdin: Optional[IO[str]] = None,
    stdout: Optional[IO[str]] = None,
) -> None:
    """Read one JSON-RPC request per line and answer it before the next."""
    stdin = stdin or sys.stdin
    stdout = stdout or sys.stdout

    # decode per line so one undecodable line cannot end the loop
    source = getattr(stdin, "buffer", stdin)
    for raw in source:
        if not raw.strip():
            continue
        try:
            line = raw.decode("utf-8") if isinstance(raw, bytes) else raw
            request = json.loads(line)
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            logger.error("Error parsing request: %s", exc)
            continue
        if not isinstance(request, dict):
            logger.error("Error parsing request: expected a JSON object")
            continue

        response = server.handle_message(request)
        if response is not None:
            stdout.write(json.dumps(response, ensure_ascii=False))
            stdout.write("\n")
            stdout.flush()

    logger.info("Input closed, shutting down")


__all__ = ["serve"]
