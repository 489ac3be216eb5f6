#!/usr/bin/env python3
# -*- coding: utf-8 -*-
from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import asdict
from typing import List, Optional

from .app import HackerNewsApp
from .config import load_config, setup_logging
from .host import ContextMessage

logger = logging.getLogger("hn")


def write_context_messages(messages: List[ContextMessage], output: Optional[str]) -> None:
    """Emit articles added to context: text on stdout, or JSON lines to a file."""
    if not messages:
        return
    if output:
        with open(output, "a", encoding="utf-8") as f:
            for message in messages:
                f.write(json.dumps(asdict(message)) + "\n")
        logger.info("Wrote %d context messages to %s", len(messages), output)
        return
    sys.stdout.write("\n\n".join(message.content for message in messages) + "\n")


# --- Entrypoint ---
def main() -> None:
    parser = argparse.ArgumentParser(description="Hacker News front page browser")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    parser.add_argument("--theme", type=str, help="Textual theme for this run")
    parser.add_argument(
        "--output",
        type=str,
        help="Append articles added to context to this file as JSON lines instead of stdout",
    )
    args = parser.parse_args()

    debug_path = setup_logging(args.debug)
    if debug_path:
        print(f"Debug logging enabled: {debug_path}", file=sys.stderr)

    config = load_config()

    try:
        app = HackerNewsApp(config=config, theme=args.theme)
        messages = app.run() or []
    except Exception as e:
        logger.exception("Application crashed: %s", e)
        print(f"Application crashed: {e}", file=sys.stderr)
        sys.exit(1)

    if app.session.pending_reads:
        print(
            f"Could not persist {len(app.session.pending_reads)} read articles to "
            f"{app.session.store.path}",
            file=sys.stderr,
        )

    try:
        write_context_messages(messages, args.output)
    except OSError as e:
        print(f"Could not write context to {args.output}: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
