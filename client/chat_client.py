"""Simple chat participant client for manual testing."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import pathlib
import time
from typing import Any

import websockets

DEFAULT_URL = "ws://127.0.0.1:8000/chat/promptis.promptis"


def build_request(prompt: str, files: list[pathlib.Path], command: str | None) -> dict[str, Any]:
    """Build a chat request, appending a ``#file:`` token per attached file."""

    references = []
    for path in files:
        token = f"#file:{path.name}"
        start = len(prompt) + 1 if prompt else 0
        prompt = f"{prompt} {token}" if prompt else token
        references.append(
            {
                "id": "vscode.file",
                "name": f"file:{path.name}",
                "range": [start, start + len(token)],
                "value": {"scheme": "file", "path": str(path.resolve())},
            }
        )
    return {"command": command, "prompt": prompt, "references": references}


async def run_client(url: str, request: dict[str, Any], timeout: float) -> None:
    """Send one chat turn and print the frames received until its result."""

    logger = logging.getLogger("chat_client")
    start = time.perf_counter()

    async with websockets.connect(url, ping_interval=None) as websocket:
        await websocket.send(json.dumps(request))
        logger.info("Sent chat request (%d chars)", len(request["prompt"]))

        while True:
            message = await asyncio.wait_for(websocket.recv(), timeout=timeout)
            frame = json.loads(message)

            if "error" in frame:
                logger.error("Received error frame: %s", message)
                raise SystemExit(1)
            if frame.get("type") == "markdown":
                print(frame["value"])
                continue

            elapsed = time.perf_counter() - start
            logger.info("Received result in %.2fs: %s", elapsed, frame.get("result"))
            if frame.get("result", {}).get("error_details"):
                raise SystemExit(1)
            break


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Test client for the promptis chat participant.")
    parser.add_argument("--url", default=DEFAULT_URL, help="WebSocket URL (default: %(default)s)")
    parser.add_argument("--prompt", default="", help="Free-form prompt text.")
    parser.add_argument(
        "--file", action="append", type=pathlib.Path, default=[], help="File to attach."
    )
    parser.add_argument("--command", help="Optional chat command.")
    parser.add_argument(
        "--timeout", type=float, default=60.0, help="Seconds to wait for each frame."
    )
    parser.add_argument("--log-level", default="INFO", help="Logging level.")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level.upper(), logging.INFO))
    request = build_request(args.prompt, args.file, args.command)
    try:
        asyncio.run(run_client(args.url, request, args.timeout))
    except KeyboardInterrupt:  # pragma: no cover - manual usage only
        pass


if __name__ == "__main__":  # pragma: no cover
    main()
