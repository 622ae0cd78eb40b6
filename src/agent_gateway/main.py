"""CLI entry point for running a gateway agent and streaming its events."""

from __future__ import annotations

import argparse
import asyncio
import signal
import sys
from pathlib import Path
from typing import TextIO

from tqdm import tqdm

from agent_gateway.agents import AgentDispatcher
from agent_gateway.config import Settings, get_settings
from agent_gateway.errors import UnknownAgentError
from agent_gateway.streaming.cancellation import CancellationToken
from agent_gateway.streaming.events import Event, ProgressEvent
from agent_gateway.streaming.framing import encode_event
from agent_gateway.utils.logger import setup_logger


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run a gateway agent and stream its events.")
    parser.add_argument(
        "--mode",
        default="agentSurvey",
        help="Agent to run: agentSurvey, agentSFC, agentData or agentImage (default: agentSurvey).",
    )
    parser.add_argument(
        "--message",
        required=True,
        help="User message; for agentSurvey this is the LimeSurvey id.",
    )
    parser.add_argument(
        "--surveys-dir",
        default=None,
        help="Directory with survey_<id>.csv/.parquet exports (overrides SURVEYS_DIR).",
    )
    parser.add_argument(
        "--aspect",
        default=None,
        help="Aspect ratio for agentImage, e.g. 16:9.",
    )
    parser.add_argument(
        "--format",
        choices=["ndjson", "text"],
        default="text",
        help="Output format (default: text).",
    )
    return parser.parse_args(argv)


def build_settings(args: argparse.Namespace) -> Settings:
    settings = get_settings()
    if args.surveys_dir:
        settings = settings.model_copy(update={"surveys_dir": Path(args.surveys_dir)})
    return settings


async def stream(
    dispatcher: AgentDispatcher,
    mode: str,
    message: str,
    output_format: str,
    options: dict[str, str] | None = None,
    out: TextIO = sys.stdout,
) -> int:
    """Run one agent and write its events to ``out``; return the exit code."""
    token = CancellationToken()
    loop = asyncio.get_running_loop()
    try:
        loop.add_signal_handler(signal.SIGINT, token.cancel, "interrupted by user")
    except (NotImplementedError, RuntimeError):
        pass

    channel = dispatcher.dispatch(mode, message, token=token, options=options)
    bar: tqdm | None = None
    failures = 0
    try:
        async for event in channel:
            if event.type == "error":
                failures += 1
            if output_format == "ndjson":
                out.write(encode_event(event).decode("utf-8"))
                out.flush()
                continue
            bar = _render_text(event, out, bar)
    finally:
        if bar is not None:
            bar.close()
        try:
            loop.remove_signal_handler(signal.SIGINT)
        except (NotImplementedError, RuntimeError):
            pass
    await channel.join()
    if token.cancelled:
        return 130
    return 1 if failures else 0


def _render_text(event: Event, out: TextIO, bar: tqdm | None) -> tqdm | None:
    if event.type == "progress" and isinstance(event.data, ProgressEvent):
        payload = event.data
        if bar is None:
            bar = tqdm(total=payload.total, desc="Processing", unit="step", file=sys.stderr)
        bar.n = payload.current
        bar.set_postfix_str(payload.status)
        bar.refresh()
    elif event.type == "response":
        out.write(str(event.data))
        out.flush()
    elif event.type == "sources":
        tqdm.write(f"[sources] {len(event.data or [])} passages", file=sys.stderr)
    elif event.type == "error":
        tqdm.write(f"[error] {event.data}", file=sys.stderr)
    elif event.is_end:
        out.write("\n")
    return bar


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    settings = build_settings(args)
    setup_logger(settings)

    dispatcher = AgentDispatcher(settings=settings)
    options = {"aspect": args.aspect} if args.aspect else {}
    try:
        return asyncio.run(stream(dispatcher, args.mode, args.message, args.format, options))
    except UnknownAgentError as exc:
        print(exc, file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
