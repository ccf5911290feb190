"""
Command-line chat with the agent: one message, or an interactive session
"""

import argparse
import asyncio
import logging
import os
import sys
from dataclasses import dataclass
from typing import Any, Optional

import litellm
from dotenv import load_dotenv
from lmnr import Laminar, LaminarLiteLLMCallback

from toolloop.config import ConfigError, load_config
from toolloop.core.agent_loop import build_session, run_once, submission_loop
from toolloop.core.session import OpType, Session
from toolloop.providers import ProviderError
from toolloop.utils.terminal_display import (
    format_intermediate,
    format_tool_call,
    format_tool_output,
)

logger = logging.getLogger(__name__)

litellm.drop_params = True


def _init_tracing() -> None:
    lmnr_api_key = os.environ.get("LMNR_API_KEY")
    if not lmnr_api_key:
        return
    try:
        Laminar.initialize(project_api_key=lmnr_api_key)
        litellm.callbacks = [LaminarLiteLLMCallback()]
        logger.info("Laminar initialized")
    except Exception as e:
        logger.warning("Failed to initialize Laminar: %s", e)


@dataclass
class Operation:
    """Operation to be executed by the agent"""

    op_type: OpType
    data: Optional[dict[str, Any]] = None


@dataclass
class Submission:
    """Submission to the agent loop"""

    id: str
    operation: Operation


async def event_listener(event_queue: asyncio.Queue, turn_complete: asyncio.Event) -> None:
    """Background task that listens for events and displays them"""
    while True:
        try:
            event = await event_queue.get()
            data = event.data or {}

            if event.event_type == "assistant_message":
                print(format_intermediate(data.get("content", "")), file=sys.stderr)
            elif event.event_type == "tool_call":
                print(
                    format_tool_call(data.get("tool", ""), data.get("arguments", {})),
                    file=sys.stderr,
                )
            elif event.event_type == "tool_output":
                print(
                    format_tool_output(
                        data.get("tool", ""),
                        data.get("output") or "",
                        data.get("success", False),
                    ),
                    file=sys.stderr,
                )
            elif event.event_type == "max_iterations_reached":
                print(
                    f"Stopped after {data.get('iterations')} tool rounds without an answer",
                    file=sys.stderr,
                )
            elif event.event_type == "turn_complete":
                print(f"\n{data.get('response', '')}\n")
                turn_complete.set()
            elif event.event_type == "error":
                print(f"Error: {data.get('error', 'Unknown error')}", file=sys.stderr)
                turn_complete.set()
            elif event.event_type == "shutdown":
                break
            # Silently ignore other events

        except asyncio.CancelledError:
            break


async def get_user_input() -> str:
    """Get user input asynchronously"""
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, input, "> ")


async def interactive(session: Session, event_queue: asyncio.Queue) -> None:
    """Read lines from stdin and answer them one at a time"""
    print("toolloop interactive mode")
    print("Type /quit to exit.\n")

    submission_queue: asyncio.Queue = asyncio.Queue()
    turn_complete = asyncio.Event()
    turn_complete.set()

    agent_task = asyncio.create_task(submission_loop(submission_queue, session))
    listener_task = asyncio.create_task(event_listener(event_queue, turn_complete))

    submission_id = 0
    try:
        while True:
            # Wait for previous turn to complete
            await turn_complete.wait()

            try:
                user_input = await get_user_input()
            except EOFError:
                break

            if user_input.strip().lower() in ["exit", "quit", "/quit", "/exit"]:
                break
            if not user_input.strip():
                continue

            turn_complete.clear()
            submission_id += 1
            await submission_queue.put(
                Submission(
                    id=f"sub_{submission_id}",
                    operation=Operation(
                        op_type=OpType.USER_INPUT, data={"text": user_input}
                    ),
                )
            )
    except KeyboardInterrupt:
        print("\nInterrupted by user")

    await submission_queue.put(
        Submission(id="sub_shutdown", operation=Operation(op_type=OpType.SHUTDOWN))
    )
    await asyncio.wait_for(agent_task, timeout=2.0)
    listener_task.cancel()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="toolloop", description="Chat with a tool-calling agent"
    )
    parser.add_argument("-m", "--message", help="Answer a single message and exit")
    parser.add_argument("-c", "--config", help="Path to a JSON config file")
    parser.add_argument("-p", "--provider", help="Override the default provider")
    parser.add_argument("--model", help="Override the default model")
    parser.add_argument("-t", "--temperature", type=float, help="Sampling temperature")
    parser.add_argument(
        "-w", "--workspace", default=".", help="Workspace directory (default: .)"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


async def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    load_dotenv()
    _init_tracing()

    try:
        config = load_config(args.config)
        if args.temperature is not None:
            config = config.model_copy(update={"temperature": args.temperature})

        event_queue: asyncio.Queue | None = (
            None if args.message is not None else asyncio.Queue()
        )
        session = build_session(
            config,
            event_queue=event_queue,
            provider_override=args.provider,
            model_override=args.model,
            workspace_dir=args.workspace,
        )
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2

    if args.message is not None:
        try:
            response = await run_once(session, args.message)
        except ProviderError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1
        print(response)
        return 0

    await interactive(session, event_queue)
    return 0


def cli() -> None:
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        print("\nGoodbye!")


if __name__ == "__main__":
    cli()
