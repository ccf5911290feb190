"""loop
Main agent implementation: the tool-calling loop and the per-message handler
"""

import asyncio
import logging
import sys
import time
from typing import Awaitable, Callable

from lmnr import observe

from toolloop.config import Config
from toolloop.context_manager.manager import enrich_message, load_system_prompt
from toolloop.core.executor import ToolLookup, execute_tool_calls
from toolloop.core.formatter import format_tool_results
from toolloop.core.parser import extract_text_outside_tool_calls, parse_tool_calls
from toolloop.core.session import Event, OpType, Session
from toolloop.core.tools import ToolRegistry, create_builtin_tools
from toolloop.memory import Memory, MemoryCategory, create_memory
from toolloop.observability import AgentEnd, AgentStart, create_observer
from toolloop.providers import Provider, create_routed_provider
from toolloop.utils.terminal_display import format_intermediate, truncate_with_ellipsis

logger = logging.getLogger(__name__)

# Maximum tool-calling rounds per user message
MAX_TOOL_ITERATIONS = 10

ASSISTANT_SUMMARY_CHARS = 100

EventSink = Callable[[Event], Awaitable[None]]


async def _stderr_sink(event: Event) -> None:
    """Fallback side channel: print intermediate model text to stderr"""
    if event.event_type == "assistant_message" and event.data:
        print(format_intermediate(event.data["content"]), file=sys.stderr)


@observe(name="tool_calling_loop")
async def tool_calling_loop(
    provider: Provider,
    system_prompt: str | None,
    initial_message: str,
    model_name: str,
    temperature: float,
    tools: ToolLookup,
    send_event: EventSink | None = None,
) -> str:
    """
    Call the model, run any tools it asks for, feed results back, repeat.

    Returns the first response that contains no tool calls. If every one of
    the MAX_TOOL_ITERATIONS rounds asks for tools, returns "".
    Provider errors propagate to the caller.
    """
    send_event = send_event or _stderr_sink

    # The provider takes a single string, so the whole exchange is
    # re-sent each round as one growing user message.
    conversation = initial_message
    final_text = ""

    for iteration in range(MAX_TOOL_ITERATIONS):
        response = await provider.chat_with_system(
            system_prompt, conversation, model_name, temperature
        )

        calls = parse_tool_calls(response)

        text = extract_text_outside_tool_calls(response)
        if text and (iteration > 0 or calls):
            await send_event(
                Event(event_type="assistant_message", data={"content": text})
            )

        if not calls:
            final_text = response
            break

        logger.debug(
            "Executing tool calls | iteration=%d num_calls=%d", iteration, len(calls)
        )
        for call in calls:
            await send_event(
                Event(
                    event_type="tool_call",
                    data={"tool": call.name, "arguments": call.arguments},
                )
            )

        results = await execute_tool_calls(tools, calls)

        for name, result in results:
            if result.success:
                logger.debug("Tool succeeded | tool=%s", name)
            else:
                logger.warning(
                    "Tool failed | tool=%s error=%s", name, result.error or "unknown"
                )
            await send_event(
                Event(
                    event_type="tool_output",
                    data={
                        "tool": name,
                        "output": result.output if result.success else result.error,
                        "success": result.success,
                    },
                )
            )

        tool_results_text = format_tool_results(results)
        conversation += (
            f"\n\n[Assistant]\n{response}\n\n[Tool Results]\n{tool_results_text}"
        )
    else:
        # Kept for parity: exhausting the cap yields an empty answer.
        logger.warning(
            "Reached %d tool iterations without a final response", MAX_TOOL_ITERATIONS
        )
        await send_event(
            Event(
                event_type="max_iterations_reached",
                data={"iterations": MAX_TOOL_ITERATIONS},
            )
        )

    return final_text


async def _store_quietly(
    memory: Memory, key: str, content: str, category: MemoryCategory
) -> None:
    try:
        await memory.store(key, content, category)
    except Exception as e:
        logger.debug("Memory store failed for %s: %s", key, e)


class Handlers:
    """Handler functions for each operation type"""

    @staticmethod
    @observe(name="run_agent")
    async def run_agent(session: Session, text: str) -> str:
        """
        Handle one user message: inject memory context, run the loop,
        auto-save both sides of the exchange.
        """
        await session.send_event(
            Event(event_type="processing", data={"message": "Processing user input"})
        )

        enriched = await enrich_message(session.memory, text)

        auto_save = session.config.memory.auto_save
        # Store only after recall, or the message comes back as its own context.
        if auto_save:
            await _store_quietly(
                session.memory, "user_msg", text, MemoryCategory.CONVERSATION
            )

        response = await tool_calling_loop(
            session.provider,
            session.system_prompt,
            enriched,
            session.model_name,
            session.config.temperature,
            session.tools,
            send_event=session.send_event if session.event_queue is not None else None,
        )

        if auto_save:
            summary = truncate_with_ellipsis(response, ASSISTANT_SUMMARY_CHARS)
            await _store_quietly(
                session.memory, "assistant_resp", summary, MemoryCategory.DAILY
            )

        await session.send_event(
            Event(event_type="turn_complete", data={"response": response})
        )
        return response

    @staticmethod
    async def shutdown(session: Session) -> bool:
        session.is_running = False
        await session.send_event(Event(event_type="shutdown"))
        return True


def build_session(
    config: Config,
    event_queue: asyncio.Queue | None = None,
    provider_override: str | None = None,
    model_override: str | None = None,
    workspace_dir: str = ".",
) -> Session:
    """Wire the provider, memory, tools, observer and system prompt into a Session"""
    observer = create_observer(config.observability)
    memory = create_memory(config.memory, workspace_dir)
    logger.info("Memory initialized | backend=%s", memory.name)

    tools = ToolRegistry(create_builtin_tools(memory))

    provider_name = provider_override or config.default_provider
    model_name = model_override or config.default_model
    provider = create_routed_provider(
        provider_name,
        config.resolved_api_key(),
        config.reliability,
        config.model_routes,
    )

    system_prompt = load_system_prompt(
        tools.get_tool_specs(), model_name, config.system_prompt_path
    )

    return Session(
        event_queue,
        config=config,
        provider=provider,
        tools=tools,
        memory=memory,
        system_prompt=system_prompt,
        observer=observer,
        provider_name=provider_name,
        model_name=model_name,
    )


async def run_once(session: Session, message: str) -> str:
    """Answer a single message, bracketed by start/end observer events"""
    session.observer.record_event(
        AgentStart(provider=session.provider_name, model=session.model_name)
    )
    start = time.monotonic()
    try:
        return await Handlers.run_agent(session, message)
    finally:
        session.observer.record_event(AgentEnd(duration=time.monotonic() - start))


async def process_submission(session: Session, submission) -> bool:
    """
    Process a single submission and return whether to continue running.
    """
    op = submission.operation

    if op.op_type == OpType.USER_INPUT:
        text = op.data.get("text", "") if op.data else ""
        await Handlers.run_agent(session, text)
        return True

    if op.op_type == OpType.SHUTDOWN:
        return not await Handlers.shutdown(session)

    logger.warning("Unknown operation: %s", op.op_type)
    return True


@observe(name="submission_loop")
async def submission_loop(submission_queue: asyncio.Queue, session: Session) -> None:
    """
    Process submissions one at a time until shutdown.

    A message is fully answered before the next submission is taken, so
    transcript and memory writes stay in order.
    """
    session.observer.record_event(
        AgentStart(provider=session.provider_name, model=session.model_name)
    )
    start = time.monotonic()

    await session.send_event(
        Event(event_type="ready", data={"message": "Agent initialized"})
    )

    try:
        while session.is_running:
            submission = await submission_queue.get()

            try:
                should_continue = await process_submission(session, submission)
                if not should_continue:
                    break
            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.error("Error in agent loop: %s", e)
                await session.send_event(
                    Event(event_type="error", data={"error": str(e)})
                )
    finally:
        session.observer.record_event(AgentEnd(duration=time.monotonic() - start))
