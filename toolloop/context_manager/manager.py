"""
Context for the conversation: recalled memories and the system prompt
"""

import logging
from pathlib import Path
from typing import Any

import yaml
from jinja2 import Template, TemplateError

from toolloop.config import ConfigError
from toolloop.core.tools import ToolSpec
from toolloop.memory import Memory

logger = logging.getLogger(__name__)

MEMORY_RECALL_LIMIT = 5

DEFAULT_PROMPT_FILE = Path(__file__).parent.parent / "prompts" / "system_prompt.yaml"


async def build_context(memory: Memory, user_msg: str) -> str:
    """
    Build a preamble listing memories relevant to the message.

    Returns "" when recall fails or finds nothing.
    """
    try:
        entries = await memory.recall(user_msg, MEMORY_RECALL_LIMIT)
    except Exception as e:
        logger.debug("Memory recall failed: %s", e)
        return ""

    if not entries:
        return ""

    lines = ["[Memory context]"]
    for entry in entries:
        lines.append(f"- {entry.key}: {entry.content}")
    return "\n".join(lines) + "\n\n"


async def enrich_message(memory: Memory, user_msg: str) -> str:
    """Prepend recalled context to the user message"""
    context = await build_context(memory, user_msg)
    if not context:
        return user_msg
    return f"{context}{user_msg}"


def load_system_prompt(
    tool_specs: list[ToolSpec],
    model_name: str,
    prompt_file: str | Path | None = None,
) -> str:
    """Load and render the system prompt from YAML file with Jinja2"""
    path = Path(prompt_file) if prompt_file else DEFAULT_PROMPT_FILE

    try:
        with open(path, "r") as f:
            prompt_data = yaml.safe_load(f) or {}
    except (OSError, UnicodeDecodeError, yaml.YAMLError) as e:
        raise ConfigError(f"Cannot load system prompt {path}: {e}") from e

    if not isinstance(prompt_data, dict):
        raise ConfigError(f"System prompt file {path} must be a YAML mapping")
    template_str = prompt_data.get("system_prompt", "")

    tools: list[dict[str, Any]] = [
        {
            "name": spec.name,
            "description": spec.description,
            "parameters": spec.parameters,
        }
        for spec in tool_specs
    ]
    try:
        template = Template(template_str)
        return template.render(
            tools=tools,
            num_tools=len(tools),
            model_name=model_name,
        )
    except TemplateError as e:
        raise ConfigError(f"Invalid system prompt template in {path}: {e}") from e
