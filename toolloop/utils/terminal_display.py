"""
Terminal display utilities with colors and formatting
"""

import json
from typing import Any


# ANSI color codes
class Colors:
    RED = "\033[91m"
    GREEN = "\033[92m"
    YELLOW = "\033[93m"
    CYAN = "\033[96m"
    DIM = "\033[2m"
    RESET = "\033[0m"


def truncate_with_ellipsis(text: str, max_chars: int) -> str:
    """Cut text to max_chars characters, appending '...' when anything was cut"""
    if len(text) <= max_chars:
        return text
    return text[:max_chars] + "..."


def clip_lines(text: str, max_lines: int = 6) -> str:
    """Keep the first max_lines lines of tool output, noting how many were hidden"""
    lines = text.split("\n")
    hidden = len(lines) - max_lines
    if hidden <= 0:
        return text
    kept = lines[:max_lines]
    return "\n".join(kept) + f"\n{Colors.CYAN}[{hidden} lines hidden]{Colors.RESET}"


def format_tool_call(tool_name: str, arguments: Any) -> str:
    args = json.dumps(arguments, ensure_ascii=False)
    return f"{Colors.YELLOW}> {tool_name}{Colors.RESET} {truncate_with_ellipsis(args, 100)}"


def format_tool_output(tool_name: str, output: str, success: bool) -> str:
    if success:
        status = f"{Colors.GREEN}ok{Colors.RESET}"
    else:
        status = f"{Colors.RED}failed{Colors.RESET}"
    body = clip_lines(output) if output else ""
    return f"  {tool_name} {status}" + (f"\n{Colors.DIM}{body}{Colors.RESET}" if body else "")


def format_intermediate(text: str) -> str:
    """Model thinking printed between tool rounds"""
    return f"{Colors.DIM}{text}{Colors.RESET}"
