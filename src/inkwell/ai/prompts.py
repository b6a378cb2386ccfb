"""Prompt templates for the ReAct agent."""

from __future__ import annotations

from typing import Sequence

__all__ = [
    "OBSERVATION_PREFIX",
    "build_system_prompt",
    "format_observation",
    "react_instructions",
    "sandbox_rules",
]

OBSERVATION_PREFIX = "OBSERVATION:"


def react_instructions(catalogue: Sequence[tuple[str, str]]) -> str:
    """Describe the tool catalogue and the ACTION/INPUT protocol.

    ``catalogue`` holds ``(name, description)`` pairs in the order they are
    listed; a blank description lists the name alone.
    """

    names = ", ".join(name for name, _ in catalogue)
    details = "\n".join(
        f"- {name}: {description}" if description else f"- {name}" for name, description in catalogue
    )
    return f"""Available tools: {names}
{details}

When you need a tool, reply using exactly this format:
ACTION: tool_name
INPUT: {{...json...}}
Then wait for the OBSERVATION. If no tool is needed, give the final answer directly."""


def sandbox_rules() -> str:
    return """File system rules:
1) Every path must be relative to the workspace; absolute paths and .. are rejected.
2) Writing a file never creates its parent directory. Check with fs_exists and create it with fs_create_dir first.
3) concept/, outline/ and stories/ only accept .md files."""


def build_system_prompt(
    agent_prompt: str,
    catalogue: Sequence[tuple[str, str]],
    memory_text: str = "",
) -> str:
    """Compose the leading system message of a run.

    Args:
        agent_prompt: Caller-supplied persona or task instructions.
        catalogue: Sorted ``(name, description)`` pairs of every callable tool.
        memory_text: Rendered long-term memory; omitted when blank.
    """

    sections = [agent_prompt.strip(), react_instructions(catalogue), sandbox_rules()]
    if memory_text.strip():
        sections.append(f"Long-term memory:\n{memory_text.strip()}")
    return "\n\n".join(section for section in sections if section)


def format_observation(payload_text: str) -> str:
    return f"{OBSERVATION_PREFIX}\n{payload_text}"
