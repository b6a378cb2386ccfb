"""Step-budgeted ReAct loop driving the sandboxed tools.

One :class:`AgentRuntime` serves one generation request. The model capability
is the only suspension point; tools run synchronously between model calls and
at most one tool call is executed per turn.
"""

from __future__ import annotations

import json
import logging
import time
from pathlib import Path
from typing import Any, Iterable, Mapping, Sequence

from ...errors import ModelInvocationError
from ...utils.telemetry import TelemetryClient
from ...workspace.sandbox import ToolContext
from ..ai_types import AgentConfig, ModelInvoker
from ..memory import MemoryStore
from ..prompts import build_system_prompt, format_observation
from ..tools.base import BaseTool, ToolResult
from ..tools.filesystem import default_tools
from ..tools.memory import MemorySearchTool, MemoryUpsertTool
from ..tools.registry import ToolRegistry
from .tool_call_parser import parse_tool_call
from .types import AgentPerf, AgentRunResult, AgentState, Message, ParsedToolCall, RunOutcome

__all__ = ["AgentRuntime"]

LOGGER = logging.getLogger(__name__)


class AgentRuntime:
    """Owns the tool registry and long-term memory for one workspace snapshot."""

    def __init__(
        self,
        workspace_root: Path | str,
        *,
        registry: ToolRegistry | None = None,
        memory: MemoryStore | None = None,
        config: AgentConfig | None = None,
        telemetry: TelemetryClient | None = None,
    ) -> None:
        root = Path(workspace_root)
        self._context = ToolContext(workspace_root=root)
        self._registry = registry if registry is not None else ToolRegistry(default_tools())
        self._memory = memory if memory is not None else MemoryStore.load(root)
        self._config = (config or AgentConfig()).clamp()
        self._telemetry = telemetry
        self._memory_tools: dict[str, BaseTool] = {
            tool.name: tool
            for tool in (
                MemoryUpsertTool(self._memory),
                MemorySearchTool(self._memory, default_limit=self._config.memory_search_limit),
            )
        }
        self.state = AgentState.DONE

    @property
    def context(self) -> ToolContext:
        return self._context

    @property
    def memory(self) -> MemoryStore:
        return self._memory

    @property
    def config(self) -> AgentConfig:
        return self._config

    @property
    def tools(self) -> list[str]:
        """Sorted names of every tool the model may call."""

        return [name for name, _ in self.catalogue()]

    def catalogue(self) -> list[tuple[str, str]]:
        """Sorted ``(name, description)`` pairs; memory tools shadow registry tools."""

        entries = dict(self._registry.describe())
        entries.update((name, tool.description) for name, tool in self._memory_tools.items())
        return sorted(entries.items())

    def build_system_message(self, system_prompt: str = "") -> Message:
        memory_text = self._memory.render(self._config.memory_render_limit)
        return Message.system(build_system_prompt(system_prompt, self.catalogue(), memory_text))

    async def run(
        self,
        history: Iterable[Message],
        invoke: ModelInvoker,
        *,
        system_prompt: str = "",
    ) -> AgentRunResult:
        """Run the loop until a tool-free answer or the step budget.

        Raises:
            ModelInvocationError: If ``invoke`` fails; no partial answer is returned.
        """

        perf = AgentPerf()
        messages: list[Message] = [self.build_system_message(system_prompt), *history]
        self.state = AgentState.THINKING

        while perf.steps < self._config.max_steps:
            perf.steps += 1
            output = await self._invoke(invoke, messages, perf)
            call = parse_tool_call(output)
            if call is None:
                messages.append(Message.assistant(output))
                return self._finish(output, perf, "answered", messages)

            self.state = AgentState.ACTION_PARSED
            LOGGER.debug("Step %s: tool %s", perf.steps, call.tool)
            started = time.perf_counter()
            result = self._dispatch(call)
            perf.tool_time += time.perf_counter() - started

            self.state = AgentState.OBSERVING
            messages.append(Message.assistant(output))
            messages.append(Message.user(format_observation(_render_observation(result))))
            self.state = AgentState.THINKING

        LOGGER.info("Step budget of %s reached", self._config.max_steps)
        return self._finish(_last_assistant_text(messages), perf, "budget_exhausted", messages)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    async def _invoke(self, invoke: ModelInvoker, messages: Sequence[Message], perf: AgentPerf) -> str:
        started = time.perf_counter()
        try:
            output = await invoke(list(messages))
        except ModelInvocationError:
            self._abort(perf)
            raise
        except Exception as exc:
            self._abort(perf)
            raise ModelInvocationError(f"model invocation failed: {exc}") from exc
        finally:
            perf.model_time += time.perf_counter() - started
        if not isinstance(output, str):
            self._abort(perf)
            raise ModelInvocationError(f"model returned {type(output).__name__} instead of text")
        return output

    def _dispatch(self, call: ParsedToolCall) -> ToolResult:
        args = call.args if isinstance(call.args, Mapping) else {}
        memory_tool = self._memory_tools.get(call.tool)
        if memory_tool is not None:
            return memory_tool.run(self._context, args)
        return self._registry.call(self._context, call.tool, args)

    def _abort(self, perf: AgentPerf) -> None:
        self.state = AgentState.DONE
        LOGGER.warning("Model invocation failed after %s step(s)", perf.steps)
        self._record(perf, "model_error")

    def _finish(
        self,
        text: str,
        perf: AgentPerf,
        outcome: RunOutcome,
        messages: Sequence[Message],
    ) -> AgentRunResult:
        self.state = AgentState.DONE
        LOGGER.info(
            "Agent run %s in %s step(s) (model %.0f ms, tools %.0f ms)",
            outcome,
            perf.steps,
            perf.model_time * 1000,
            perf.tool_time * 1000,
        )
        self._record(perf, outcome)
        return AgentRunResult(text=text, perf=perf, outcome=outcome, messages=tuple(messages))

    def _record(self, perf: AgentPerf, outcome: str) -> None:
        if self._telemetry is None:
            return
        try:
            self._telemetry.track_event("agent.run", outcome=outcome, **perf.to_dict())
            self._telemetry.flush()
        except OSError:
            LOGGER.debug("Failed to record telemetry for agent run", exc_info=True)


def _render_observation(result: ToolResult) -> str:
    return json.dumps(result.observation(), indent=2, ensure_ascii=False, default=str)


def _last_assistant_text(messages: Sequence[Message]) -> str:
    for message in reversed(messages):
        if message.role == "assistant":
            return message.content
    return ""
