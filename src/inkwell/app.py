"""Command-line entry point for Inkwell workspaces and the writing agent."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import os
import sys
from dataclasses import asdict
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Sequence, TextIO, get_args, get_origin, get_type_hints

from .ai.ai_types import AgentConfig
from .ai.client import AIClient, ClientSettings
from .ai.orchestration import AgentRunResult, AgentRuntime, Message
from .errors import ModelInvocationError, ToolError
from .services.settings import Settings, SettingsStore, redact_secret
from .utils import logging as logging_utils
from .utils.telemetry import workspace_telemetry
from .workspace.service import FsEntry, WorkspaceService, normalize_plaintext

_TRUE_VALUES = {"1", "true", "yes", "on", "debug"}
_FALSE_VALUES = {"0", "false", "no", "off", "disabled"}
_LOGGER = logging.getLogger(__name__)


def configure_logging(debug: bool = False, *, console: bool | None = None, force: bool = False) -> Path:
    """Configure logging for the CLI; console output only in debug mode by default."""

    level = logging.DEBUG if debug else logging.INFO
    log_path = logging_utils.setup_logging(level, console=debug if console is None else console, force=force)
    _LOGGER.debug("Logging configured (level=%s)", logging.getLevelName(level))
    return log_path


def load_settings(
    path: Optional[Path] = None,
    *,
    store: SettingsStore | None = None,
    overrides: Mapping[str, Any] | None = None,
) -> Settings:
    """Load persisted settings or fall back to defaults."""

    active_store = store or SettingsStore(path)
    try:
        return active_store.load(overrides=overrides)
    except (OSError, ValueError) as exc:
        _LOGGER.warning("Failed to load settings from %s: %s", active_store.path, exc)
        return Settings()


def build_client_settings(settings: Settings) -> ClientSettings:
    return ClientSettings(
        base_url=settings.base_url,
        api_key=settings.api_key,
        model=settings.model,
        temperature=settings.temperature,
        max_tokens=settings.max_tokens,
        request_timeout=settings.request_timeout,
        max_retries=settings.max_retries,
        retry_min_seconds=settings.retry_min_seconds,
        retry_max_seconds=settings.retry_max_seconds,
        debug_logging=settings.debug_logging,
    )


def build_agent_config(settings: Settings) -> AgentConfig:
    return AgentConfig(
        max_steps=settings.max_steps,
        memory_render_limit=settings.memory_render_limit,
        memory_search_limit=settings.memory_search_limit,
    ).clamp()


def main(argv: Sequence[str] | None = None, *, client: AIClient | None = None) -> int:
    """Run the ``inkwell`` command and return its exit code."""

    parser = _build_parser()
    args = parser.parse_args(argv)
    try:
        overrides = _coerce_cli_overrides(args.overrides)
    except ValueError as exc:
        parser.error(str(exc))

    store = SettingsStore(Path(args.settings).expanduser() if args.settings else None)
    settings = load_settings(store=store, overrides=overrides)
    configure_logging(args.debug or settings.debug_logging)

    if args.command == "settings":
        return _cmd_settings(settings, store, overrides=overrides)
    try:
        workspace = WorkspaceService(args.workspace)
        if args.command == "init":
            return _cmd_init(workspace)
        if args.command == "tree":
            return _cmd_tree(workspace, args.depth)
        if args.command == "check-outline":
            return _cmd_check_outline(workspace)
        return asyncio.run(_cmd_chat(workspace, settings, args.prompt, args.system, client=client))
    except ToolError as exc:
        print(f"error: {exc.message}", file=sys.stderr)
        return 2


# ------------------------------------------------------------------
# Commands
# ------------------------------------------------------------------
def _cmd_settings(
    settings: Settings,
    store: SettingsStore,
    *,
    overrides: Mapping[str, Any],
    stream: TextIO | None = None,
) -> int:
    destination = stream or sys.stdout
    payload = asdict(settings)
    payload["api_key"] = redact_secret(settings.api_key)
    metadata = {
        "path": str(store.path),
        "secret_backend": store.vault.strategy,
        "cli_overrides": sorted(overrides),
        "environment_variables": sorted(name for name in os.environ if name.startswith("INKWELL_")),
    }
    json.dump({"settings": payload, "meta": metadata}, destination, indent=2)
    destination.write("\n")
    return 0


def _cmd_init(workspace: WorkspaceService) -> int:
    created = workspace.init_novel()
    for relative in created:
        print(f"created {relative}")
    if not created:
        print("workspace already initialised")
    return 0


def _cmd_tree(workspace: WorkspaceService, depth: int, *, stream: TextIO | None = None) -> int:
    destination = stream or sys.stdout
    _print_tree(workspace.list_tree(depth), destination)
    return 0


def _cmd_check_outline(workspace: WorkspaceService) -> int:
    issues = workspace.check_outline()
    for issue in issues:
        print(f"{issue.severity}: {issue.path}: [{issue.code}] {issue.message}")
    if not issues:
        print("outline ok")
    return 1 if issues else 0


async def _cmd_chat(
    workspace: WorkspaceService,
    settings: Settings,
    prompt: str,
    system_prompt: str | None,
    *,
    client: AIClient | None = None,
) -> int:
    active_client = client or AIClient(build_client_settings(settings))
    root = workspace.root
    runtime = AgentRuntime(
        root,
        config=build_agent_config(settings),
        telemetry=workspace_telemetry(root, enabled=settings.telemetry_enabled),
    )
    try:
        result = await runtime.run(
            [Message.user(prompt)],
            active_client.invoker(),
            system_prompt=system_prompt if system_prompt is not None else settings.agent_system_prompt,
        )
    except ModelInvocationError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    finally:
        if client is None:
            await active_client.aclose()
    _emit_answer(result, markdown=settings.markdown_output)
    return 0


def _emit_answer(result: AgentRunResult, *, markdown: bool) -> None:
    text = result.text if markdown else normalize_plaintext(result.text)
    print(text)
    print(json.dumps({"outcome": result.outcome, **result.perf.to_dict()}), file=sys.stderr)


def _print_tree(entry: FsEntry, stream: TextIO, depth: int = 0) -> None:
    suffix = "/" if entry.kind == "dir" else ""
    stream.write(f"{'  ' * depth}{entry.name}{suffix}\n")
    for child in entry.children:
        _print_tree(child, stream, depth + 1)


# ------------------------------------------------------------------
# Argument parsing
# ------------------------------------------------------------------
def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="inkwell",
        description="Manage novel workspaces and run the sandboxed writing agent.",
    )
    parser.add_argument("--settings", metavar="PATH", help="Override the default ~/.inkwell/settings.json path.")
    parser.add_argument(
        "--set",
        dest="overrides",
        metavar="KEY=VALUE",
        action="append",
        default=[],
        help="Override persisted settings for this run (repeatable).",
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging on the console.")
    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("settings", help="Print the effective settings with the API key redacted.")

    init = commands.add_parser("init", help="Create the .novel folders and default documents.")
    init.add_argument("workspace")

    tree = commands.add_parser("tree", help="Print the workspace tree.")
    tree.add_argument("workspace")
    tree.add_argument("--depth", type=int, default=4)

    check = commands.add_parser("check-outline", help="Report timeline conflicts in the outline.")
    check.add_argument("workspace")

    chat = commands.add_parser("chat", help="Run the agent on one prompt.")
    chat.add_argument("workspace")
    chat.add_argument("prompt")
    chat.add_argument("--system", default=None, help="Agent system prompt for this run.")
    return parser


def _coerce_cli_overrides(items: Sequence[str]) -> Dict[str, Any]:
    overrides: Dict[str, Any] = {}
    if not items:
        return overrides

    fields = Settings.__dataclass_fields__  # type: ignore[attr-defined]
    type_hints = get_type_hints(Settings)
    for entry in items:
        if "=" not in entry:
            raise ValueError(f"Override '{entry}' must use KEY=VALUE syntax.")
        key, raw_value = entry.split("=", 1)
        key = key.strip()
        if not key:
            raise ValueError("Override is missing a field name.")
        if key not in fields:
            raise ValueError(f"Unknown setting '{key}'.")
        annotation = type_hints.get(key, fields[key].type)
        overrides[key] = _coerce_value(annotation, raw_value.strip())
    return overrides


def _coerce_value(annotation: Any, raw_value: str) -> Any:
    optional = type(None) in get_args(annotation)
    target = _resolve_annotation(annotation)
    normalized = raw_value.strip()

    if optional and normalized.lower() in {"none", "null"}:
        return None
    if target is bool:
        return _parse_bool(normalized)
    if target is int:
        return int(normalized, 10)
    if target is float:
        return float(normalized)
    return normalized


def _resolve_annotation(annotation: Any) -> Any:
    if get_origin(annotation) is None:
        return annotation
    args = [arg for arg in get_args(annotation) if arg is not type(None)]
    return args[0] if args else annotation


def _parse_bool(value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ValueError(f"Cannot coerce '{value}' to a boolean.")


if __name__ == "__main__":  # pragma: no cover - manual invocation
    sys.exit(main())
