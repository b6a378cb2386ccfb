"""Workspace consistency layer: sandboxing, concept index and outline checks."""

from .concept_index import ConceptIndex, ConceptIndexEntry, ConceptIndexStore, update_concept_index
from .outline import Outline, OutlineConflictChecker, TimelineEvent, parse_outline, validate_outline
from .sandbox import PathSandbox, ToolContext, validate_relative_path
from .service import FsEntry, ValidationIssue, WorkspaceInfo, WorkspaceService, normalize_plaintext, write_document

__all__ = [
    "ConceptIndex",
    "ConceptIndexEntry",
    "ConceptIndexStore",
    "FsEntry",
    "Outline",
    "OutlineConflictChecker",
    "PathSandbox",
    "TimelineEvent",
    "ToolContext",
    "ValidationIssue",
    "WorkspaceInfo",
    "WorkspaceService",
    "normalize_plaintext",
    "parse_outline",
    "update_concept_index",
    "validate_outline",
    "validate_relative_path",
    "write_document",
]
