"""Fixed locations inside a novel workspace."""

from __future__ import annotations

__all__ = [
    "NOVEL_DIR",
    "CACHE_DIR",
    "SETTINGS_DIR",
    "LOGS_DIR",
    "CONCEPT_INDEX_PATH",
    "OUTLINE_PATH",
    "MEMORY_PATH",
    "CHARACTERS_PATH",
    "RELATIONS_PATH",
    "PROJECT_SETTINGS_PATH",
    "CONCEPT_DIR",
    "RESERVED_DOCUMENT_DIRS",
    "DOCUMENT_EXTENSION",
]

NOVEL_DIR = ".novel"
CACHE_DIR = f"{NOVEL_DIR}/.cache"
SETTINGS_DIR = f"{NOVEL_DIR}/.settings"
LOGS_DIR = f"{NOVEL_DIR}/.logs"

CONCEPT_INDEX_PATH = f"{CACHE_DIR}/concept_index.json"
OUTLINE_PATH = f"{CACHE_DIR}/outline.json"
MEMORY_PATH = f"{CACHE_DIR}/agent_memory.json"
CHARACTERS_PATH = f"{CACHE_DIR}/characters.json"
RELATIONS_PATH = f"{CACHE_DIR}/relations.json"
PROJECT_SETTINGS_PATH = f"{SETTINGS_DIR}/project.json"

CONCEPT_DIR = "concept"
RESERVED_DOCUMENT_DIRS: tuple[str, ...] = (CONCEPT_DIR, "outline", "stories")
DOCUMENT_EXTENSION = ".md"
