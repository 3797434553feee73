"""Agent runtime config lookup (clawdbot.json / openclaw.json)."""

from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, Protocol

from agentlinter.files import FileRecord

logger = logging.getLogger(__name__)

RUNTIME_CONFIG_NAMES = ("clawdbot.json", "openclaw.json", ".clawdbot/clawdbot.json")


@dataclass(frozen=True, slots=True)
class RuntimeConfig:
    """A parsed runtime config document and the file it came from."""

    document: dict[str, Any]
    source: str


class ConfigProvider(Protocol):
    """Resolves the runtime config for a file set, if any."""

    def __call__(self, files: Sequence[FileRecord]) -> RuntimeConfig | None: ...


def find_runtime_config_file(files: Sequence[FileRecord]) -> FileRecord | None:
    for item in files:
        if item.name in RUNTIME_CONFIG_NAMES or item.path in RUNTIME_CONFIG_NAMES:
            return item
    return None


def find_runtime_config(files: Sequence[FileRecord]) -> RuntimeConfig | None:
    """Return the parsed runtime config, or None when absent or unparseable."""
    config_file = find_runtime_config_file(files)
    if config_file is None:
        return None
    document = parse_json_object(config_file.content)
    if document is None:
        logger.debug("Runtime config %s is not a JSON object", config_file.name)
        return None
    return RuntimeConfig(document=document, source=config_file.name)


def parse_json_object(content: str) -> dict[str, Any] | None:
    try:
        loaded = json.loads(content)
    except ValueError:
        return None
    if not isinstance(loaded, dict):
        return None
    return loaded


def get_nested_value(document: Any, path: str) -> Any:
    """Look up a dot-separated path; None at the first missing or non-object segment."""
    head, _, rest = path.partition(".")
    if not isinstance(document, dict):
        return None
    value = document.get(head)
    if not rest:
        return value
    return get_nested_value(value, rest)
