"""Configuration loading for agentlinter."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

CONFIG_FILENAMES = (".agentlinter.toml", "agentlinter.toml")
PYPROJECT_FILENAME = "pyproject.toml"
PYPROJECT_TOOL_KEYS = ("agentlinter", "agent-linter")

FAIL_ON_CHOICES = {"suspicious", "dangerous", "malicious"}


@dataclass(slots=True)
class AuditConfig:
    """Skill-folder audit controls for the ``score`` command."""

    enabled: bool = True
    fail_on: str | None = None
    skill_dirs: list[str] = field(default_factory=list)
    include_home: bool = False
    max_workers: int = 4

    def to_dict(self) -> dict[str, Any]:
        return {
            "enabled": self.enabled,
            "fail_on": self.fail_on,
            "skill_dirs": list(self.skill_dirs),
            "include_home": self.include_home,
            "max_workers": self.max_workers,
        }


@dataclass(slots=True)
class AppConfig:
    """Runtime configuration values resolved from project files."""

    format: str = "human"
    fail_below: int | None = None
    rule_enable: list[str] | None = None
    rule_disable: list[str] = field(default_factory=list)
    audit: AuditConfig = field(default_factory=AuditConfig)
    source: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "format": self.format,
            "fail_below": self.fail_below,
            "rules": {
                "enable": list(self.rule_enable) if self.rule_enable is not None else None,
                "disable": list(self.rule_disable),
            },
            "audit": self.audit.to_dict(),
            "source": self.source,
        }


def load_app_config(root: Path, config_path: Path | None = None) -> AppConfig:
    """Load config from explicit path or workspace-local files with precedence."""
    root = root.resolve()
    if config_path is not None:
        resolved = config_path if config_path.is_absolute() else (root / config_path)
        if not resolved.exists():
            raise ValueError(f"Config file does not exist: {resolved}")
        mapping = _extract_config_mapping(_load_toml(resolved), source_path=resolved)
        return _from_mapping(mapping, source=str(resolved))

    for filename in CONFIG_FILENAMES:
        resolved = root / filename
        if resolved.exists():
            mapping = _extract_config_mapping(_load_toml(resolved), source_path=resolved)
            return _from_mapping(mapping, source=str(resolved))

    pyproject_path = root / PYPROJECT_FILENAME
    if pyproject_path.exists():
        mapping = _extract_config_mapping(_load_toml(pyproject_path), source_path=pyproject_path)
        if mapping:
            return _from_mapping(mapping, source=str(pyproject_path))

    return AppConfig()


def default_config_template() -> str:
    """Return a starter config template."""
    return "\n".join(
        [
            'format = "human"',
            "fail_below = 70",
            "",
            "[rules]",
            '# enable = ["security/plaintext-secrets", "runtime/gateway-bind"]',
            'disable = ["clarity/long-lines"]',
            "",
            "[audit]",
            "enabled = true",
            'fail_on = "dangerous"',
            'skill_dirs = ["vendor/skills"]',
            "include_home = false",
            "max_workers = 4",
            "",
        ]
    )


def _load_toml(path: Path) -> dict[str, Any]:
    try:
        with path.open("rb") as file_obj:
            loaded = tomllib.load(file_obj)
    except tomllib.TOMLDecodeError as exc:
        raise ValueError(f"Invalid TOML in {path}: {exc}") from exc
    if not isinstance(loaded, dict):
        return {}
    return loaded


def _extract_config_mapping(loaded: dict[str, Any], *, source_path: Path) -> dict[str, Any]:
    if source_path.name == PYPROJECT_FILENAME:
        section = _find_pyproject_tool_section(loaded)
        return section if section is not None else {}

    tool_section = _find_pyproject_tool_section(loaded)
    if tool_section is not None:
        return tool_section
    return loaded


def _find_pyproject_tool_section(loaded: dict[str, Any]) -> dict[str, Any] | None:
    tool = loaded.get("tool")
    if not isinstance(tool, dict):
        return None
    for key in PYPROJECT_TOOL_KEYS:
        section = tool.get(key)
        if isinstance(section, dict):
            return section
    return None


def _from_mapping(mapping: dict[str, Any], *, source: str) -> AppConfig:
    rules_mapping = _as_table(mapping.get("rules"), "rules")
    audit_mapping = _as_table(mapping.get("audit"), "audit")

    raw_format = mapping.get("format", "human")
    format_value = str(raw_format).lower()
    if format_value not in {"human", "json"}:
        format_value = "human"

    raw_fail = mapping.get("fail_below")
    fail_value = None if raw_fail is None else _as_int(raw_fail, "fail_below")

    return AppConfig(
        format=format_value,
        fail_below=fail_value,
        rule_enable=_as_str_list_or_none(rules_mapping.get("enable")),
        rule_disable=_as_str_list(rules_mapping.get("disable")),
        audit=_parse_audit_config(audit_mapping),
        source=source,
    )


def _parse_audit_config(value: dict[str, Any]) -> AuditConfig:
    raw_fail_on = value.get("fail_on")
    fail_on = (
        None if raw_fail_on is None else _as_choice(raw_fail_on, FAIL_ON_CHOICES, "audit.fail_on")
    )
    max_workers = _as_int(value.get("max_workers", 4), "audit.max_workers")
    if max_workers <= 0:
        raise ValueError("audit.max_workers must be > 0")
    return AuditConfig(
        enabled=_as_bool(value.get("enabled", True), "audit.enabled"),
        fail_on=fail_on,
        skill_dirs=_as_str_list(value.get("skill_dirs")),
        include_home=_as_bool(value.get("include_home", False), "audit.include_home"),
        max_workers=max_workers,
    )


def _as_table(value: Any, field_name: str) -> dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ValueError(f"{field_name} must be a table/object")
    return value


def _as_str_list(value: Any) -> list[str]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise ValueError("Expected a list of strings")
    items: list[str] = []
    for item in value:
        if not isinstance(item, str):
            raise ValueError("Expected a list of strings")
        items.append(item)
    return items


def _as_str_list_or_none(value: Any) -> list[str] | None:
    if value is None:
        return None
    return _as_str_list(value)


def _as_choice(raw: Any, allowed: set[str], field_name: str) -> str:
    value = str(raw).lower()
    if value not in allowed:
        choices = ", ".join(sorted(allowed))
        raise ValueError(f"{field_name} must be one of: {choices}")
    return value


def _as_int(raw: Any, field_name: str) -> int:
    if isinstance(raw, bool) or not isinstance(raw, int):
        raise ValueError(f"{field_name} must be an integer")
    return raw


def _as_bool(raw: Any, field_name: str) -> bool:
    if not isinstance(raw, bool):
        raise ValueError(f"{field_name} must be a boolean")
    return raw
