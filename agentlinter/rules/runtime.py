"""Runtime config security rules."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from agentlinter.files import FileRecord
from agentlinter.rules.base import WORKSPACE_FILE, Diagnostic, DiagnosticReporter
from agentlinter.runtime_config import (
    ConfigProvider,
    find_runtime_config,
    find_runtime_config_file,
    get_nested_value,
    parse_json_object,
)

LOOPBACK_BINDS = {"loopback", "localhost", "127.0.0.1", "::1"}
DISABLED_AUTH_MODES = {"off", "none"}
OPEN_GROUP_POLICIES = {"open", "any"}
SENSITIVE_KEYS = ("password", "secret", "apikey", "api_key", "privatekey", "private_key", "token")
MODE_VALUES = {"token", "password", "off", "none", "pairing", "allowlist", "open"}


class _ConfigRule:
    """Shared provider wiring for config-dependent rules."""

    def __init__(self, provider: ConfigProvider | None = None) -> None:
        self._provider = provider or find_runtime_config


class ConfigExistsRule:
    """Agent runtime config file should exist for full analysis."""

    rule_id = "runtime/config-exists"
    severity = "info"

    def check(self, files: Sequence[FileRecord], report: DiagnosticReporter) -> list[Diagnostic]:
        if find_runtime_config_file(files) is not None:
            return []
        return [
            report(
                WORKSPACE_FILE,
                "No runtime config (clawdbot.json / openclaw.json) found. Runtime checks skipped.",
                fix=(
                    "If using Clawdbot/OpenClaw, ensure clawdbot.json exists in "
                    "~/.clawdbot/ or project root."
                ),
            )
        ]


class ConfigParseRule:
    """Runtime config must be a valid JSON object."""

    rule_id = "runtime/config-parse"
    severity = "info"

    def check(self, files: Sequence[FileRecord], report: DiagnosticReporter) -> list[Diagnostic]:
        config_file = find_runtime_config_file(files)
        if config_file is None or parse_json_object(config_file.content) is not None:
            return []
        return [
            report(
                config_file.name,
                "Runtime config is not a valid JSON object. Runtime checks skipped.",
                fix="Fix the JSON syntax so runtime settings can be analyzed.",
            )
        ]


class GatewayBindRule(_ConfigRule):
    """Gateway must bind to loopback (localhost) only."""

    rule_id = "runtime/gateway-bind"
    severity = "error"

    def check(self, files: Sequence[FileRecord], report: DiagnosticReporter) -> list[Diagnostic]:
        config = self._provider(files)
        if config is None:
            return []
        bind = get_nested_value(config.document, "gateway.bind")
        if not isinstance(bind, str) or not bind or bind in LOOPBACK_BINDS:
            return []
        return [
            report(
                config.source,
                f'Gateway bind is "{bind}" and exposes the agent to the network. '
                "Must be loopback.",
                fix='Set gateway.bind to "loopback" or remove the key (default is loopback).',
            )
        ]


class AuthModeRule(_ConfigRule):
    """Gateway authentication must be enabled."""

    rule_id = "runtime/auth-mode"
    severity = "error"

    def check(self, files: Sequence[FileRecord], report: DiagnosticReporter) -> list[Diagnostic]:
        config = self._provider(files)
        if config is None:
            return []
        auth_mode = get_nested_value(config.document, "gateway.auth.mode")
        if auth_mode not in DISABLED_AUTH_MODES:
            return []
        return [
            report(
                config.source,
                f'Auth mode is "{auth_mode}": anyone who can reach the gateway '
                "can control your agent.",
                fix='Set gateway.auth.mode to "token" and configure a strong token.',
            )
        ]


class TokenStrengthRule(_ConfigRule):
    """Gateway auth token should be at least 32 characters."""

    rule_id = "runtime/token-strength"
    severity = "warning"

    def check(self, files: Sequence[FileRecord], report: DiagnosticReporter) -> list[Diagnostic]:
        config = self._provider(files)
        if config is None:
            return []
        # Password lengths are user-chosen; only tokens are judged.
        if get_nested_value(config.document, "gateway.auth.mode") == "password":
            return []

        token = get_nested_value(config.document, "gateway.auth.token")
        if not isinstance(token, str) or not token or token.startswith("$"):
            return []
        if len(token) < 16:
            return [
                report(
                    config.source,
                    f"Auth token is only {len(token)} characters and vulnerable to brute-force.",
                    fix="Use a token of at least 32 characters. "
                    "Generate one with: openssl rand -hex 32",
                    severity="error",
                )
            ]
        if len(token) < 32:
            return [
                report(
                    config.source,
                    f"Auth token is {len(token)} characters; consider using 32+.",
                    fix="Generate a stronger token: openssl rand -hex 32",
                )
            ]
        return []


class DmPolicyRule(_ConfigRule):
    """Open DM policy should have allowFrom restrictions."""

    rule_id = "runtime/dm-policy"
    severity = "warning"

    def check(self, files: Sequence[FileRecord], report: DiagnosticReporter) -> list[Diagnostic]:
        config = self._provider(files)
        if config is None:
            return []
        diagnostics: list[Diagnostic] = []
        for name, channel in _channels(config.document):
            allow_from = channel.get("allowFrom")
            if channel.get("dmPolicy") == "open" and not allow_from:
                diagnostics.append(
                    report(
                        config.source,
                        f'Channel "{name}": DM policy is "open" with no allowFrom, '
                        "so anyone can command your agent.",
                        fix='Add allowFrom with authorized user IDs, or set dmPolicy to "pairing".',
                    )
                )
        return diagnostics


class GroupPolicyRule(_ConfigRule):
    """Group policy should use allowlist."""

    rule_id = "runtime/group-policy"
    severity = "warning"

    def check(self, files: Sequence[FileRecord], report: DiagnosticReporter) -> list[Diagnostic]:
        config = self._provider(files)
        if config is None:
            return []
        diagnostics: list[Diagnostic] = []
        for name, channel in _channels(config.document):
            group_policy = channel.get("groupPolicy")
            if group_policy in OPEN_GROUP_POLICIES:
                diagnostics.append(
                    report(
                        config.source,
                        f'Channel "{name}": Group policy is "{group_policy}", '
                        "so any group can trigger your agent.",
                        fix='Set groupPolicy to "allowlist" and define allowed groups.',
                    )
                )
        return diagnostics


class ConfigSecretsRule(_ConfigRule):
    """Config should use env var references instead of plaintext secrets."""

    rule_id = "runtime/config-secrets"
    severity = "warning"

    def check(self, files: Sequence[FileRecord], report: DiagnosticReporter) -> list[Diagnostic]:
        config = self._provider(files)
        if config is None:
            return []
        diagnostics: list[Diagnostic] = []
        for key_path, key in _plaintext_secrets(config.document, prefix=""):
            diagnostics.append(
                report(
                    config.source,
                    f'Plaintext secret at "{key_path}": use an environment variable '
                    "reference instead.",
                    fix=f'Replace with "${{{key.upper()}}}" and set the env var.',
                )
            )
        return diagnostics


def _channels(document: dict[str, Any]) -> list[tuple[str, dict[str, Any]]]:
    channels = get_nested_value(document, "channels")
    if not isinstance(channels, dict):
        return []
    return [(str(name), value) for name, value in channels.items() if isinstance(value, dict)]


def _plaintext_secrets(value: Any, *, prefix: str) -> list[tuple[str, str]]:
    if not isinstance(value, dict):
        return []
    hits: list[tuple[str, str]] = []
    for key, item in value.items():
        key_path = f"{prefix}.{key}" if prefix else str(key)
        if isinstance(item, str):
            if not item or item.startswith("$") or item in MODE_VALUES:
                continue
            lowered = str(key).lower()
            if any(token in lowered for token in SENSITIVE_KEYS):
                hits.append((key_path, str(key)))
        elif isinstance(item, dict):
            hits.extend(_plaintext_secrets(item, prefix=key_path))
        elif isinstance(item, list):
            for index, entry in enumerate(item):
                hits.extend(_plaintext_secrets(entry, prefix=f"{key_path}.{index}"))
    return hits
