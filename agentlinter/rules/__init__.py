"""Rules package."""

from collections.abc import Callable
from dataclasses import dataclass

from agentlinter.rules.base import (
    CATEGORIES,
    Category,
    Diagnostic,
    RegisteredRule,
    Rule,
    RuleImpl,
    Severity,
    register,
)
from agentlinter.rules.clarity import LongLinesRule, NegationHeavyRule, VagueLanguageRule
from agentlinter.rules.completeness import CommandsRule, MainFileRule, ProjectOverviewRule
from agentlinter.rules.consistency import ConflictingLanguageRule, DuplicateHeadingsRule
from agentlinter.rules.memory import MemoryFileExistsRule, MemorySizeRule
from agentlinter.rules.runtime import (
    AuthModeRule,
    ConfigExistsRule,
    ConfigParseRule,
    ConfigSecretsRule,
    DmPolicyRule,
    GatewayBindRule,
    GroupPolicyRule,
    TokenStrengthRule,
)
from agentlinter.rules.security import (
    InjectionGuardRule,
    PermissionBypassRule,
    PlaintextSecretsRule,
)
from agentlinter.rules.skill_safety import SkillAuditRule
from agentlinter.rules.structure import (
    EmptySectionRule,
    FileLengthRule,
    HasHeadingsRule,
    HeadingHierarchyRule,
)

__all__ = [
    "Diagnostic",
    "RegisteredRule",
    "Rule",
    "RuleInfo",
    "build_rules",
    "default_rules",
    "list_rule_info",
    "rules_by_category",
]


@dataclass(frozen=True, slots=True)
class RuleInfo:
    """Rule metadata for listing and selection."""

    rule_id: str
    name: str
    description: str
    category: Category
    severity: Severity


@dataclass(frozen=True, slots=True)
class _RuleSpec:
    rule_id: str
    factory: Callable[[], RuleImpl]
    name: str
    description: str
    category: Category
    severity: Severity


def default_rules() -> list[RegisteredRule]:
    """Return every registered rule."""
    return build_rules()


def build_rules(
    *,
    enabled_rule_ids: list[str] | None = None,
    disabled_rule_ids: list[str] | None = None,
) -> list[RegisteredRule]:
    """Build registered rules applying enable/disable filters."""
    specs = _ordered_rule_specs()
    registry = {spec.rule_id: spec for spec in specs}
    disabled_set = set(disabled_rule_ids or [])
    requested_ids = set(enabled_rule_ids or []) | disabled_set

    unknown = [rule_id for rule_id in requested_ids if rule_id not in registry]
    if unknown:
        joined = ", ".join(sorted(unknown))
        raise ValueError(f"Unknown rule ids: {joined}")

    if enabled_rule_ids is None:
        selected_ids = [spec.rule_id for spec in specs if spec.rule_id not in disabled_set]
    else:
        selected_ids = [
            rule_id for rule_id in _dedupe(enabled_rule_ids) if rule_id not in disabled_set
        ]

    built: list[RegisteredRule] = []
    for rule_id in selected_ids:
        spec = registry[rule_id]
        built.append(register(spec.factory(), category=spec.category))
    return built


def list_rule_info() -> list[RuleInfo]:
    """Return metadata for all known rules."""
    return [
        RuleInfo(
            rule_id=spec.rule_id,
            name=spec.name,
            description=spec.description,
            category=spec.category,
            severity=spec.severity,
        )
        for spec in _ordered_rule_specs()
    ]


def rules_by_category(rules: list[Rule]) -> dict[Category, list[Rule]]:
    """Group rules under every fixed category, including empty ones."""
    grouped: dict[Category, list[Rule]] = {category: [] for category in CATEGORIES}
    for rule in rules:
        grouped.setdefault(rule.category, []).append(rule)
    return grouped


def _ordered_rule_specs() -> list[_RuleSpec]:
    return [
        _spec(HasHeadingsRule, category="structure"),
        _spec(HeadingHierarchyRule, category="structure"),
        _spec(EmptySectionRule, category="structure"),
        _spec(FileLengthRule, category="structure"),
        _spec(VagueLanguageRule, category="clarity"),
        _spec(NegationHeavyRule, category="clarity"),
        _spec(LongLinesRule, category="clarity"),
        _spec(MainFileRule, category="completeness"),
        _spec(ProjectOverviewRule, category="completeness"),
        _spec(CommandsRule, category="completeness"),
        _spec(PlaintextSecretsRule, category="security"),
        _spec(PermissionBypassRule, category="security"),
        _spec(InjectionGuardRule, category="security"),
        _spec(ConflictingLanguageRule, category="consistency"),
        _spec(DuplicateHeadingsRule, category="consistency"),
        _spec(MemoryFileExistsRule, category="memory"),
        _spec(MemorySizeRule, category="memory"),
        _spec(ConfigExistsRule, category="runtime"),
        _spec(ConfigParseRule, category="runtime"),
        _spec(GatewayBindRule, category="runtime"),
        _spec(AuthModeRule, category="runtime"),
        _spec(TokenStrengthRule, category="runtime"),
        _spec(DmPolicyRule, category="runtime"),
        _spec(GroupPolicyRule, category="runtime"),
        _spec(ConfigSecretsRule, category="runtime"),
        _spec(SkillAuditRule, category="skillSafety"),
    ]


def _spec(rule_cls: type[RuleImpl], *, category: Category) -> _RuleSpec:
    return _RuleSpec(
        rule_id=rule_cls.rule_id,
        factory=rule_cls,
        name=rule_cls.__name__,
        description=(rule_cls.__doc__ or "").strip(),
        category=category,
        severity=rule_cls.severity,
    )


def _dedupe(items: list[str]) -> list[str]:
    seen: set[str] = set()
    output: list[str] = []
    for item in items:
        if item in seen:
            continue
        seen.add(item)
        output.append(item)
    return output
