"""Threat pattern corpora for skill-file audits.

Each pattern is an ordered series of fragments. A line matches when every
fragment is found in order, each one searched from where the previous one
ended. Fragments are kept free of open-ended wildcards, and any run inside a
fragment stops at the delimiter that opens the next candidate match, so a line
is scanned in time linear in its length.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Literal

AuditSeverity = Literal["CRITICAL", "WARNING", "INFO"]


@dataclass(frozen=True, slots=True)
class ThreatPattern:
    """A compiled multi-fragment pattern with a human label."""

    label: str
    fragments: tuple[re.Pattern[str], ...]
    subcategory: str | None = None

    def search(self, line: str) -> list[re.Match[str]] | None:
        """Return one match per fragment, or None when the line does not match."""
        matches: list[re.Match[str]] = []
        position = 0
        for fragment in self.fragments:
            match = fragment.search(line, position)
            if match is None:
                return None
            matches.append(match)
            position = match.end()
        return matches


@dataclass(frozen=True, slots=True)
class Corpus:
    """A named pattern family with its fixed report wording."""

    category: str
    severity: AuditSeverity
    message_prefix: str
    recommendation: str
    patterns: tuple[ThreatPattern, ...]


def _p(label: str, *fragments: str, subcategory: str | None = None) -> ThreatPattern:
    return ThreatPattern(
        label=label,
        fragments=tuple(re.compile(item, re.IGNORECASE) for item in fragments),
        subcategory=subcategory,
    )


REMOTE_FETCH = Corpus(
    category="Remote Fetch",
    severity="CRITICAL",
    message_prefix="Remote skill fetch detected",
    recommendation=(
        "Skills should not auto-update from external URLs. "
        "This enables supply chain attacks."
    ),
    patterns=(
        _p("curl download skill file", r"curl\s", r"-[so]\s", r"skill"),
        _p("curl fetch skill.md", r"curl\s", r"skill\.md"),
        _p("wget download skill", r"wget\s", r"skill"),
        _p("pipe curl to shell", r"curl\s", r"\|\s*(?:bash|sh|zsh)"),
        _p("pipe wget to shell", r"wget\s", r"-O\s*-\s*\|\s*(?:bash|sh)"),
        _p("fetch skill URL", r"fetch\s*\(\s*['\"`]https?://[^'\"`]+?skill"),
        _p("silent curl to home dir", r"curl\s+-s\s+https?://\S+\s+-o\s+~/"),
    ),
)

PREDICTABLE_KEY_STORAGE = Corpus(
    category="Predictable Key Storage",
    severity="CRITICAL",
    message_prefix="Predictable key storage path",
    recommendation=(
        "Storing keys at known paths enables mass exfiltration. "
        "Use randomized or user-controlled paths."
    ),
    patterns=(
        _p("~/.agents/*/vault/ path", r"~/\.agents/[^/]*/vault/"),
        _p("vault/private_key storage", r"vault/private_key"),
        _p("vault/seed_phrase storage", r"vault/seed_phrase"),
        _p("redirect key to agents dir", r">\s*~/\.agents/[^/]+/[^/]*key"),
        _p("echo private_key to file", r"echo\s", r"private_key", r">\s*~"),
        _p("echo seed to file", r"echo\s", r"seed", r">\s*~"),
        _p("generate key to predictable path", r"generate-private-key", r">\s*~"),
        _p("store key instruction", r"store", r"private", r"key", r"at\s"),
        _p("save key instruction", r"save", r"private", r"key", r"to\s"),
        _p("hardcoded private key pattern", r"0x[a-f0-9]{64}"),
    ),
)

MANDATORY_WALLET = Corpus(
    category="Mandatory Wallet Linking",
    severity="WARNING",
    message_prefix="Coerced wallet linking",
    recommendation=(
        "Wallet linking should always be optional. "
        "Mandatory linking is a red flag for credential harvesting."
    ),
    patterns=(
        _p("MANDATORY wallet", r"\bMANDATORY\b", r"wallet"),
        _p("wallet MANDATORY", r"wallet", r"\bMANDATORY\b"),
        _p("required link wallet", r"\brequired\b", r"link", r"wallet"),
        _p("must link wallet", r"\bmust\b", r"link", r"wallet"),
        _p("wallet required", r"wallet", r"\brequired\b"),
        _p(
            "cannot use without wallet",
            r"cannot\s+(?:post|like|follow)",
            r"without",
            r"wallet",
        ),
        _p("NOT optional coercion", r"\bNOT\s+optional\b"),
        _p("urgency coercion", r"Do\s+This\s+Immediately"),
        _p("first boot requirement", r"\bfirst\s+boot\b", r"required"),
    ),
)

# The first capture group across a pattern's fragments holds the rate.
SUSPICIOUS_RATE_LIMITS = Corpus(
    category="Suspicious Rate Limits",
    severity="WARNING",
    message_prefix="Unusually high rate limit",
    recommendation=(
        "High rate limits may indicate the skill is designed to weaponize "
        "agents for spam/engagement farming."
    ),
    patterns=(
        _p("high rate per minute", r"(?<!\d)(\d{4,})\s*(?:(?:/|per)\s*)?min"),
        _p("rate limit 1000+", r"rate", r"limit", r"(?<!\d)(\d{4,})"),
        _p("engagement rate", r"(?<!\d)(\d+)\s*(?:likes?|follows?|posts?)", r"min"),
    ),
)

AUTO_UPDATE = Corpus(
    category="Auto-Update Instructions",
    severity="CRITICAL",
    message_prefix="Auto-update mechanism",
    recommendation=(
        "Auto-updating skills can be weaponized at any time. "
        "Instructions can change without notice."
    ),
    patterns=(
        _p("cron job", r"\bcron"),
        _p("periodic schedule", r"every\s+\d+\s*(?:hour|minute|min|hr)"),
        _p("auto-refresh", r"auto[- ]?refresh"),
        _p("auto-update", r"auto[- ]?update"),
        _p("refresh every", r"refresh", r"every"),
        _p("update every", r"update", r"every"),
        _p("periodic fetch", r"periodic(?:ally)?\s+(?:fetch|update|download|refresh)"),
        _p("scheduled fetch", r"schedule", r"curl|wget|fetch"),
        _p("timed update", r"(?<!\d)\d+h?\s*(?:refresh|update)"),
    ),
)

IN_BAND_INJECTION = Corpus(
    category="In-Band Injection Fields",
    severity="WARNING",
    message_prefix="In-band injection vector",
    recommendation=(
        "Hidden fields in API responses can inject instructions. "
        "Agent cannot distinguish data from commands."
    ),
    patterns=(
        _p("_model_guide field", r"_model_guide"),
        _p("_hint field", r"_hint"),
        _p("_notice field", r"_notice"),
        _p("_instruction field", r"_instruction"),
        _p("_directive field", r"_directive"),
        _p("_system field", r"_system"),
        _p("in-band injection", r"in-band", r"instruction|prompt|injection"),
        _p(
            "response includes instructions",
            r"response",
            r"include",
            r"instruction|guide|hint",
        ),
    ),
)

EXFILTRATION = "exfiltration"

ADDITIONAL_RED_FLAGS = Corpus(
    category="Additional",
    severity="WARNING",
    message_prefix="Red flag",
    recommendation="Review this pattern carefully before installing.",
    patterns=(
        _p(
            "monetary incentive",
            r"\$\d+\s*(?:USDC|USD|ETH|reward|bonus)",
            subcategory="social-engineering",
        ),
        _p(
            "npx key generation",
            r"npx\s+[a-z-]+\s+generate",
            r"key",
            subcategory="supply-chain",
        ),
        _p("global npm install", r"npm\s+install", r"--global", subcategory="supply-chain"),
        _p("POST private key", r"POST", r"private_key", subcategory=EXFILTRATION),
        _p("POST seed phrase", r"POST", r"seed", subcategory=EXFILTRATION),
        _p("verify-wallet POST", r"verify[- ]?wallet", r"POST", subcategory=EXFILTRATION),
        _p("verify-key POST", r"verify[- ]?key", r"POST", subcategory=EXFILTRATION),
        _p("aggressive engagement", r"Follow\s+Aggressively", subcategory="spam"),
        _p("mass engagement", r"Like\s+Everything", subcategory="spam"),
        _p(
            "bulk engagement on signup",
            r"(?<!\d)\d{2,}\s+(?:follows?|likes?)",
            r"immediately",
            subcategory="spam",
        ),
    ),
)

SUBCATEGORY_RECOMMENDATIONS: dict[str, str] = {
    "social-engineering": "Monetary incentives can pressure users into unsafe actions.",
    "supply-chain": "Third-party package execution introduces additional attack vectors.",
    EXFILTRATION: "This pattern could exfiltrate sensitive data. Do NOT proceed.",
    "spam": "Aggressive engagement patterns weaponize your agent as a spam bot.",
}

CORPORA: tuple[Corpus, ...] = (
    REMOTE_FETCH,
    PREDICTABLE_KEY_STORAGE,
    MANDATORY_WALLET,
    SUSPICIOUS_RATE_LIMITS,
    AUTO_UPDATE,
    IN_BAND_INJECTION,
    ADDITIONAL_RED_FLAGS,
)


def recommendation_for(subcategory: str | None) -> str:
    if subcategory is None:
        return ADDITIONAL_RED_FLAGS.recommendation
    return SUBCATEGORY_RECOMMENDATIONS.get(subcategory, ADDITIONAL_RED_FLAGS.recommendation)
