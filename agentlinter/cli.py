"""CLI entrypoint for agentlinter."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Annotated, Any

import typer

from agentlinter import __version__
from agentlinter.config import AppConfig, default_config_template, load_app_config
from agentlinter.output import (
    audit_result_to_dict,
    lint_result_to_dict,
    render_audit_human,
    render_human,
    render_json,
    render_skills_summary,
)
from agentlinter.rules import RegisteredRule, build_rules, list_rule_info
from agentlinter.scoring import evaluate
from agentlinter.skill_audit import (
    VERDICTS,
    AuditResult,
    SkillSource,
    audit_skill_file,
    audit_skill_files,
)
from agentlinter.workspace import (
    WorkspaceError,
    discover_skill_sources,
    read_text,
    scan_workspace,
)

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="agentlinter",
    no_args_is_help=True,
    help="Score agent instruction workspaces and audit skill files.",
)

AuditedFolder = tuple[str, list[tuple[SkillSource, AuditResult]]]


def version_callback(value: bool) -> None:
    """Print version and exit when --version is provided."""
    if value:
        typer.echo(__version__)
        raise typer.Exit()


@app.callback()
def main_callback(
    version: Annotated[
        bool,
        typer.Option("--version", help="Show version and exit.", callback=version_callback),
    ] = False,
) -> None:
    """Root command callback."""
    _ = version


@app.command("score")
def score_command(
    path: Annotated[Path, typer.Argument(help="Workspace directory.")] = Path("."),
    format: Annotated[
        str | None, typer.Option(help="Output format: human|json.", show_default="human")
    ] = None,
    fail_below: Annotated[
        int | None, typer.Option(help="Exit nonzero if the total score is below this value.")
    ] = None,
    config_file: Annotated[
        Path | None,
        typer.Option("--config", help="Path to config TOML file."),
    ] = None,
    no_audit: Annotated[
        bool, typer.Option("--no-audit", help="Skip the skill-folder security scan.")
    ] = False,
    skill_dir: Annotated[
        list[str] | None, typer.Option("--skill-dir", help="Extra skill folder to audit.")
    ] = None,
    verbose: Annotated[bool, typer.Option("--verbose", help="Enable debug logging.")] = False,
) -> None:
    """Lint a workspace and print its weighted score."""
    _configure_logging(verbose)
    app_config = _load_config_or_raise(path, config_file)
    output_format = _resolve_format(format or app_config.format)
    rules = _build_configured_rules_or_raise(app_config)

    try:
        files = scan_workspace(path)
    except WorkspaceError as exc:
        raise typer.BadParameter(str(exc), param_hint="PATH") from exc
    result = evaluate(str(path.resolve()), files, rules)

    audited: list[AuditedFolder] = []
    if app_config.audit.enabled and not no_audit:
        try:
            audited = _audit_skill_folders(path, app_config, extra_dirs=skill_dir or [])
        except WorkspaceError as exc:
            raise typer.BadParameter(str(exc), param_hint="--skill-dir") from exc

    if output_format == "json":
        payload = lint_result_to_dict(result)
        if audited:
            payload["skills"] = _skills_payload(audited)
        typer.echo(render_json(payload))
    else:
        typer.echo(render_human(result))
        if audited:
            typer.echo("")
            typer.echo(render_skills_summary(audited))

    fail_threshold = fail_below if fail_below is not None else app_config.fail_below
    if fail_threshold is not None and result.total_score < fail_threshold:
        raise typer.Exit(code=1)
    if _verdict_reached(audited, app_config.audit.fail_on):
        raise typer.Exit(code=1)


@app.command("scan")
def scan_command(
    skill_file: Annotated[
        Path,
        typer.Argument(exists=True, dir_okay=False, help="Skill file to audit."),
    ],
    format: Annotated[str, typer.Option(help="Output format: human|json.")] = "human",
    verbose: Annotated[bool, typer.Option("--verbose", help="Enable debug logging.")] = False,
) -> None:
    """Audit one skill file for known attack patterns."""
    _configure_logging(verbose)
    output_format = _resolve_format(format)
    try:
        content = read_text(skill_file)
    except WorkspaceError as exc:
        raise typer.BadParameter(str(exc), param_hint="SKILL_FILE") from exc

    result = audit_skill_file(content, skill_file.name)
    if output_format == "json":
        typer.echo(render_json(audit_result_to_dict(result)))
    else:
        typer.echo(render_audit_human(result))

    if result.verdict in {"DANGEROUS", "MALICIOUS"}:
        raise typer.Exit(code=1)


@app.command("rules")
def rules_command(
    path: Annotated[Path, typer.Option("--path", help="Workspace directory.")] = Path("."),
    format: Annotated[str, typer.Option(help="Output format: human|json.")] = "human",
    config_file: Annotated[
        Path | None,
        typer.Option("--config", help="Path to config TOML file."),
    ] = None,
) -> None:
    """List available lint rules."""
    output_format = _resolve_format(format)
    app_config = _load_config_or_raise(path, config_file)
    active_ids = {rule.rule_id for rule in _build_configured_rules_or_raise(app_config)}
    rule_info = list_rule_info()

    if output_format == "json":
        payload = {
            "rules": [
                {
                    "rule_id": item.rule_id,
                    "name": item.name,
                    "description": item.description,
                    "category": item.category,
                    "severity": item.severity,
                    "enabled": item.rule_id in active_ids,
                }
                for item in rule_info
            ],
            "meta": {"config_source": app_config.source},
        }
        typer.echo(json.dumps(payload, sort_keys=True))
        return

    lines = ["Available rules:"]
    for item in rule_info:
        status = "enabled" if item.rule_id in active_ids else "disabled"
        lines.append(f"- {item.rule_id} [{item.severity}, {status}] - {item.description}")
    typer.echo("\n".join(lines))


@app.command("config")
def config_command(
    path: Annotated[Path, typer.Option("--path", help="Workspace directory.")] = Path("."),
    format: Annotated[str, typer.Option(help="Output format: human|json.")] = "human",
    config_file: Annotated[
        Path | None,
        typer.Option("--config", help="Path to config TOML file."),
    ] = None,
) -> None:
    """Show resolved configuration."""
    output_format = _resolve_format(format)
    app_config = _load_config_or_raise(path, config_file)
    active_rules = _build_configured_rules_or_raise(app_config)
    payload = app_config.to_dict()
    payload["active_rule_ids"] = [rule.rule_id for rule in active_rules]

    if output_format == "json":
        typer.echo(json.dumps(payload, sort_keys=True))
        return

    lines = [
        "Resolved configuration:",
        f"- source: {payload['source'] or 'defaults'}",
        f"- format: {payload['format']}",
        f"- fail_below: {payload['fail_below']}",
        f"- rules.enable: {payload['rules']['enable']}",
        f"- rules.disable: {payload['rules']['disable']}",
        f"- audit: {payload['audit']}",
        f"- active_rule_ids: {payload['active_rule_ids']}",
    ]
    typer.echo("\n".join(lines))


@app.command("config-init")
def config_init_command(
    out: Annotated[Path, typer.Option(help="Output path for starter config TOML.")] = Path(
        ".agentlinter.toml"
    ),
    force: Annotated[
        bool,
        typer.Option("--force", help="Overwrite if file already exists."),
    ] = False,
) -> None:
    """Create a starter workspace config file."""
    out_path = out.resolve()
    if out_path.exists() and not force:
        raise typer.BadParameter(
            f"Refusing to overwrite existing file: {out_path}. Use --force to overwrite."
        )
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_text(default_config_template(), encoding="utf-8")
    typer.echo(f"Wrote starter config: {out_path}")


def main() -> None:
    """Console script entrypoint."""
    app()


def _configure_logging(verbose: bool) -> None:
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")


def _resolve_format(value: str) -> str:
    output_format = value.lower()
    if output_format not in {"human", "json"}:
        raise typer.BadParameter("format must be one of: human, json", param_hint="--format")
    return output_format


def _load_config_or_raise(root: Path, config_file: Path | None = None) -> AppConfig:
    try:
        return load_app_config(root, config_path=config_file)
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="config") from exc


def _build_configured_rules_or_raise(app_config: AppConfig) -> list[RegisteredRule]:
    try:
        return build_rules(
            enabled_rule_ids=app_config.rule_enable,
            disabled_rule_ids=app_config.rule_disable,
        )
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="config.rules") from exc


def _audit_skill_folders(
    root: Path, app_config: AppConfig, *, extra_dirs: list[str]
) -> list[AuditedFolder]:
    folders = discover_skill_sources(
        root,
        [*app_config.audit.skill_dirs, *extra_dirs],
        include_home=app_config.audit.include_home,
    )
    audited: list[AuditedFolder] = []
    for folder in folders:
        results = audit_skill_files(folder.sources, max_workers=app_config.audit.max_workers)
        audited.append((folder.folder, results))
    logger.debug("Audited %d skill folder(s)", len(audited))
    return audited


def _skills_payload(audited: list[AuditedFolder]) -> list[dict[str, Any]]:
    return [
        {
            "folder": folder,
            "skills": [
                {"name": source.name, **audit_result_to_dict(result)}
                for source, result in results
            ],
        }
        for folder, results in audited
    ]


def _verdict_reached(audited: list[AuditedFolder], fail_on: str | None) -> bool:
    if fail_on is None:
        return False
    threshold = VERDICTS.index(fail_on.upper())
    return any(
        VERDICTS.index(result.verdict) >= threshold
        for _, results in audited
        for _, result in results
    )
