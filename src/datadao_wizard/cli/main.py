#!/usr/bin/env python3
"""
DataDAO Wizard CLI

Command-line interface over the deployment state of a generated DataDAO
project. Each deployment step runs as its own process; these commands report
its outcome and show where to resume.

Commands:
- datadao-wizard init: Create deployment.json for a new project
- datadao-wizard status / next: Show progress and the next command to run
- datadao-wizard validate: Check the configuration for problems
- datadao-wizard complete / fail: Report the outcome of a step
- datadao-wizard recover: Review recorded errors and fix configuration
- datadao-wizard restore / reset: Roll back or start over
- datadao-wizard render / placeholders: Work with configuration templates
"""

import logging
import sys
from pathlib import Path

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.prompt import Confirm, Prompt

from .. import __version__
from ..settings.storage import SettingsStorage
from ..state.errors import DeploymentStateError, MissingFieldsError, StepNotReadyError
from ..state.record import DeploymentRecord, DeploymentStep
from ..templates.engine import TemplateNotFoundError, bindings_from_record
from ..validation import ConfigurationValidator
from .context import CLIContext, get_cli_context
from .output import OutputManager

app = typer.Typer(
    name="datadao-wizard",
    help="DataDAO Wizard - deployment state for generated DataDAO projects",
    add_completion=False,
    no_args_is_help=True,
)
console = Console()
output = OutputManager(console)

# Prompt labels for credentials the recovery menu can fix
CREDENTIAL_LABELS = {
    "pinataApiKey": ("Pinata API Key", False),
    "pinataApiSecret": ("Pinata API Secret", True),
    "googleClientId": ("Google OAuth Client ID", False),
    "googleClientSecret": ("Google OAuth Client Secret", True),
}


@app.callback()
def callback(
    ctx: typer.Context,
    project_path: str | None = typer.Option(None, "--project", "-p", help="Project path"),
    config_dir: str | None = typer.Option(None, "--config-dir", help="Settings directory"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
):
    """DataDAO Wizard - deployment state for generated DataDAO projects."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    storage = SettingsStorage(Path(config_dir) if config_dir else None)
    ctx.obj = CLIContext.from_options(
        project_root=Path(project_path) if project_path else None,
        settings=storage.load(),
    )


# ==================== Helpers ====================


def _load_record(cli_ctx: CLIContext) -> DeploymentRecord:
    """Load the project's record or exit with the store's error message."""
    try:
        return cli_ctx.get_store().load()
    except DeploymentStateError as e:
        output.print_error(str(e))
        sys.exit(1)
    except OSError as e:
        output.print_error(f"Could not read deployment state: {e}")
        sys.exit(1)


def _parse_step(value: str) -> DeploymentStep:
    try:
        return DeploymentStep.parse(value)
    except ValueError as e:
        output.print_error(str(e))
        output.print_info(f"Valid steps: {', '.join(DeploymentStep.keys())}")
        sys.exit(1)


def _parse_assignments(values: list[str] | None) -> dict[str, str]:
    """Parse repeated ``key=value`` options."""
    result = {}
    for item in values or []:
        key, sep, value = item.partition("=")
        if not sep or not key.strip():
            output.print_error(f"Expected key=value, got '{item}'")
            sys.exit(1)
        result[key.strip()] = value
    return result


def _show_status(cli_ctx: CLIContext, record: DeploymentRecord) -> None:
    machine = cli_ctx.get_machine()

    output.print_header(
        f"DataDAO Wizard v{__version__}",
        f"Project: {cli_ctx.project_root}",
    )
    output.progress_table(machine.progress(record), failed=set(record.errors))
    output.print()
    output.details_table(record.flat_fields())
    output.print()
    output.next_action_panel(machine.next_action(record))

    if record.errors:
        output.print_warning(
            f"{len(record.errors)} step error(s) recorded. "
            "Run 'datadao-wizard recover' for help."
        )


def _ask_required(label: str, password: bool = False) -> str:
    while True:
        value = Prompt.ask(label, password=password, console=console).strip()
        if value:
            return value
        output.print_error(f"{label} is required")


def _fix_configuration(cli_ctx: CLIContext, record: DeploymentRecord) -> None:
    """Prompt for every incomplete credential pair and save the answers."""
    updates = {}
    for label, names in ConfigurationValidator.CREDENTIAL_PAIRS:
        if all(record.lookup(name) for name in names):
            continue
        if not Confirm.ask(f"Update {label}?", default=True, console=console):
            continue
        for name in names:
            prompt, password = CREDENTIAL_LABELS[name]
            updates[name] = _ask_required(prompt, password=password)

    if not updates:
        output.print_info("No configuration changes")
        return

    record.update_fields(updates)
    cli_ctx.get_store().save(record)
    output.print_success("Configuration updated")


# ==================== Commands ====================


@app.command()
def init(
    ctx: typer.Context,
    dlp_name: str = typer.Option("MyDataDAO", "--dlp-name", help="DataDAO name"),
    token_name: str = typer.Option("MyDataToken", "--token-name", help="Token name"),
    token_symbol: str = typer.Option("MDT", "--token-symbol", help="Token symbol"),
    private_key: str | None = typer.Option(None, "--private-key", help="Deployer private key"),
    address: str | None = typer.Option(None, "--address", help="Deployer wallet address"),
    public_key: str | None = typer.Option(None, "--public-key", help="Deployer public key"),
    github_username: str | None = typer.Option(None, "--github-username", help="GitHub username"),
    pinata_api_key: str | None = typer.Option(None, "--pinata-api-key", help="Pinata API key"),
    pinata_api_secret: str | None = typer.Option(None, "--pinata-api-secret", help="Pinata API secret"),
    google_client_id: str | None = typer.Option(None, "--google-client-id", help="Google OAuth client id"),
    google_client_secret: str | None = typer.Option(
        None, "--google-client-secret", help="Google OAuth client secret"
    ),
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite an existing deployment.json"),
):
    """
    Create deployment.json for a new project.

    Examples:
        datadao-wizard init --dlp-name WeatherDAO --token-name WeatherToken --token-symbol WTH
        datadao-wizard -p ./my-dao init --private-key 0x... --address 0x...
    """
    cli_ctx = get_cli_context(ctx)
    network = cli_ctx.get_settings().network
    store = cli_ctx.get_store()

    record = DeploymentRecord(
        dlp_name=dlp_name,
        token_name=token_name,
        token_symbol=token_symbol,
        private_key=private_key,
        address=address,
        public_key=public_key,
        github_username=github_username,
        pinata_api_key=pinata_api_key,
        pinata_api_secret=pinata_api_secret,
        google_client_id=google_client_id,
        google_client_secret=google_client_secret,
        network=network.name,
        rpc_url=network.rpc_url,
        chain_id=network.chain_id,
    )

    try:
        store.create(record, overwrite=force)
    except FileExistsError:
        output.print_error(f"{store.path} already exists. Use --force to overwrite it.")
        sys.exit(1)
    except OSError as e:
        output.print_error(str(e))
        sys.exit(1)

    output.print_success(f"Created {store.path}")

    issues = ConfigurationValidator().validate_configuration(record)
    if issues:
        output.print()
        output.issues_list(issues)


@app.command()
def status(ctx: typer.Context):
    """Show step progress, recorded resources and the next step."""
    cli_ctx = get_cli_context(ctx)
    _show_status(cli_ctx, _load_record(cli_ctx))


@app.command("next")
def next_step(ctx: typer.Context):
    """Show the next command to run and whether it can start."""
    cli_ctx = get_cli_context(ctx)
    record = _load_record(cli_ctx)
    machine = cli_ctx.get_machine()

    action = machine.next_action(record)
    output.next_action_panel(action)
    if action.step is None:
        return

    try:
        machine.check_preconditions(record, action.step)
    except (StepNotReadyError, MissingFieldsError) as e:
        output.print_warning(str(e))


@app.command()
def validate(ctx: typer.Context):
    """Check deployment.json for configuration problems."""
    cli_ctx = get_cli_context(ctx)
    record = _load_record(cli_ctx)

    issues = ConfigurationValidator().validate_configuration(record)
    if issues:
        output.issues_list(issues)
        sys.exit(1)

    output.print_success("Configuration is valid")


@app.command()
def complete(
    ctx: typer.Context,
    step: str = typer.Argument(..., help="Step key, e.g. contractsDeployed"),
    values: list[str] | None = typer.Option(
        None, "--set", "-s", help="Resource produced by the step, as key=value"
    ),
    force: bool = typer.Option(False, "--force", "-f", help="Skip precondition checks"),
):
    """
    Mark a step complete and record the resources it produced.

    Examples:
        datadao-wizard complete contractsDeployed -s tokenAddress=0x... -s proxyAddress=0x...
        datadao-wizard complete dataDAORegistered -s dlpId=42
    """
    cli_ctx = get_cli_context(ctx)
    record = _load_record(cli_ctx)
    machine = cli_ctx.get_machine()
    target = _parse_step(step)
    updates = _parse_assignments(values)

    if not force:
        try:
            machine.check_preconditions(record, target)
        except (StepNotReadyError, MissingFieldsError) as e:
            output.print_error(str(e))
            sys.exit(1)

    try:
        machine.mark_completed(record, target, updates)
    except ValidationError as e:
        output.print_error(f"Invalid outcome for {target.value}:")
        for err in e.errors():
            location = ".".join(str(part) for part in err["loc"])
            output.print(f"  {location}: {err['msg']}")
        sys.exit(1)
    except OSError as e:
        output.print_error(str(e))
        sys.exit(1)

    output.print_success(f"Step complete: {machine.definition(target).display_name}")
    output.next_action_panel(machine.next_action(record))


@app.command()
def fail(
    ctx: typer.Context,
    step: str = typer.Argument(..., help="Step key that failed"),
    message: str = typer.Argument(..., help="Error message"),
):
    """Record the failure of a step."""
    cli_ctx = get_cli_context(ctx)
    record = _load_record(cli_ctx)
    target = _parse_step(step)

    cli_ctx.get_advisor().record_error(record, target, message)
    output.print_warning(f"Recorded error for {target.value}: {message}")
    output.print_info("Run 'datadao-wizard recover' for recovery options")


@app.command()
def recover(ctx: typer.Context):
    """Review recorded errors, then retry, fix configuration or show status."""
    cli_ctx = get_cli_context(ctx)
    record = _load_record(cli_ctx)
    advisor = cli_ctx.get_advisor()

    if not advisor.has_errors(record):
        output.print_success("No errors recorded")
        return

    suggestions = advisor.get_recovery_suggestions(record)
    output.print_header("Error Recovery")
    output.recovery_suggestions(suggestions)

    advised = {s.step.value for s in suggestions}
    for key, entry in record.errors.items():
        if key not in advised:
            output.print_warning(f"{key}: {entry.message}")

    output.print()
    choice = Prompt.ask(
        "What would you like to do?",
        choices=["retry", "config", "status", "exit"],
        default="exit",
        console=console,
    )

    if choice == "retry":
        machine = cli_ctx.get_machine()
        for step in DeploymentStep.get_order():
            if step.value in record.errors:
                output.print_info(f"Retry with: {machine.definition(step).command}")
                break
    elif choice == "config":
        _fix_configuration(cli_ctx, record)
    elif choice == "status":
        _show_status(cli_ctx, record)


@app.command()
def restore(ctx: typer.Context):
    """Replace deployment.json with its backup."""
    cli_ctx = get_cli_context(ctx)
    store = cli_ctx.get_store()

    try:
        store.restore_backup()
    except DeploymentStateError as e:
        output.print_error(str(e))
        sys.exit(1)

    output.print_success(f"Restored {store.path.name} from {store.backup_path.name}")


@app.command()
def reset(
    ctx: typer.Context,
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
):
    """Clear step progress, acquired resources and errors. Keeps identity and credentials."""
    cli_ctx = get_cli_context(ctx)
    record = _load_record(cli_ctx)

    if not yes and not Confirm.ask("Reset deployment progress?", default=False, console=console):
        output.print_info("Reset cancelled")
        return

    cli_ctx.get_machine().reset(record)
    output.print_success("Deployment progress reset")


@app.command()
def render(
    ctx: typer.Context,
    template: str = typer.Argument(..., help="Template name, e.g. ui.env"),
    output_path: str | None = typer.Option(None, "--output", "-o", help="Write to this file"),
    values: list[str] | None = typer.Option(None, "--set", "-s", help="Extra binding, as key=value"),
    strict: bool = typer.Option(False, "--strict", help="Fail if any placeholder is unbound"),
):
    """
    Render a template with values from deployment.json.

    Unbound placeholders are kept as they are unless --strict is given.
    """
    cli_ctx = get_cli_context(ctx)
    engine = cli_ctx.get_engine()
    network = cli_ctx.get_settings().network
    store = cli_ctx.get_store()

    if store.exists():
        bindings = bindings_from_record(_load_record(cli_ctx), network)
    else:
        bindings = dict(network.to_bindings())
    bindings.update(_parse_assignments(values))

    try:
        check = engine.validate_file(template, bindings)
        if strict and not check.all_satisfied:
            output.print_error(f"Unbound placeholders: {', '.join(check.missing_names)}")
            sys.exit(1)

        if output_path:
            target = Path(output_path)
            if not target.is_absolute():
                target = cli_ctx.project_root / target
            engine.render_to_file(template, target, bindings)
            output.print_success(f"Rendered {template} -> {target}")
            for name in check.missing_names:
                output.print_warning(f"Unbound placeholder: {name}")
        else:
            typer.echo(engine.render_file(template, bindings), nl=False)
    except TemplateNotFoundError as e:
        output.print_error(str(e))
        available = engine.list_templates()
        if available:
            output.print_info(f"Available templates: {', '.join(available)}")
        sys.exit(1)


@app.command()
def placeholders(
    ctx: typer.Context,
    template: str = typer.Argument(..., help="Template name, e.g. ui.env"),
):
    """List a template's placeholders and whether deployment.json binds them."""
    cli_ctx = get_cli_context(ctx)
    engine = cli_ctx.get_engine()
    network = cli_ctx.get_settings().network
    store = cli_ctx.get_store()

    if store.exists():
        bindings = bindings_from_record(_load_record(cli_ctx), network)
    else:
        bindings = network.to_bindings()

    try:
        check = engine.validate_file(template, bindings)
    except TemplateNotFoundError as e:
        output.print_error(str(e))
        sys.exit(1)

    for name in check.all_required_names:
        if name in check.missing_names:
            output.print_warning(f"{name} (unbound)")
        else:
            output.print_success(name)

    if check.all_satisfied:
        output.print_info("All placeholders are bound")


def main():
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
