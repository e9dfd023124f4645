"""
Brand Onboarding - CLI Entry Point.

Usage:
    brand-onboarding run              Walk through onboarding interactively
    brand-onboarding status           Ask the service whether onboarding is needed
    brand-onboarding replay FILE      Rebuild the workflow state from an action log
    brand-onboarding health           Check configuration
    brand-onboarding --help           Show help
"""

import asyncio
import json
import logging
from typing import Optional

import typer
from rich.console import Console
from rich.live import Live
from rich.logging import RichHandler
from rich.panel import Panel
from rich.spinner import Spinner
from rich.table import Table

from brand_onboarding.controllers import (
    BusinessController,
    CategoriesController,
    CompetitorsController,
    GeneratingStepController,
    IntegrationController,
    PromptsController,
)
from brand_onboarding.session import OnboardingSession

app = typer.Typer(
    name="brand-onboarding",
    help="Brand Onboarding - set up your brand for AI visibility tracking.",
    add_completion=False,
)
console = Console()


def setup_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
    )

    # Quiet down noisy libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def _resolve_token(token: str | None) -> str | None:
    from brand_onboarding.config import settings

    return token or settings.onboarding_auth_token


# =============================================================================
# Wizard Rendering
# =============================================================================

HELP = {
    BusinessController: "domain <d> | name <n> | description <text> | audience <a> | rm <n> | ai",
    CompetitorsController: "add <domain> | rm <n> | regen",
    CategoriesController: "add <name> | rm <n> | regen",
    PromptsController: "edit <n> <text> | regen",
    IntegrationController: "complete",
}


def _numbered(title: str, items: list[str]) -> Table:
    table = Table(title=title, show_header=False, box=None)
    table.add_column("#", style="dim", justify="right")
    table.add_column(title)
    for i, item in enumerate(items, 1):
        table.add_row(str(i), item)
    if not items:
        table.add_row("", "[dim](none)[/dim]")
    return table


def render(session: OnboardingSession) -> None:
    from brand_onboarding.progress import format_progress
    from brand_onboarding.models import category_name

    controller = session.controller
    state = session.store.state

    console.print()
    console.print(format_progress(session.progress()))
    console.print(
        Panel.fit(
            f"[bold]{controller.step.title}[/bold]\n[dim]{controller.step.description}[/dim]",
            border_style="cyan",
        )
    )

    if isinstance(controller, BusinessController):
        draft = controller.draft
        console.print(f"  Domain:      {draft.domain or '[dim]-[/dim]'}")
        console.print(f"  Name:        {draft.business_name or '[dim]-[/dim]'}")
        console.print(f"  Description: {draft.description or '[dim]-[/dim]'}")
        console.print(_numbered("Target audiences", list(draft.target_audiences)))
    elif isinstance(controller, CompetitorsController):
        console.print(_numbered(f"Competitors ({len(controller.draft)}, need 3-7)", controller.draft))
    elif isinstance(controller, CategoriesController):
        console.print(_numbered("Categories", [category_name(c) for c in controller.draft]))
    elif isinstance(controller, PromptsController):
        console.print(_numbered(
            "Prompts",
            [f"[dim]{p.category_name}:[/dim] {p.text}" for p in controller.draft],
        ))
    elif isinstance(controller, IntegrationController):
        console.print("  Everything is ready. Type [bold]complete[/bold] to finish setup.")
        if controller.error:
            console.print(f"[red]{controller.error}[/red]")
            if controller.can_retry:
                console.print("[dim]Type 'complete' to retry.[/dim]")
    else:
        console.print("  [dim]Nothing to fill in here.[/dim]")

    if state.error:
        console.print(f"[red]{state.error}[/red]")

    commands = HELP.get(type(controller))
    nav = "next | back | quit" if controller.step_id > 1 else "next | quit"
    console.print(f"[dim]Commands: {commands + ' | ' if commands else ''}{nav}[/dim]")


# =============================================================================
# Wizard Commands
# =============================================================================


def _index(arg: str) -> int:
    """1-based user index to 0-based; garbage maps to -1 (a no-op for removals)."""
    try:
        return int(arg) - 1
    except ValueError:
        return -1


async def handle_command(session: OnboardingSession, line: str) -> bool:
    """Apply one wizard command. Returns False when the user quits."""
    cmd, _, arg = line.strip().partition(" ")
    cmd = cmd.lower()
    arg = arg.strip()
    controller = session.controller

    if cmd in ("quit", "exit", "q"):
        return False
    if cmd == "next":
        if not await session.advance():
            console.print("[yellow]This step isn't complete yet.[/yellow]")
        return True
    if cmd == "back":
        await session.retreat()
        return True
    if cmd in ("ai", "regen") and isinstance(controller, GeneratingStepController):
        controller.start_regenerate()
        return True

    if isinstance(controller, BusinessController):
        if cmd in ("domain", "description"):
            controller.set_field(cmd, arg)
        elif cmd == "name":
            controller.set_field("business_name", arg)
        elif cmd == "audience":
            if not controller.add_audience(arg):
                console.print("[yellow]Audience is empty or already listed.[/yellow]")
        elif cmd == "rm":
            controller.remove_audience(_index(arg))
        else:
            console.print(f"[yellow]Unknown command: {cmd}[/yellow]")
    elif isinstance(controller, CompetitorsController):
        if cmd == "add":
            if not controller.add_competitor(arg):
                console.print("[yellow]Competitor is empty or already listed.[/yellow]")
        elif cmd == "rm":
            controller.remove_competitor(_index(arg))
        else:
            console.print(f"[yellow]Unknown command: {cmd}[/yellow]")
    elif isinstance(controller, CategoriesController):
        if cmd == "add":
            if not controller.add_category(arg):
                console.print("[yellow]Category is empty or already listed.[/yellow]")
        elif cmd == "rm":
            controller.remove_category(_index(arg))
        else:
            console.print(f"[yellow]Unknown command: {cmd}[/yellow]")
    elif isinstance(controller, PromptsController):
        if cmd == "edit":
            index, _, text = arg.partition(" ")
            if not text.strip() or not controller.edit_prompt(_index(index), text.strip()):
                console.print("[yellow]Usage: edit <n> <text>[/yellow]")
        else:
            console.print(f"[yellow]Unknown command: {cmd}[/yellow]")
    elif isinstance(controller, IntegrationController) and cmd == "complete":
        with Live(Spinner("dots", text="Completing setup..."), console=console, transient=True):
            await session.complete()
    else:
        console.print(f"[yellow]Unknown command: {cmd}[/yellow]")

    return True


async def run_wizard(session: OnboardingSession) -> None:
    from brand_onboarding.guard import EntryDecision
    from brand_onboarding.navigation import Destination

    decision = await session.start()
    if decision == EntryDecision.REDIRECT_LOGIN:
        console.print("[red]Not signed in. Set ONBOARDING_AUTH_TOKEN or pass --token.[/red]")
        return
    if decision == EntryDecision.REDIRECT_DASHBOARD:
        console.print("[green]Your account is already set up. Nothing to do.[/green]")
        return

    while session.controller is not None:
        await asyncio.sleep(0)  # let a freshly started generation claim the loading flag
        if session.store.state.is_loading:
            with Live(Spinner("dots", text="Generating..."), console=console, transient=True):
                await session.wait_idle()
            if session.controller is None:
                break

        render(session)
        user_input = console.input("\n[bold blue]>[/bold blue] ")
        if not user_input.strip():
            continue
        if not await handle_command(session, user_input):
            session.abandon()
            console.print("\n[dim]Progress on this step is not saved. Goodbye! 👋[/dim]")
            return

    destination = session.navigator.current
    if destination == Destination.DASHBOARD:
        console.print("\n[bold green]Onboarding complete![/bold green] Head over to your dashboard.")
    elif destination == Destination.LOGIN:
        console.print("\n[red]Your session expired. Please sign in again.[/red]")


# =============================================================================
# Commands
# =============================================================================


@app.command()
def run(
    token: Optional[str] = typer.Option(None, "--token", "-t", help="Bearer credential (default: ONBOARDING_AUTH_TOKEN)"),
    log_actions: bool = typer.Option(False, "--log-actions", "-l", help="Write every state change to session_logs/"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
) -> None:
    """Walk through the onboarding workflow interactively."""
    from brand_onboarding.action_log import ActionLogger
    from brand_onboarding.config import settings

    setup_logging("DEBUG" if verbose else settings.log_level)

    action_log = None
    if log_actions or settings.onboarding_log_actions:
        action_log = ActionLogger(log_dir=settings.onboarding_log_dir)
        console.print(f"[dim]📝 Action log: {action_log.log_path}[/dim]")

    session = OnboardingSession(_resolve_token(token), action_log=action_log)

    async def _main() -> None:
        try:
            await run_wizard(session)
        finally:
            await session.aclose()

    try:
        asyncio.run(_main())
    except KeyboardInterrupt:
        console.print("\n\n[dim]Session interrupted. Goodbye! 👋[/dim]")


@app.command()
def status(
    token: Optional[str] = typer.Option(None, "--token", "-t", help="Bearer credential (default: ONBOARDING_AUTH_TOKEN)"),
) -> None:
    """Check whether this account still needs onboarding."""
    from brand_onboarding.client import OnboardingClient
    from brand_onboarding.config import settings
    from brand_onboarding.guard import EntryDecision, evaluate_entry

    setup_logging(settings.log_level)
    credential = _resolve_token(token)

    async def _check() -> EntryDecision:
        if not credential:
            return await evaluate_entry(None, None)
        async with OnboardingClient.from_settings(credential) as client:
            return await evaluate_entry(credential, client)

    decision = asyncio.run(_check())
    messages = {
        EntryDecision.ENTER_WORKFLOW: "[yellow]Onboarding required[/yellow]",
        EntryDecision.REDIRECT_DASHBOARD: "[green]Onboarding complete - go to dashboard[/green]",
        EntryDecision.REDIRECT_LOGIN: "[red]Not signed in - go to login[/red]",
    }
    console.print(messages[decision])
    if decision == EntryDecision.REDIRECT_LOGIN:
        raise typer.Exit(1)


@app.command()
def replay(
    path: str = typer.Argument(..., help="Action log file written by --log-actions"),
) -> None:
    """Rebuild the workflow state from a recorded action log."""
    from brand_onboarding.action_log import load_actions
    from brand_onboarding.state import replay as replay_actions

    try:
        actions = load_actions(path)
    except (OSError, ValueError) as e:
        console.print(f"[red]❌ Could not read action log: {e}[/red]")
        raise typer.Exit(1)

    states = replay_actions(actions)
    console.print(f"[dim]Replayed {len(actions)} actions[/dim]")
    console.print_json(json.dumps(states[-1].to_dict()))


@app.command()
def health() -> None:
    """Check configuration."""
    from brand_onboarding.config import get_settings

    console.print("\n[bold]Brand Onboarding Health Check[/bold]\n")

    try:
        settings = get_settings()
        console.print("✅ Configuration loaded")
        console.print(f"   Environment: {settings.onboarding_env}")
        console.print(f"   Log level: {settings.log_level}")

        if settings.onboarding_api_url.startswith(("http://", "https://")):
            console.print(f"✅ Service URL: {settings.onboarding_api_url}{settings.onboarding_api_prefix}")
        else:
            console.print("❌ ONBOARDING_API_URL missing or invalid")
            raise typer.Exit(1)

        if settings.onboarding_auth_token:
            console.print("✅ Auth token configured")
        else:
            console.print("ℹ️  No auth token configured (pass --token to run)")

        console.print(f"   State file: {settings.onboarding_state_file}")
        if settings.onboarding_log_actions:
            console.print(f"✅ Action logging enabled ({settings.onboarding_log_dir})")
        else:
            console.print("ℹ️  Action logging disabled")

        console.print("\n[green]All checks passed![/green]")

    except typer.Exit:
        raise
    except Exception as e:
        console.print(f"\n[red]❌ Configuration error: {e}[/red]")
        console.print("[dim]Make sure your .env file has valid values.[/dim]")
        raise typer.Exit(1)


@app.command()
def version() -> None:
    """Show version information."""
    from brand_onboarding import __version__

    console.print(f"Brand Onboarding version {__version__}")


if __name__ == "__main__":
    app()
