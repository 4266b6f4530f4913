"""Main entry point for the triagecli application.

Sets up the Typer CLI application, performs dependency injection (Composition Root),
defines CLI commands, and delegates execution to the CommandHandler.
"""

import asyncio
import logging
from typing import Annotated, Any, Dict, Optional

import typer

# --- Core Layer ---
from triagecli.core.command_handler import CommandHandler, EXIT_FATAL
from triagecli.core.context import PipelineContext
from triagecli.core.services.assessment_service import AssessmentService

# --- Infrastructure Layer ---
from triagecli.infrastructure.config.settings import (
    load_configuration, get_config, resolve_endpoint, get_request_timeout,
    get_page_size, get_min_request_interval, get_backoff_policy,
)
from triagecli.infrastructure.cli.display import ConsoleDisplay
from triagecli.infrastructure.api.patient_client import HttpPatientApi
from triagecli.infrastructure.resilience.rate_limiter import RateLimiter
from triagecli.infrastructure.resilience.api_retry import ApiRetryService
from triagecli.infrastructure.monitoring.logger_setup import setup_logging, level_from_name

logger = logging.getLogger(__name__)

# --- Dependency Injection Container (Manual) ---

def create_dependencies(page_size: Optional[int] = None) -> Dict[str, Any]:
    """Creates and wires up all dependencies for one run.

    This acts as the Composition Root.
    """
    dependencies: Dict[str, Any] = {}

    # 1. Load Configuration First
    load_configuration()
    setup_logging(
        log_level=level_from_name(get_config('logging.level', 'INFO')),
        log_file=get_config('logging.file'),
        log_format=get_config('logging.format', '%(asctime)s - %(name)s - %(levelname)s - %(message)s'),
    )
    logger.info("Configuration and logging initialized.")

    # 2. Instantiate Infrastructure Adapters & Services
    dependencies['ui'] = ConsoleDisplay()
    endpoint = resolve_endpoint()
    dependencies['endpoint'] = endpoint
    dependencies['patient_api'] = HttpPatientApi(
        base_url=endpoint.base_url,
        headers=endpoint.headers,
        timeout=get_request_timeout(),
    )
    dependencies['rate_limiter'] = RateLimiter(min_interval=get_min_request_interval())
    dependencies['api_retry_service'] = ApiRetryService.from_policy(
        rate_limiter=dependencies['rate_limiter'],
        policy=get_backoff_policy(),
    )

    # 3. One context shared by the fetch and submission steps
    dependencies['context'] = PipelineContext(
        api=dependencies['patient_api'],
        rate_limiter=dependencies['rate_limiter'],
        retry_service=dependencies['api_retry_service'],
        page_size=page_size or get_page_size(),
    )

    # 4. Core Services
    dependencies['assessment_service'] = AssessmentService(context=dependencies['context'])
    dependencies['command_handler'] = CommandHandler(
        assessment_service=dependencies['assessment_service'],
        ui=dependencies['ui'],
    )
    logger.info("All dependencies initialized successfully.")
    return dependencies

# --- Typer App Definition ---
app = typer.Typer(
    name="triagecli",
    help="Fetch patient vitals, flag high-risk, fever and data-quality cases, and submit the assessment once.",
    add_completion=False,
)


@app.command()
def assess(
    page_size: Annotated[
        Optional[int],
        typer.Option("--page-size", min=1, help="Patients requested per listing page.")
    ] = None,
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", help="Fetch and classify, but do not submit.")
    ] = False,
):
    """Fetch all patients, classify them and submit the assessment."""
    try:
        dependencies = create_dependencies(page_size=page_size)
    except Exception as e:
        logger.error(f"Fatal Error during application initialization: {e}", exc_info=True)
        typer.echo(f"FATAL ERROR during initialization: {e}", err=True)
        raise typer.Exit(code=EXIT_FATAL)

    dependencies['ui'].display_info(dependencies['endpoint'].describe())
    handler: CommandHandler = dependencies['command_handler']
    exit_code = asyncio.run(handler.handle_assess(dry_run=dry_run))
    raise typer.Exit(code=exit_code)


@app.command(name="show-config")
def show_config_command():
    """Show which endpoint would be used, without calling it."""
    load_configuration()
    endpoint = resolve_endpoint()
    ui = ConsoleDisplay()
    ui.display_info(endpoint.describe())
    ui.display_info(f"Base URL: {endpoint.base_url}")
    ui.display_info(f"API key configured: {'yes' if endpoint.headers else 'no'}")
    ui.display_info(f"Page size: {get_page_size()}, min request interval: {get_min_request_interval()}s")
    policy = get_backoff_policy()
    ui.display_info(
        f"Retries: {policy['max_retries']}, initial backoff: {policy['initial_delay']}s, "
        f"factor: {policy['factor']}"
    )

# --- Main Execution Guard ---

def cli_entry_point():
    """Function to be called by the script entry point in pyproject.toml."""
    app()


if __name__ == "__main__":
    cli_entry_point()
