import logging
import typer
from typing import List, Optional
from pathlib import Path
from . import __version__
from .config import ProbeSettings
from .domain.models import StatusResult
from .log import setup_logger
from .probe import ProbeRequest, QueryProbe
from .report import PluginOutput

logger = logging.getLogger(__name__)

app = typer.Typer(
    help="Run a query from the connection file and check the result against Nagios thresholds.",
    add_completion=False,
)

def _version_callback(value: bool):
    if value:
        typer.echo(f"check-db-query {__version__}")
        raise typer.Exit()

@app.command()
def check(
    database: str = typer.Option(..., "--database", "-d", help="Name of database (as specified in the connection file)"),
    query: str = typer.Option(..., "--query", "-q", help="Name of query (as specified in the connection file)"),
    warning: Optional[str] = typer.Option(None, "--warning", "-w", help="Warning threshold in Nagios range format"),
    critical: Optional[str] = typer.Option(None, "--critical", "-c", help="Critical threshold in Nagios range format"),
    conn_file: Optional[Path] = typer.Option(None, "--conn-file", "-C", help="DB connection file (XML or YAML)"),
    placeholder: Optional[List[str]] = typer.Option(
        None, "--placeholder", "-p", help="Value for the next '?' placeholder in the query (repeatable)"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose output"),
    version: bool = typer.Option(
        False, "--version", "-V", callback=_version_callback, is_eager=True, help="Show version and exit"
    ),
):
    """
    Runs the query QUERY of database DATABASE and reports OK, WARNING or
    CRITICAL. Only the first column of the returned row is compared; NULL or
    non-numeric results are reported as "undefined" and CRITICAL.
    """
    setup_logger(logging.DEBUG if verbose else logging.WARNING)

    settings = ProbeSettings()
    request = ProbeRequest(
        database=database,
        query=query,
        warning=warning,
        critical=critical,
        conn_file=conn_file,
        placeholders=placeholder or [],
    )
    try:
        result = QueryProbe(settings).run(request)
    except Exception as e:
        # Nothing may leave without a status line
        logger.exception("Unexpected error while checking '%s'", database)
        result = StatusResult.failure(f"Unexpected error: {e}")

    output = PluginOutput(shortname=settings.shortname, result=result)
    typer.echo(output.render())
    raise typer.Exit(code=output.exit_code)

if __name__ == "__main__":
    app()
