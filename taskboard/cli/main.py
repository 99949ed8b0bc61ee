"""CLI commands for querying tasks."""

import asyncio
import json
import logging
from typing import Optional

import click
import httpx

from ..container import get_container, setup_container
from ..domain.models import TaskPriority, TaskQuery, TaskStatus


def run_async(coro):
    """Run async coroutine in sync context."""
    return asyncio.run(coro)


@click.group()
@click.version_option(version="1.0.0")
def cli():
    """Query tasks and aggregate counts."""
    container = setup_container()
    logging.basicConfig(
        level=container.settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@cli.command("init-db")
def init_db():
    """Create the tasks table if missing."""
    from ..storage.database import create_schema, get_engine

    db_settings = get_container().settings.database

    async def _create() -> None:
        engine = get_engine(db_settings.url, echo=db_settings.echo)
        try:
            await create_schema(engine)
        finally:
            await engine.dispose()

    run_async(_create())
    click.echo(f"Schema ready at {db_settings.url}")


@cli.command("list")
@click.option("--page", default=1, type=click.IntRange(min=1), help="Page number")
@click.option("--per-page", default=10, type=click.IntRange(min=1), help="Rows per page")
@click.option("--sort", help="Sort as field.direction, e.g. title.asc")
@click.option("--title", "-t", help="Substring filter on title")
@click.option("--status", "-s", help="Statuses, comma-separated (todo, in_progress, done, cancelled)")
@click.option("--priority", "-p", help="Priorities, comma-separated (low, medium, high, urgent)")
@click.option("--operator", type=click.Choice(["and", "or"]), default="and", help="Combine filters")
@click.option("--from", "date_from", help="Created on or after (ISO 8601)")
@click.option("--to", "date_to", help="Created on or before (ISO 8601)")
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
def list_tasks(
    page: int,
    per_page: int,
    sort: Optional[str],
    title: Optional[str],
    status: Optional[str],
    priority: Optional[str],
    operator: str,
    date_from: Optional[str],
    date_to: Optional[str],
    output_json: bool,
):
    """List one page of tasks."""
    service = get_container().task_query_service
    query = TaskQuery.from_params(
        page=page,
        per_page=per_page,
        sort=sort,
        title=title,
        status=status,
        priority=priority,
        operator=operator,
        date_from=date_from,
        date_to=date_to,
    )
    result = run_async(service.get_tasks(query))

    if output_json:
        output = {
            "rows": [
                {
                    "id": t.id,
                    "code": t.code,
                    "title": t.title,
                    "status": t.status.value,
                    "priority": t.priority.value,
                    "created_at": t.created_at.isoformat(),
                }
                for t in result.rows
            ],
            "page_count": result.page_count,
        }
        click.echo(json.dumps(output, indent=2, ensure_ascii=False))
        return

    if not result.rows:
        click.echo("No tasks found.")
        return

    click.echo(f"Page {page} of {result.page_count}:\n")
    for task in result.rows:
        click.echo(
            f"[{task.code}] {task.title} ({task.status.value}, {task.priority.value})"
        )


@cli.command("counts")
@click.option(
    "--by",
    "dimension",
    type=click.Choice(["status", "priority"]),
    default="status",
    help="Dimension to group by",
)
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
def show_counts(dimension: str, output_json: bool):
    """Show task counts grouped by status or priority."""
    counter = get_container().aggregate_counter
    if dimension == "status":
        counts = run_async(counter.status_counts())
    else:
        counts = run_async(counter.priority_counts())
    output = {key.value: count for key, count in counts.items()}

    if output_json:
        click.echo(json.dumps(output, indent=2))
        return

    if not output:
        click.echo("No tasks found.")
        return

    for value, count in output.items():
        click.echo(f"{value}: {count}")


@cli.command("count")
@click.option("--status", "-s", help="Count tasks with this status")
@click.option("--priority", "-p", help="Count tasks with this priority")
def show_count(status: Optional[str], priority: Optional[str]):
    """Count tasks with one status or one priority."""
    if bool(status) == bool(priority):
        click.echo("Pass exactly one of --status or --priority", err=True)
        return

    counter = get_container().aggregate_counter
    if status:
        try:
            task_status = TaskStatus(status)
        except ValueError:
            click.echo(f"Invalid status: {status}", err=True)
            return
        count = run_async(counter.count_by_status(task_status))
        click.echo(f"{task_status.value}: {count}")
    else:
        try:
            task_priority = TaskPriority(priority)
        except ValueError:
            click.echo(f"Invalid priority: {priority}", err=True)
            return
        count = run_async(counter.count_by_priority(task_priority))
        click.echo(f"{task_priority.value}: {count}")


def _http_client(base_url: str) -> httpx.AsyncClient:
    return httpx.AsyncClient(base_url=base_url, timeout=10.0)


def _server_url() -> str:
    settings = get_container().settings
    host = "127.0.0.1" if settings.host in ("0.0.0.0", "::") else settings.host
    return f"http://{host}:{settings.port}"


@cli.command("invalidate")
@click.argument("tags", nargs=-1, required=True)
@click.option("--url", default=None, help="Base URL of the running API server")
def invalidate(tags: tuple[str, ...], url: Optional[str]):
    """Invalidate cached aggregates by tag on the running server."""
    base_url = url or _server_url()

    async def _post() -> int:
        async with _http_client(base_url) as client:
            response = await client.post(
                "/tasks/cache/invalidate", json={"tags": list(tags)}
            )
            response.raise_for_status()
            return response.json()["invalidated"]

    try:
        removed = run_async(_post())
    except httpx.HTTPError as e:
        click.echo(f"Could not invalidate on {base_url}: {e}", err=True)
        raise SystemExit(1)
    click.echo(f"Invalidated {removed} cached aggregate(s)")


@cli.command("serve")
@click.option("--host", "-h", default=None, help="Host to bind to")
@click.option("--port", "-p", default=None, type=int, help="Port to bind to")
@click.option("--reload", is_flag=True, help="Enable auto-reload")
def serve(host: Optional[str], port: Optional[int], reload: bool):
    """Start the API server."""
    import uvicorn

    settings = get_container().settings
    host = host or settings.host
    port = port or settings.port

    click.echo(f"Starting server at http://{host}:{port}")
    click.echo("Press Ctrl+C to stop")

    uvicorn.run(
        "taskboard.api.app:app",
        host=host,
        port=port,
        reload=reload,
    )


def main():
    cli()


if __name__ == "__main__":
    main()
