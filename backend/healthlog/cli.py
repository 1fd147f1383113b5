from __future__ import annotations

from pathlib import Path
from typing import Any, List, Optional, Sequence

import typer

from . import config, storage
from .errors import NotFound
from .models import RecordKind, UserRecord
from .records import collection_for
from .registry import UserRegistry

app = typer.Typer(help="healthlog storage console")


def _render_table(headers: Sequence[str], rows: Sequence[Sequence[str]]) -> str:
    if not headers:
        return ""

    widths = [len(header) for header in headers]
    for row in rows:
        for idx, cell in enumerate(row):
            widths[idx] = max(widths[idx], len(cell))

    def build_border() -> str:
        return "+".join([""] + ["-" * (width + 2) for width in widths] + [""])

    def build_row(cells: Sequence[str]) -> str:
        content = "|".join(f" {cells[idx].ljust(widths[idx])} " for idx in range(len(headers)))
        return f"|{content}|"

    border = build_border()
    body = [build_row(row) for row in rows]
    return "\n".join([border, build_row(headers), border, *body, border])


def _stringify(value: Any) -> str:
    if value is None or value == "":
        return "-"
    if isinstance(value, float):
        return f"{value:.3f}".rstrip("0").rstrip(".")
    return str(value)


def _load(ctx: typer.Context) -> UserRegistry:
    return storage.load(ctx.obj)


def _user(ctx: typer.Context, name: str) -> UserRecord:
    try:
        return _load(ctx).get(name)
    except NotFound as exc:
        typer.echo(exc.message, err=True)
        raise typer.Exit(code=1)


@app.callback()
def main_callback(
    ctx: typer.Context,
    storage_path: Optional[Path] = typer.Option(None, "--storage", help="Storage file to read."),
) -> None:
    ctx.obj = storage_path or config.STORAGE_PATH


@app.command("serve")
def serve(
    host: str = typer.Option(config.HOST, help="Interface to bind."),
    port: int = typer.Option(config.PORT, help="Port to listen on."),
    reload: bool = typer.Option(False, "--reload", help="Restart on code changes."),
) -> None:
    """Run the HTTP API."""

    import uvicorn

    uvicorn.run("healthlog.main:app", host=host, port=port, reload=reload, log_level=config.LOG_LEVEL.lower())


@app.command("users")
def list_users(ctx: typer.Context) -> None:
    """List registered users with record counts."""

    registry = _load(ctx)
    if not len(registry):
        typer.echo("No users stored.")
        return

    headers = ["Name", "Age", "Weight kg", "Height m", "Gender", "Waters", "Sleeps", "Activities", "Categories"]
    rows = [
        [
            user.name,
            _stringify(user.age),
            _stringify(user.weight_kg),
            _stringify(user.height_m),
            _stringify(user.gender),
            str(len(user.waters)),
            str(len(user.sleeps)),
            str(len(user.activities)),
            str(len(user.categories)),
        ]
        for user in registry
    ]
    typer.echo(_render_table(headers, rows))


@app.command("show")
def show_user(ctx: typer.Context, name: str = typer.Argument(..., help="User name.")) -> None:
    """Show one user's profile and BMI."""

    user = _user(ctx, name)
    profile = user.profile()
    rows = [[key, _stringify(value)] for key, value in profile.to_document().items()]
    rows.append(["bmi", _stringify(profile.bmi())])
    typer.echo(_render_table(["Field", "Value"], rows))


@app.command("records")
def show_records(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="User name."),
    kind: RecordKind = typer.Option(RecordKind.water, "--kind", "-k", help="Record kind to list."),
) -> None:
    """List a user's water, sleep or activity records by index."""

    records = collection_for(_user(ctx, name), kind).list()
    typer.echo(f"{kind.value.title()} records for {name}")
    if not records:
        typer.echo("(none)")
        return

    documents = [record.to_document() for record in records]
    headers: List[str] = ["id", *documents[0].keys()]
    rows = [[str(index), *(_stringify(value) for value in document.values())] for index, document in enumerate(documents)]
    typer.echo(_render_table(headers, rows))


@app.command("categories")
def show_categories(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="User name."),
    category: Optional[str] = typer.Option(None, "--category", "-c", help="Show the items of one category."),
) -> None:
    """List a user's categories, or the items of one category."""

    user = _user(ctx, name)
    if category is None:
        if not user.categories:
            typer.echo("(none)")
            return
        rows = [[label, str(len(items))] for label, items in user.categories.items()]
        typer.echo(_render_table(["Category", "Items"], rows))
        return

    if category not in user.categories:
        typer.echo(f"Category '{category}' not found", err=True)
        raise typer.Exit(code=1)
    rows = [
        [str(index), _stringify(item.timestamp), _stringify(item.note), _stringify(item.value)]
        for index, item in enumerate(user.categories[category])
    ]
    typer.echo(_render_table(["id", "datetime", "note", "value"], rows))


if __name__ == "__main__":
    app()
