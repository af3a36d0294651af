"""CLI for the ``bank_import`` package.

Command handlers (``cmd_import`` etc.) hold the logic and return an exit
status; the Typer commands below only translate options. Environment
variables (``BANK_IMPORT_*``, ``DATABASE_URL``) may come from a local
``.env`` loaded with ``python-dotenv`` before any settings are resolved.
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from dotenv import load_dotenv
from typer.models import OptionInfo

from .config import ImportSettings
from .errors import CsvImportError
from .ledger import TransactionLedger, open_ledger
from .logging_setup import configure_logging, get_logger
from .normalizers import format_amount
from .reports import filter_by_month, summarize

_logger = get_logger("bank_import.cli")


def _ledger(
    *,
    store_path: Path | None,
    database_url: str | None,
    default_currency: str | None = None,
) -> TransactionLedger:
    settings = ImportSettings.from_env(
        default_currency=default_currency,
        store_path=store_path,
        database_url=database_url,
    )
    return open_ledger(settings)


# ---- Command handlers ----------------------------------------------------------


def cmd_import(
    csv_path: str,
    *,
    store_path: Path | None = None,
    database_url: str | None = None,
    default_currency: str | None = None,
) -> int:
    """Import one CSV export and merge it into the stored collection.

    Prints ``added=<n> skipped=<n> total=<n>`` on success. Fatal import errors
    go to stderr with a non-zero status and leave storage untouched.
    """

    ledger = _ledger(
        store_path=store_path, database_url=database_url, default_currency=default_currency
    )
    try:
        result = ledger.import_path(csv_path)
    except FileNotFoundError:
        typer.echo(f"Error: File not found: {csv_path}", err=True)
        return 1
    except PermissionError:
        typer.echo(f"Error: Permission denied: {csv_path}", err=True)
        return 1
    except CsvImportError as e:
        _logger.debug("import of %s aborted", csv_path, exc_info=True)
        typer.echo(f"Error: CSV could not be processed: {e}", err=True)
        return 1

    typer.echo(
        f"added={result.added} skipped={result.skipped_duplicates} "
        f"total={len(result.transactions)}"
    )
    return 0


def cmd_summary(
    *,
    month: str | None = None,
    store_path: Path | None = None,
    database_url: str | None = None,
) -> int:
    ledger = _ledger(store_path=store_path, database_url=database_url)
    txs = ledger.transactions
    summary = summarize(txs, month=month)
    currency = txs[0].currency if txs else ledger.default_currency

    t = summary.totals
    typer.echo(f"transactions\t{summary.count}")
    typer.echo(f"income\t{format_amount(t.income)} {currency}")
    typer.echo(f"expense\t{format_amount(t.expense)} {currency}")
    typer.echo(f"balance\t{format_amount(t.balance)} {currency}")
    for row in summary.categories:
        typer.echo(
            f"category\t{row.label}\t{format_amount(row.income)}\t"
            f"{format_amount(-row.expense)}\t{format_amount(row.net)}"
        )
    return 0


def cmd_list(
    *,
    month: str | None = None,
    limit: int | None = None,
    store_path: Path | None = None,
    database_url: str | None = None,
) -> int:
    ledger = _ledger(store_path=store_path, database_url=database_url)
    rows = filter_by_month(ledger.transactions, month)
    if limit is not None:
        rows = rows[:limit]
    for tx in rows:
        typer.echo(
            f"{tx.booking_date}\t{format_amount(tx.amount)}\t{tx.currency}\t"
            f"{tx.category}\t{tx.description}"
        )
    return 0


def cmd_clear(*, store_path: Path | None = None, database_url: str | None = None) -> int:
    _ledger(store_path=store_path, database_url=database_url).clear()
    typer.echo("Stored transactions removed.")
    return 0


# ---- Typer app -------------------------------------------------------------------

app = typer.Typer(
    name="bank-import",
    help="Import bank CSV exports into a de-duplicated transaction store.",
    no_args_is_help=False,
    add_completion=False,
)

# Module-level option objects (no calls in parameter defaults). Inside
# ``Annotated`` the first positional argument is the option name.
CSV_PATH_OPTION: OptionInfo = typer.Option(
    "--csv-path",
    help="Path to a bank CSV export",
    dir_okay=False,
    file_okay=True,
    exists=False,  # the handler reports missing files itself
)
STORE_PATH_OPTION: OptionInfo = typer.Option(
    "--store-path",
    help="File store location (falls back to BANK_IMPORT_STORE_PATH).",
    dir_okay=False,
)
DATABASE_URL_OPTION: OptionInfo = typer.Option(
    "--database-url",
    help="Use SQL storage at this URL (falls back to DATABASE_URL).",
)
MONTH_OPTION: OptionInfo = typer.Option("--month", help="Restrict to one YYYY-MM month.")


def _exit(code: int) -> None:
    if code:
        raise typer.Exit(code)


@app.command("import")
def import_cmd(
    csv_path: Annotated[Path, CSV_PATH_OPTION],
    store_path: Annotated[Path | None, STORE_PATH_OPTION] = None,
    database_url: Annotated[str | None, DATABASE_URL_OPTION] = None,
    default_currency: str | None = typer.Option(
        None, help="Currency for rows without one (falls back to BANK_IMPORT_DEFAULT_CURRENCY)."
    ),
) -> None:
    _exit(
        cmd_import(
            str(csv_path),
            store_path=store_path,
            database_url=database_url,
            default_currency=default_currency,
        )
    )


@app.command("summary")
def summary_cmd(
    month: Annotated[str | None, MONTH_OPTION] = None,
    store_path: Annotated[Path | None, STORE_PATH_OPTION] = None,
    database_url: Annotated[str | None, DATABASE_URL_OPTION] = None,
) -> None:
    _exit(cmd_summary(month=month, store_path=store_path, database_url=database_url))


@app.command("list")
def list_cmd(
    month: Annotated[str | None, MONTH_OPTION] = None,
    limit: int | None = typer.Option(None, min=1, help="Print at most N transactions."),
    store_path: Annotated[Path | None, STORE_PATH_OPTION] = None,
    database_url: Annotated[str | None, DATABASE_URL_OPTION] = None,
) -> None:
    _exit(cmd_list(month=month, limit=limit, store_path=store_path, database_url=database_url))


@app.command("clear")
def clear_cmd(
    store_path: Annotated[Path | None, STORE_PATH_OPTION] = None,
    database_url: Annotated[str | None, DATABASE_URL_OPTION] = None,
) -> None:
    _exit(cmd_clear(store_path=store_path, database_url=database_url))


@app.callback(invoke_without_command=True)
def _root(ctx: typer.Context) -> None:
    """Load ``.env`` from the working directory and configure logging."""

    load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)
    configure_logging()

    if ctx.invoked_subcommand is None:
        typer.echo("No subcommand provided. Use --help to see available commands.")
        raise typer.Exit(1)


def main() -> None:
    app()


if __name__ == "__main__":  # pragma: no cover - exercised via console script
    main()
