from typing import Annotated

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from linodebatch.client import Client
from linodebatch.exceptions import LinodeBatchError
from linodebatch.utils.logging import setup_logging

app = typer.Typer(no_args_is_help=True)

ApiKeyOption = Annotated[
    str | None,
    typer.Option(
        "--api-key",
        help="Optional, the API key to use if LINODE_API_KEY is not set in the environment or .env file",
    ),
]


@app.callback()
def main(
    verbose: Annotated[
        bool, typer.Option("-v", "--verbose", help="Log batch requests to stderr")
    ] = False,
):
    """Query the Linode API with batched requests"""
    load_dotenv()
    setup_logging(verbose=verbose)


def build_client(api_key: str | None) -> Client:
    try:
        return Client.from_env(api_key=api_key)
    except LinodeBatchError as error:
        typer.echo(str(error), err=True)
        raise typer.Exit(1) from error


@app.command(name="linodes")
def list_linodes(api_key: ApiKeyOption = None):
    """List linodes ordered by display group and label"""
    client = build_client(api_key=api_key)
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        transient=True,
    ) as progress:
        progress.add_task(description="Retrieving linodes...", total=None)
        try:
            linodes = client.linode_list()
        except LinodeBatchError as error:
            typer.echo(f"Unable to list linodes: {error}", err=True)
            raise typer.Exit(1) from error

    table = Table("ID", "Label", "Display Group", "Status", "RAM", title="Linodes")
    for linode in linodes:
        status = "[green]running[/green]" if linode.is_running else str(linode.status)
        table.add_row(str(linode.id), linode.label, linode.display_group, status, str(linode.ram))
    console = Console()
    console.print(table)


@app.command(name="ips")
def list_ips(
    linode_ids: Annotated[list[int], typer.Argument(help="The IDs of the linodes")],
    api_key: ApiKeyOption = None,
):
    """List IP addresses of linodes, private addresses first"""
    client = build_client(api_key=api_key)
    try:
        ips_by_linode = client.linode_ip_list(linode_ids)
    except LinodeBatchError as error:
        typer.echo(f"Unable to list IPs: {error}", err=True)
        raise typer.Exit(1) from error

    table = Table("Linode ID", "IP Address", "Visibility", title="Linode IPs")
    for linode_id in sorted(ips_by_linode):
        for ip in ips_by_linode[linode_id]:
            visibility = "public" if ip.is_public else "private"
            table.add_row(str(linode_id), ip.ip, visibility)
    console = Console()
    console.print(table)
