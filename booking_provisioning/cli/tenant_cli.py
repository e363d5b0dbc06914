# booking_provisioning/cli/tenant_cli.py
import typer
from typing import Annotated

from .utils_cli import make_api_request

app = typer.Typer(
    name="tenant",
    help="Inspect provisioned tenants via the Admin API.",
    no_args_is_help=True
)


@app.command("get")
def get_tenant(
    tenant_id: Annotated[str, typer.Argument(help="The ID of the tenant to retrieve.")]
):
    """Get details for a specific tenant."""
    make_api_request("GET", f"/admin/tenants/{tenant_id}")


@app.command("list")
def list_tenants(
    skip: Annotated[
        int,
        typer.Option("--skip", help="Number of tenants to skip.", min=0)
    ] = 0,
    limit: Annotated[
        int,
        typer.Option("--limit", help="Maximum number of tenants to return.", min=1, max=100)
    ] = 100
):
    """List tenants, newest first."""
    make_api_request("GET", "/admin/tenants/", params_payload={"skip": skip, "limit": limit})


@app.command("status")
def provisioning_status(
    tenant_id: Annotated[str, typer.Argument(help="The ID of the tenant to inspect.")]
):
    """Show the stored provisioning outcome, failure reason and warnings of a tenant."""
    make_api_request("GET", f"/admin/tenants/{tenant_id}/provisioning")
