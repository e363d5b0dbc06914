# booking_provisioning/cli/main_cli.py
import typer

from . import provision_cli, tenant_cli

app = typer.Typer(
    name="booking-provisioner",
    help="Provision and inspect booking platform tenants through the HTTP API.",
    no_args_is_help=True
)

# Admin routes need ADMIN_API_KEY in the CLI's .env
admin_app = typer.Typer(name="admin", help="Tenant inspection via the Admin API.", no_args_is_help=True)
admin_app.add_typer(tenant_cli.app, name="tenant")

app.add_typer(admin_app, name="admin")
app.command("provision")(provision_cli.provision)
app.command("descriptor")(provision_cli.descriptor)
app.command("generate-key")(provision_cli.generate_key)


def cli_entry_point():
    """Console script target declared in pyproject.toml."""
    app()


if __name__ == "__main__":
    cli_entry_point()
