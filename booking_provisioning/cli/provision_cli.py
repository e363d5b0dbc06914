# booking_provisioning/cli/provision_cli.py
import typer
from typing import Annotated, Optional, Dict, Any

from .utils_cli import make_api_request
from ..utils.security import generate_fernet_key


def provision(
    business_name: Annotated[str, typer.Option("--business-name", prompt="Business name")],
    owner_email: Annotated[str, typer.Option("--owner-email", prompt="Owner email")],
    owner_phone: Annotated[str, typer.Option("--owner-phone", prompt="Owner phone")],
    tier: Annotated[str, typer.Option(help="starter, professional or business.")] = "starter",
    category: Annotated[str, typer.Option("--category", help="Business category, e.g. 'Nail Salon'.")] = "Other",
    owner_name: Annotated[Optional[str], typer.Option("--owner-name", help="Owner full name.")] = None,
    payment_method: Annotated[
        Optional[str], typer.Option("--payment-method", help="Processor payment method id.")
    ] = None,
    test_mode: Annotated[bool, typer.Option("--test-mode", help="Skip card validation (non-production only).")] = False,
    existing_number: Annotated[
        Optional[str],
        typer.Option("--existing-number", help="Forward an existing number instead of leasing a new one.")
    ] = None,
    after_hours: Annotated[bool, typer.Option("--after-hours", help="Forward after-hours calls.")] = False,
    complex_calls: Annotated[bool, typer.Option("--complex-calls", help="Forward complex calls.")] = False,
    legacy: Annotated[bool, typer.Option("--legacy", help="Use the legacy onboarding flow.")] = False,
):
    """Provision a new tenant through the API."""
    payload: Dict[str, Any] = {
        "businessName": business_name,
        "ownerEmail": owner_email,
        "ownerPhone": owner_phone,
        "businessCategory": category,
        "tier": tier,
        "testMode": test_mode,
        "flow": "legacy_onboarding" if legacy else "rapid_setup",
    }
    if owner_name:
        payload["ownerName"] = owner_name
    if payment_method:
        payload["paymentMethodRef"] = payment_method
    if existing_number:
        payload["telephonyStrategy"] = "use_existing"
        payload["existingNumber"] = existing_number
        payload["forwardingRules"] = {"afterHours": after_hours, "complexCalls": complex_calls}

    # Provisioning spans several external platforms
    make_api_request("POST", "/provision", json_payload=payload, timeout=120)


def descriptor():
    """Show the provisioning service capability descriptor."""
    make_api_request("GET", "/provision")


def generate_key():
    """Generate a Fernet key for ENCRYPTION_KEY."""
    key = generate_fernet_key()
    typer.echo("Generated Fernet Key:")
    typer.echo(key)
    typer.echo("Add this to your .env file as ENCRYPTION_KEY")
