# booking_provisioning/cli/utils_cli.py
import requests
import typer
import json
from typing import Optional, Dict, Any, Union, List

from . import config


def _error_summary(response: requests.Response) -> str:
    try:
        err_data = response.json()
    except json.JSONDecodeError:
        return f"Raw response: {response.text}"
    if isinstance(err_data, dict):
        # Provisioning errors carry error/details/errorType; FastAPI errors carry detail
        if "details" in err_data:
            kind = f" [{err_data['errorType']}]" if err_data.get("errorType") else ""
            return f"{err_data.get('error', 'Error')}{kind}: {err_data['details']}"
        return f"Detail: {err_data.get('detail', response.text)}"
    return f"Raw response: {response.text}"


def make_api_request(
    method: str,
    endpoint: str,
    json_payload: Optional[Dict[str, Any]] = None,
    params_payload: Optional[Dict[str, Any]] = None,
    expected_status: Union[int, List[int]] = 200,
    timeout: float = 30,
) -> Any:
    """
    Makes an HTTP API request and echoes request and response details.

    Sends the admin API key when one is configured. Exits with code 1 on any
    unexpected status or connection failure.
    """
    full_url = f"{config.PROVISIONING_CLI_API_BASE_URL}{endpoint}"
    headers: Dict[str, str] = {}

    if config.PROVISIONING_CLI_ADMIN_API_KEY:
        headers["X-Admin-API-Key"] = config.PROVISIONING_CLI_ADMIN_API_KEY
    elif "/admin/" in endpoint:
        typer.secho(
            "CLI: Warning - ADMIN_API_KEY not set in .env for CLI. Admin API calls might fail.",
            fg=typer.colors.YELLOW
        )

    typer.echo(f"CLI: {method.upper()} {full_url}")
    if json_payload:
        typer.echo(f"CLI: JSON Payload: {json.dumps(json_payload, indent=2)}")
    if params_payload:
        typer.echo(f"CLI: Query Params: {params_payload}")

    try:
        response = requests.request(
            method,
            full_url,
            json=json_payload,
            params=params_payload,
            headers=headers,
            timeout=timeout
        )
    except requests.exceptions.ConnectionError as e:
        typer.secho(
            f"CLI: Connection Error - Could not connect to API at {full_url}. Is the server running? Error: {e}",
            fg=typer.colors.RED
        )
        raise typer.Exit(code=1)
    except requests.exceptions.RequestException as e:
        typer.secho(f"CLI: Request Error - {e}", fg=typer.colors.RED)
        raise typer.Exit(code=1)

    typer.echo(f"CLI: Response Status: {response.status_code}")
    expected_statuses = [expected_status] if isinstance(expected_status, int) else expected_status

    if response.status_code not in expected_statuses:
        typer.secho(
            f"CLI: API Error - Expected status {expected_status}, got {response.status_code}. "
            f"{_error_summary(response)}",
            fg=typer.colors.RED
        )
        raise typer.Exit(code=1)

    try:
        data = response.json()
    except json.JSONDecodeError:
        typer.secho(f"CLI: Error - Could not decode JSON response. Raw text: {response.text}", fg=typer.colors.RED)
        raise typer.Exit(code=1)
    typer.echo(typer.style("CLI: Response JSON:", fg=typer.colors.CYAN))
    typer.echo(json.dumps(data, indent=2))
    return data
