"""Typer-based developer CLI.

Crafts signed test requests for the callback endpoints and runs the server.
"""

import os

os.environ.setdefault("LOGFIRE_IGNORE_NO_CONFIG", "1")

import secrets
import string
import sys
import time
from pathlib import Path
from typing import Optional

import typer

from fb_callbacks.constants import (
    DEFAULT_SIGNED_REQUEST_ALGORITHM,
    SIGNATURE_HEADER_NAME,
    VERIFY_TOKEN_LENGTH,
)
from fb_callbacks.services.hub_signature import signature_header_value
from fb_callbacks.services.signed_request import encode_signed_request

app = typer.Typer(help="Facebook callback tooling.")

# Characters easily confused with each other are left out
VERIFY_TOKEN_ALPHABET = "".join(
    c for c in string.ascii_letters + string.digits if c not in "0O1lI"
)


def generate_verify_token(length: int = VERIFY_TOKEN_LENGTH) -> str:
    """Random verify token for a new webhook subscription."""
    return "".join(secrets.choice(VERIFY_TOKEN_ALPHABET) for _ in range(length))


@app.command("verify-token")
def verify_token(
    length: int = typer.Option(VERIFY_TOKEN_LENGTH, min=8, help="Token length"),
):
    """Print a new random webhook verify token."""
    typer.echo(generate_verify_token(length))


@app.command("sign-request")
def sign_request(
    user_id: int = typer.Option(..., min=0, help="Facebook user id"),
    secret: str = typer.Option(..., envvar="FACEBOOK_APP_SECRET", help="App secret"),
    issued_at: Optional[int] = typer.Option(
        None, help="Unix timestamp (defaults to now)"
    ),
    form: bool = typer.Option(False, "--form", help="Print as a form body"),
):
    """Print a deauthorization signed request."""
    token = encode_signed_request(
        {
            "user_id": str(user_id),
            "algorithm": DEFAULT_SIGNED_REQUEST_ALGORITHM,
            "issued_at": issued_at if issued_at is not None else int(time.time()),
        },
        secret,
    )
    typer.echo(f"signed_request={token}" if form else token)


@app.command("sign-body")
def sign_body(
    secret: str = typer.Option(..., envvar="FACEBOOK_APP_SECRET", help="App secret"),
    body_file: Optional[Path] = typer.Argument(
        None, exists=True, dir_okay=False, help="Body file (stdin when omitted)"
    ),
):
    """Print the X-Hub-Signature header for a webhook body."""
    body = body_file.read_bytes() if body_file else sys.stdin.buffer.read()
    typer.echo(f"{SIGNATURE_HEADER_NAME}: {signature_header_value(body, secret)}")


@app.command()
def serve(
    host: str = typer.Option("0.0.0.0", help="Bind address"),
    port: int = typer.Option(8000, envvar="PORT", help="Bind port"),
    reload: bool = typer.Option(False, help="Reload on code changes"),
):
    """Run the callback service with uvicorn."""
    import uvicorn

    uvicorn.run("fb_callbacks.main:app", host=host, port=port, reload=reload)


if __name__ == "__main__":
    app()
