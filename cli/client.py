from __future__ import annotations

from datetime import datetime
from typing import Any, Dict

import httpx
import typer

from cli.config import CLIConfig


class ApiClient:
    """Minimal HTTP client for the transaction stats service."""

    def __init__(self, config: CLIConfig) -> None:
        self._config = config
        self._client = httpx.Client(base_url=config.base_url, timeout=config.timeout)

    def close(self) -> None:
        self._client.close()

    def send_transaction(self, amount: float, timestamp: datetime) -> bool:
        """Post a transaction; returns False when the service discarded it as stale."""
        response = self._request(
            "POST",
            "/transactions",
            json={"amount": amount, "timestamp": timestamp.isoformat()},
        )
        return response.status_code == 201

    def get_statistics(self) -> Dict[str, Any]:
        response = self._request("GET", "/statistics")
        return response.json()

    def reset_statistics(self) -> None:
        self._request("DELETE", "/reset")

    def set_location(self, city: str) -> None:
        self._request("POST", "/location", json={"city": city})

    def reset_location(self) -> None:
        self._request("DELETE", "/location/reset")

    def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        try:
            response = self._client.request(method, path, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            self._handle_http_error(exc)
        except httpx.TransportError as exc:
            typer.secho(
                f"Could not reach {self._config.base_url}: {exc}",
                fg=typer.colors.RED,
                err=True,
            )
            raise typer.Exit(code=1) from exc
        return response

    @staticmethod
    def _handle_http_error(exc: httpx.HTTPStatusError) -> None:
        detail: Any = None
        try:
            data = exc.response.json()
            detail = data.get("detail")
        except Exception:  # noqa: BLE001 - best effort parsing
            detail = exc.response.text.strip()
        message = (
            f"Request failed with status {exc.response.status_code}: {detail or 'no detail provided.'}"
        )
        typer.secho(message, fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
