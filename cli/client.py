from __future__ import annotations

from typing import Any, Dict, List

import httpx
import typer

from cli.config import CLIConfig


class ApiClient:
    """Minimal HTTP client for the monitor service."""

    def __init__(self, config: CLIConfig) -> None:
        self._config = config
        self._client = httpx.Client(base_url=config.base_url, timeout=config.timeout)

    def close(self) -> None:
        self._client.close()

    def get_status(self) -> Dict[str, Any]:
        return self._request("GET", "/status")

    def get_history(self, window: str) -> List[Dict[str, Any]]:
        payload = self._request("GET", "/history", params={"window": window})
        if not isinstance(payload, list):
            raise typer.BadParameter("Unexpected response payload when fetching history.")
        return payload

    def set_power(self, on: bool) -> Dict[str, Any]:
        return self._request("POST", "/system/power", json={"on": on})

    def set_mode(self, auto: bool) -> Dict[str, Any]:
        return self._request("POST", "/system/mode", json={"auto": auto})

    def set_valve(self, valve: str, open_: bool) -> Dict[str, Any]:
        return self._request("POST", f"/valves/{valve}", json={"open": open_})

    def _request(self, method: str, url: str, **kwargs: Any) -> Any:
        try:
            response = self._client.request(method, url, **kwargs)
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
        return response.json()

    @staticmethod
    def _handle_http_error(exc: httpx.HTTPStatusError) -> None:
        detail: str | None = None
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
