from __future__ import annotations

import asyncio
import base64
import json
import logging
from datetime import datetime, timezone
from typing import Any, Literal, get_args

import aiohttp
import yarl

from .exceptions import (
    NeurioConnectionError,
    NeurioFetchError,
    NeurioInvalidParametersError,
    NeurioMissingCredentialsError,
    NeurioMissingParametersError,
    NeurioNotConnectedError,
)

BASE_URL = yarl.URL("https://api-staging.neur.io/v1")

Granularity = Literal["seconds", "minutes", "hours", "days"]
GRANULARITIES: tuple[str, ...] = get_args(Granularity)

_TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%SZ"

_LOGGER = logging.getLogger(__name__)


def _format_timestamp(value: str | datetime) -> str:
    """Render a timestamp as yyyy-mm-ddThh:mm:ssZ, assuming UTC when naive."""
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc).strftime(_TIMESTAMP_FORMAT)
    return value


class Neurio:
    """Neurio API client."""

    def __init__(
        self,
        key: str,
        secret: str,
        sensor_id: str,
        session: aiohttp.ClientSession | None = None,
        timeout: int = 10,
        base_url: str | yarl.URL = BASE_URL,
    ) -> None:
        """
        Initialize the Neurio API client.

        :param key: The client ID of the API application.
        :param secret: The client secret of the API application.
        :param sensor_id: The ID of the sensor to fetch data for.
        :param session: An optional aiohttp session, owned by the caller.
        :param timeout: Request timeout in seconds.
        :param base_url: The root of the Neurio API.
        :raises NeurioMissingCredentialsError: If any credential is empty.
        """
        if not key or not secret or not sensor_id:
            raise NeurioMissingCredentialsError(
                "Key, secret and sensor ID are required"
            )

        self.key = key
        self.secret = secret
        self.sensor_id = sensor_id
        self.basic_auth = base64.b64encode(f"{key}:{secret}".encode()).decode()
        self.base_url = yarl.URL(base_url)
        self.session = session or aiohttp.ClientSession()
        self._created_session = not session
        self.timeout = timeout
        self._access_token: str | None = None

    @property
    def access_token(self) -> str | None:
        """Get the bearer token obtained by connect()."""
        return self._access_token

    @property
    def connected(self) -> bool:
        """Whether connect() has succeeded."""
        return bool(self._access_token)

    async def close(self) -> None:
        """Close the Neurio API client."""
        if self._created_session:
            await self.session.close()

    async def __aenter__(self) -> Neurio:
        """Enter the client context."""
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        """Close the client when leaving the context."""
        await self.close()

    async def connect(self) -> dict[str, Any]:
        """
        Fetch an access token with the client credentials grant.

        The token is stored on the client and sent with every fetch call.

        :returns: The decoded token response.
        :raises NeurioConnectionError: If the token request fails.
        """
        url = self.base_url.joinpath("oauth2", "token")
        _LOGGER.debug("Fetching access token from %s", url)
        try:
            async with self.session.post(
                url,
                headers={"Authorization": f"Basic {self.basic_auth}"},
                data={
                    "grant_type": "client_credentials",
                    "client_id": self.key,
                    "client_secret": self.secret,
                },
                timeout=aiohttp.ClientTimeout(total=self.timeout),
            ) as response:
                _LOGGER.debug("Response from %s: %s", url, response.status)
                body = await response.read()
                if not 200 <= response.status < 300:
                    text = body.decode(errors="replace")
                    _LOGGER.error(
                        "Neurio token request failed: %s - %s", response.status, text
                    )
                    raise NeurioConnectionError(
                        f"Neurio token request failed: {response.status} - {text}"
                    )
        except (aiohttp.ClientError, asyncio.TimeoutError) as err:
            _LOGGER.error("Neurio token request failed: %s", err)
            raise NeurioConnectionError(f"Neurio token request failed: {err}") from err

        try:
            result = json.loads(body)
        except ValueError as err:
            _LOGGER.error("Neurio token response is not JSON: %s", err)
            raise NeurioConnectionError("Neurio token response is not JSON") from err

        if not isinstance(result, dict) or not result.get("access_token"):
            _LOGGER.error("Neurio token response has no access_token")
            raise NeurioConnectionError("Neurio token response has no access_token")

        self._access_token = result["access_token"]
        _LOGGER.debug("Neurio token request successful")
        return result

    async def fetch_last_live(self) -> Any:
        """Get the last live sample of the sensor."""
        return await self._get_json(
            self._build_url(("samples", "live", "last"), {})
        )

    async def fetch_recent_live(self, last: str | datetime | None = None) -> Any:
        """
        Get the recent live samples of the sensor.

        :param last: Only return samples taken after this time.
        """
        params = {}
        if last:
            params["last"] = _format_timestamp(last)
        return await self._get_json(self._build_url(("samples", "live"), params))

    async def fetch_samples(
        self,
        start: str | datetime | None = None,
        granularity: Granularity | None = None,
        end: str | datetime | None = None,
        frequency: int | None = None,
    ) -> Any:
        """
        Get samples aggregated at the given granularity.

        :param start: The start of the time range.
        :param granularity: One of seconds, minutes, hours or days.
        :param end: The end of the time range, defaults to now on the server.
        :param frequency: The number of granularity units per sample.
        :raises NeurioMissingParametersError: If start or granularity is missing.
        """
        return await self._get_json(
            self._aggregate_url(("samples",), start, granularity, end, frequency)
        )

    async def fetch_full_samples(
        self,
        start: str | datetime | None = None,
        granularity: Granularity | None = None,
        end: str | datetime | None = None,
        frequency: int | None = None,
    ) -> Any:
        """
        Get samples with per-phase readings.

        Takes the same parameters as fetch_samples().
        """
        return await self._get_json(
            self._aggregate_url(
                ("samples", "full"), start, granularity, end, frequency
            )
        )

    async def fetch_energy_stats(
        self,
        start: str | datetime | None = None,
        granularity: Granularity | None = None,
        end: str | datetime | None = None,
        frequency: int | None = None,
    ) -> Any:
        """
        Get energy statistics.

        Takes the same parameters as fetch_samples().
        """
        return await self._get_json(
            self._aggregate_url(
                ("samples", "stats"), start, granularity, end, frequency
            )
        )

    def _build_url(self, path: tuple[str, ...], params: dict[str, Any]) -> yarl.URL:
        """Build an API URL whose query starts with the sensor ID."""
        query: dict[str, Any] = {"sensorId": self.sensor_id}
        query.update(params)
        return self.base_url.joinpath(*path).with_query(query)

    def _aggregate_url(
        self,
        path: tuple[str, ...],
        start: str | datetime | None,
        granularity: str | None,
        end: str | datetime | None,
        frequency: int | None,
    ) -> yarl.URL:
        """Validate the aggregate query parameters and build the URL."""
        if not start or not granularity:
            raise NeurioMissingParametersError("Start and granularity are required")
        if granularity not in GRANULARITIES:
            raise NeurioInvalidParametersError(
                f"Granularity must be one of {', '.join(GRANULARITIES)}, "
                f"not {granularity!r}"
            )

        params: dict[str, Any] = {
            "start": _format_timestamp(start),
            "granularity": granularity,
        }
        if end:
            params["end"] = _format_timestamp(end)
        if frequency is not None:
            if (
                isinstance(frequency, bool)
                or not isinstance(frequency, int)
                or frequency <= 0
            ):
                raise NeurioInvalidParametersError(
                    f"Frequency must be a positive integer: {frequency!r}"
                )
            params["frequency"] = frequency

        return self._build_url(path, params)

    async def _get_json(self, url: yarl.URL) -> Any:
        """Get JSON from the Neurio API."""
        if not self._access_token:
            raise NeurioNotConnectedError("Not connected. Call connect() first.")

        _LOGGER.debug("Calling %s", url)
        try:
            async with self.session.get(
                url,
                headers={"Authorization": f"Bearer {self._access_token}"},
                timeout=aiohttp.ClientTimeout(total=self.timeout),
            ) as response:
                _LOGGER.debug("Response from %s: %s", url, response.status)
                body = await response.read()
                if not 200 <= response.status < 300:
                    text = body.decode(errors="replace")
                    _LOGGER.error(
                        "Request to %s failed: %s - %s", url.path, response.status, text
                    )
                    raise NeurioFetchError(
                        f"Request to {url.path} failed: {response.status} - {text}"
                    )
        except (aiohttp.ClientError, asyncio.TimeoutError) as err:
            _LOGGER.error("Request to %s failed: %s", url.path, err)
            raise NeurioFetchError(f"Request to {url.path} failed: {err}") from err

        try:
            result = json.loads(body)
        except ValueError as err:
            _LOGGER.error("Response from %s is not JSON: %s", url.path, err)
            raise NeurioFetchError(f"Response from {url.path} is not JSON") from err

        _LOGGER.debug("JSON from %s: %s", url, result)
        return result
