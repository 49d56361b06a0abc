import logging
from typing import Any, Self
from urllib.parse import urljoin

import requests
from urllib3 import Retry

from tfadopt.utils.exceptions import ApiError, TransportError


class BearerTokenAuth(requests.auth.AuthBase):
    """Use this class to add a Bearer token to the request headers."""

    def __init__(self, token: str):
        self.token = token

    def __eq__(self, other: Any) -> bool:
        return self.token == getattr(other, "token", None)

    def __ne__(self, other: Any) -> bool:
        return not self == other

    def __call__(self, r: requests.PreparedRequest) -> requests.PreparedRequest:
        r.headers["Authorization"] = f"Bearer {self.token}"
        return r


class ApiBase:
    """This class provides a common standard for read-only REST API clients."""

    def __init__(
        self,
        host: str,
        auth: requests.auth.AuthBase | None = None,
        max_retries: int | Retry | None = None,
        read_timeout: float | None = None,
        session: requests.Session | None = None,
    ) -> None:
        self.host = host
        self.max_retries = max_retries if max_retries is not None else 3
        self.read_timeout = read_timeout
        self.session = session or requests.Session()
        if auth:
            self.session.auth = auth
        for prefix in ["http://", "https://"]:
            self.session.mount(
                prefix,
                requests.adapters.HTTPAdapter(max_retries=self.max_retries),
            )
        self.session.headers.update({
            "Content-Type": "application/json",
        })

    def __enter__(self) -> Self:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.cleanup()

    def cleanup(self) -> None:
        self.session.close()

    def _get(self, url: str, params: dict | None = None) -> Any:
        """GET url and return the decoded JSON body.

        Non-2xx answers raise ApiError, connection problems and undecodable
        bodies raise TransportError.
        """
        full_url = urljoin(self.host, url)
        try:
            response = self.session.get(
                full_url, params=params, timeout=self.read_timeout
            )
        except requests.exceptions.RequestException as e:
            raise TransportError(f"GET {full_url} failed: {e}") from e

        if not response.ok:
            raise ApiError(response.status_code, response.text)
        try:
            return response.json()
        except requests.exceptions.JSONDecodeError as e:
            logging.error(
                f"Failed to decode JSON response from {full_url} "
                f"Response: {response.text}"
            )
            raise TransportError(f"invalid JSON from {full_url}") from e
