from typing import Any, TypeVar
from urllib.parse import quote

from pydantic import BaseModel

from tfadopt.utils.cloudflare.models import (
    AccessApplication,
    AccessPolicy,
    DnsRecord,
    IdentityProvider,
)
from tfadopt.utils.exceptions import ApiError
from tfadopt.utils.rest_api_base import ApiBase, BearerTokenAuth

CLOUDFLARE_API_URL = "https://api.cloudflare.com/client/v4/"

ModelT = TypeVar("ModelT", bound=BaseModel)


def _q(value: str) -> str:
    return quote(value, safe="")


class CloudflareClient(ApiBase):
    """Read-only client for the Cloudflare v4 API.

    List calls return every object the API hands back, in API order.
    Targeted getters return None when the object is gone.
    """

    def __init__(
        self,
        token: str,
        host: str = CLOUDFLARE_API_URL,
        read_timeout: float | None = None,
    ) -> None:
        super().__init__(
            host=host,
            auth=BearerTokenAuth(token),
            max_retries=0,
            read_timeout=read_timeout,
        )

    def _result(self, url: str, params: dict | None = None) -> Any:
        data = self._get(url, params=params)
        if not isinstance(data, dict) or data.get("success") is not True:
            raise ApiError(200, data)
        return data.get("result")

    def _list_of(
        self, model: type[ModelT], url: str, params: dict | None = None
    ) -> list[ModelT]:
        result = self._result(url, params=params)
        if not isinstance(result, list):
            return []
        return [model(**r) for r in result if isinstance(r, dict) and r.get("id")]

    def _one_of(self, model: type[ModelT], url: str) -> ModelT | None:
        try:
            result = self._result(url)
        except ApiError as e:
            if e.status_code == 404:
                return None
            raise
        if not isinstance(result, dict) or not result.get("id"):
            return None
        return model(**result)

    def access_applications(
        self, account_id: str, domain: str
    ) -> list[AccessApplication]:
        """List Access applications filtered by domain on the API side."""
        return self._list_of(
            AccessApplication,
            f"accounts/{_q(account_id)}/access/apps",
            params={"domain": domain},
        )

    def access_application(
        self, account_id: str, app_id: str
    ) -> AccessApplication | None:
        return self._one_of(
            AccessApplication,
            f"accounts/{_q(account_id)}/access/apps/{_q(app_id)}",
        )

    def zone_id(self, name: str) -> str | None:
        """Return the id of the first active zone called name."""
        result = self._result("zones", params={"name": name, "status": "active"})
        for zone in result or []:
            if isinstance(zone, dict) and zone.get("id"):
                return zone["id"]
        return None

    def dns_records(
        self, zone_id: str, record_type: str, name: str
    ) -> list[DnsRecord]:
        return self._list_of(
            DnsRecord,
            f"zones/{_q(zone_id)}/dns_records",
            params={"type": record_type, "name": name},
        )

    def dns_record(self, zone_id: str, record_id: str) -> DnsRecord | None:
        return self._one_of(
            DnsRecord, f"zones/{_q(zone_id)}/dns_records/{_q(record_id)}"
        )

    def identity_providers(self, account_id: str) -> list[IdentityProvider]:
        return self._list_of(
            IdentityProvider, f"accounts/{_q(account_id)}/access/identity_providers"
        )

    def identity_provider(
        self, account_id: str, idp_id: str
    ) -> IdentityProvider | None:
        return self._one_of(
            IdentityProvider,
            f"accounts/{_q(account_id)}/access/identity_providers/{_q(idp_id)}",
        )

    def access_policies(self, account_id: str) -> list[AccessPolicy]:
        return self._list_of(AccessPolicy, f"accounts/{_q(account_id)}/access/policies")

    def access_policy(self, account_id: str, policy_id: str) -> AccessPolicy | None:
        return self._one_of(
            AccessPolicy,
            f"accounts/{_q(account_id)}/access/policies/{_q(policy_id)}",
        )
