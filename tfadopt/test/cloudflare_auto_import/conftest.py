import os
from typing import Any
from unittest.mock import MagicMock, create_autospec

import pytest

from tfadopt.cloudflare_auto_import.config import (
    AutoImportSettings,
    CloudflareConfig,
)
from tfadopt.test.fixtures import Fixtures
from tfadopt.utils.cloudflare.client import CloudflareClient
from tfadopt.utils.exceptions import StateBackendError
from tfadopt.utils.terraform_state import split_address

APP_ADDRESS = "cloudflare_zero_trust_access_application.hp_access_application_0C7A6E3B"
DNS_ADDRESS = "cloudflare_dns_record.hp_subdomain_record_5F2B1C7A"
IDP_ADDRESS = (
    "cloudflare_zero_trust_access_identity_provider.hp_access_google_idp_4D9E2B10"
)
POLICY_ADDRESS = "cloudflare_zero_trust_access_policy.hp_access_policy_91C3D4E5"


class FakeStateBackend:
    """In-memory StateBackend keeping address -> id bindings."""

    def __init__(
        self,
        bindings: dict[str, str | None] | None = None,
        import_ok: bool = True,
        remove_ok: bool = True,
        pull_ok: bool = True,
    ) -> None:
        self.bindings = dict(bindings or {})
        self.pull_ok = pull_ok
        self.import_ok = import_ok
        self.remove_ok = remove_ok
        self.imports: list[tuple[str, str]] = []
        self.removals: list[str] = []
        self.init_calls = 0

    def init(self) -> bool:
        self.init_calls += 1
        return True

    def list_addresses(self) -> list[str]:
        return list(self.bindings)

    def pull_snapshot(self) -> dict[str, Any]:
        if not self.pull_ok:
            raise StateBackendError("state pull failed")
        resources = []
        for address, resource_id in self.bindings.items():
            resource_type, name = split_address(address)
            attributes = {"id": resource_id} if resource_id else {}
            resources.append({
                "mode": "managed",
                "type": resource_type,
                "name": name,
                "instances": [{"attributes": attributes}],
            })
        return {"version": 4, "resources": resources}

    def import_resource(self, address: str, import_id: str) -> bool:
        self.imports.append((address, import_id))
        if self.import_ok:
            self.bindings[address] = import_id.rsplit("/", 1)[-1]
        return self.import_ok

    def remove(self, address: str) -> bool:
        self.removals.append(address)
        if self.remove_ok:
            self.bindings.pop(address, None)
        return self.remove_ok


@pytest.fixture
def fx() -> Fixtures:
    return Fixtures("cloudflare_auto_import")


@pytest.fixture
def graph(fx: Fixtures) -> dict[str, Any]:
    return fx.get_json("cdk.tf.json")


@pytest.fixture
def cloudflare_config() -> CloudflareConfig:
    return CloudflareConfig(
        account_id="acc",
        domain="a5g.io",
        subdomain="hp",
        api_token="token",
        target_ip_address="203.0.113.10",
        allowed_email_domain="example.com",
    )


@pytest.fixture
def settings(fx: Fixtures, cloudflare_config: CloudflareConfig) -> AutoImportSettings:
    return AutoImportSettings(
        environment="prod",
        stack_dir=os.path.dirname(fx.path("cdk.tf.json")),
        cloudflare=cloudflare_config,
    )


@pytest.fixture
def client() -> MagicMock:
    client = create_autospec(CloudflareClient, instance=True)
    client.access_applications.return_value = []
    client.access_application.return_value = None
    client.zone_id.return_value = "zone1"
    client.dns_records.return_value = []
    client.dns_record.return_value = None
    client.identity_providers.return_value = []
    client.identity_provider.return_value = None
    client.access_policies.return_value = []
    client.access_policy.return_value = None
    return client


@pytest.fixture
def backend() -> FakeStateBackend:
    return FakeStateBackend()
