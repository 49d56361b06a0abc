"""Per resource kind reconciliation passes.

Every pass follows the same sequence:

1. find the local key of the declared resource in the synthesized graph
2. check kind specific preconditions
3. look up a live remote object by its natural key
4. ask the state whether the address is bound, and if so whether the
   bound object still exists remotely (targeted lookup by id)
5. skip, import, or evict and then import

The subclasses only provide the remote lookups and the import id format.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any, TypeVar

from tfadopt.cloudflare_auto_import.config import AutoImportSettings
from tfadopt.cloudflare_auto_import.decision import Decision, decide
from tfadopt.cloudflare_auto_import.naming import (
    access_app_name,
    access_policy_name,
    identity_provider_name,
)
from tfadopt.utils.cloudflare.client import CloudflareClient
from tfadopt.utils.exceptions import ZoneNotFoundError
from tfadopt.utils.lean_terraform_client import StateBackend
from tfadopt.utils.synthesized_graph import find_resource_key
from tfadopt.utils.terraform_state import StateInspector

CandidateT = TypeVar("CandidateT")


def first_exact_match(
    candidates: Iterable[CandidateT], **natural_key: str
) -> CandidateT | None:
    """Return the first candidate whose attributes equal natural_key.

    Comparison is case-insensitive. Candidates keep the API order; when
    several match, the first one wins.
    """
    wanted = {k: v.lower() for k, v in natural_key.items()}
    for candidate in candidates:
        if all(
            (getattr(candidate, attr, "") or "").lower() == value
            for attr, value in wanted.items()
        ):
            return candidate
    return None


@dataclass
class ReconcileResult:
    kind: str
    address: str | None = None
    decisions: list[Decision] = field(default_factory=list)
    candidate_id: str | None = None
    imported: bool = False
    evicted: bool = False
    skipped_reason: str | None = None
    error: str | None = None

    @property
    def decision(self) -> Decision | None:
        return self.decisions[-1] if self.decisions else None

    @property
    def failed(self) -> bool:
        return self.error is not None


class KindReconciler(ABC):
    kind: str
    resource_type: str
    metadata_suffix: str

    def __init__(
        self,
        settings: AutoImportSettings,
        client: CloudflareClient,
        inspector: StateInspector,
        backend: StateBackend,
        graph: dict[str, Any],
    ) -> None:
        self.settings = settings
        self.cloudflare = settings.cloudflare
        self.client = client
        self.inspector = inspector
        self.backend = backend
        self.graph = graph

    @property
    def account_id(self) -> str:
        return self.cloudflare.account_id or ""

    def skip_reason(self) -> str | None:
        return None

    @abstractmethod
    def find_candidate(self) -> str | None:
        """Id of the live remote object matching the natural key, if any."""

    @abstractmethod
    def remote_exists(self, resource_id: str) -> bool:
        """Targeted lookup of a bound id."""

    @abstractmethod
    def import_id(self, candidate_id: str) -> str: ...

    def _import(self, address: str, import_id: str) -> bool:
        logging.info(f"[{address}] import <- {import_id}")
        if self.settings.dry_run:
            return True
        imported = self.backend.import_resource(address, import_id)
        if not imported:
            logging.error(f"[{address}] import of {import_id} failed")
        return imported

    def _evict(self, address: str) -> bool:
        logging.info(
            f"[{address}] state has {address} but remote object is missing; "
            "removing from state"
        )
        if self.settings.dry_run:
            return True
        evicted = self.backend.remove(address)
        if not evicted:
            logging.error(f"[{address}] state removal failed")
        return evicted

    def reconcile(self) -> ReconcileResult:
        result = ReconcileResult(kind=self.kind)

        key = find_resource_key(self.graph, self.resource_type, self.metadata_suffix)
        if key is None:
            logging.info(f"No {self.kind} declared in the synthesized stack")
            result.decisions.append(decide(False, None, False))
            return result
        address = f"{self.resource_type}.{key}"
        result.address = address

        if reason := self.skip_reason():
            logging.info(f"[{address}] skip {self.kind} import: {reason}")
            result.skipped_reason = reason
            return result

        candidate_id = self.find_candidate()
        result.candidate_id = candidate_id

        bound = self.inspector.is_bound(address)
        remote_live = None
        if bound:
            bound_id = self.inspector.resolve_bound_id(address)
            remote_live = bound_id is not None and self.remote_exists(bound_id)
        decision = decide(True, candidate_id, bound, remote_live)
        result.decisions.append(decision)

        if decision == Decision.SKIP:
            logging.info(f"[{address}] skip import (already managed)")
            return result

        if decision == Decision.EVICT:
            result.evicted = self._evict(address)
            if self.settings.dry_run:
                bound = False
            else:
                bound = self.inspector.is_bound(address)
            if bound:
                logging.warning(f"[{address}] still bound after state removal")
                return result
            decision = decide(True, candidate_id, bound)
            result.decisions.append(decision)

        if decision == Decision.IMPORT and candidate_id:
            result.imported = self._import(address, self.import_id(candidate_id))
        else:
            logging.info(f"No existing {self.kind} found")
        return result


class AccessApplicationReconciler(KindReconciler):
    kind = "Access application"
    resource_type = "cloudflare_zero_trust_access_application"
    metadata_suffix = "/application"

    def find_candidate(self) -> str | None:
        full_domain = self.cloudflare.full_domain
        match = first_exact_match(
            self.client.access_applications(self.account_id, full_domain),
            domain=full_domain,
        )
        if match is None:
            return None
        expected_name = access_app_name(
            self.cloudflare.subdomain or "",
            self.cloudflare.domain or "",
            self.settings.environment,
        )
        if match.name != expected_name:
            logging.info(
                f"Access application {match.id} for {full_domain} is named "
                f"'{match.name}', expected '{expected_name}'"
            )
        return match.id

    def remote_exists(self, resource_id: str) -> bool:
        return self.client.access_application(self.account_id, resource_id) is not None

    def import_id(self, candidate_id: str) -> str:
        return f"accounts/{self.account_id}/{candidate_id}"


class DnsRecordReconciler(KindReconciler):
    kind = "DNS record"
    resource_type = "cloudflare_dns_record"
    metadata_suffix = "/record"
    record_type = "A"

    _zone_id: str | None = None

    @property
    def zone_id(self) -> str:
        if self._zone_id is None:
            domain = self.cloudflare.domain or ""
            zone_id = self.client.zone_id(domain)
            if not zone_id:
                raise ZoneNotFoundError(domain)
            self._zone_id = zone_id
        return self._zone_id

    def find_candidate(self) -> str | None:
        full_domain = self.cloudflare.full_domain
        match = first_exact_match(
            self.client.dns_records(self.zone_id, self.record_type, full_domain),
            name=full_domain,
            type=self.record_type,
        )
        return match.id if match else None

    def remote_exists(self, resource_id: str) -> bool:
        return self.client.dns_record(self.zone_id, resource_id) is not None

    def import_id(self, candidate_id: str) -> str:
        return f"{self.zone_id}/{candidate_id}"


class IdentityProviderReconciler(KindReconciler):
    kind = "Identity Provider"
    resource_type = "cloudflare_zero_trust_access_identity_provider"
    metadata_suffix = "/google_idp"
    idp_type = "google"

    def find_candidate(self) -> str | None:
        match = first_exact_match(
            self.client.identity_providers(self.account_id),
            name=identity_provider_name(
                self.cloudflare.subdomain or "", self.cloudflare.domain or ""
            ),
            type=self.idp_type,
        )
        return match.id if match else None

    def remote_exists(self, resource_id: str) -> bool:
        return self.client.identity_provider(self.account_id, resource_id) is not None

    def import_id(self, candidate_id: str) -> str:
        return f"accounts/{self.account_id}/{candidate_id}"


class AccessPolicyReconciler(KindReconciler):
    kind = "Access Policy"
    resource_type = "cloudflare_zero_trust_access_policy"
    metadata_suffix = "/policy"

    def skip_reason(self) -> str | None:
        if not self.cloudflare.allowed_email_domain:
            return "allowed_email_domain missing"
        return None

    def find_candidate(self) -> str | None:
        match = first_exact_match(
            self.client.access_policies(self.account_id),
            name=access_policy_name(self.cloudflare.allowed_email_domain or ""),
        )
        return match.id if match else None

    def remote_exists(self, resource_id: str) -> bool:
        return self.client.access_policy(self.account_id, resource_id) is not None

    def import_id(self, candidate_id: str) -> str:
        return f"accounts/{self.account_id}/{candidate_id}"
