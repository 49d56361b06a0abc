import logging
from typing import Any

from tfadopt.utils.exceptions import StateBackendError, TransportError
from tfadopt.utils.lean_terraform_client import StateBackend


def split_address(address: str) -> tuple[str, str]:
    """Split "<type>.<name>" into its resource type and local name."""
    resource_type, _, name = address.partition(".")
    return resource_type, name


def find_resource_id(snapshot: dict[str, Any], address: str) -> str | None:
    """Return the id recorded for address in a state snapshot, if any."""
    resource_type, name = split_address(address)
    for resource in snapshot.get("resources") or []:
        if not isinstance(resource, dict):
            continue
        if resource.get("mode", "managed") != "managed":
            continue
        if resource.get("type") != resource_type or resource.get("name") != name:
            continue
        instances = resource.get("instances") or []
        if not instances:
            return None
        instance = instances[0]
        resource_id = (instance.get("attributes") or {}).get("id") or (
            instance.get("attributes_flat") or {}
        ).get("id")
        return resource_id if isinstance(resource_id, str) and resource_id else None
    return None


class StateInspector:
    """Answers binding questions about the persisted state.

    The backend is (re)initialized before every query. `is_bound` fails
    open: failures are logged and read as "not bound". `resolve_bound_id`
    is only asked about bound addresses, so a failure there raises
    StateBackendError instead of reading as "no recorded id".
    """

    def __init__(self, backend: StateBackend) -> None:
        self.backend = backend

    def is_bound(self, address: str) -> bool:
        if not self.backend.init():
            return False
        try:
            return address in self.backend.list_addresses()
        except (StateBackendError, TransportError) as e:
            logging.warning(f"[{address}] unable to list state: {e}")
            return False

    def resolve_bound_id(self, address: str) -> str | None:
        if not self.backend.init():
            raise StateBackendError(f"[{address}] init failed, cannot pull state")
        return find_resource_id(self.backend.pull_snapshot(), address)
