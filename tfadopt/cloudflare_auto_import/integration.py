import logging

from tfadopt.cloudflare_auto_import.config import AutoImportSettings
from tfadopt.cloudflare_auto_import.reconcilers import (
    AccessApplicationReconciler,
    AccessPolicyReconciler,
    DnsRecordReconciler,
    IdentityProviderReconciler,
    KindReconciler,
    ReconcileResult,
)
from tfadopt.utils.cloudflare.client import CloudflareClient
from tfadopt.utils.exceptions import (
    ApiError,
    StateBackendError,
    TransportError,
    ZoneNotFoundError,
)
from tfadopt.utils.lean_terraform_client import StateBackend, TerraformStateBackend
from tfadopt.utils.synthesized_graph import load_synthesized_graph
from tfadopt.utils.terraform_state import StateInspector

INTEGRATION = "cloudflare-auto-import"

# passes run sequentially in this order
RECONCILERS: list[type[KindReconciler]] = [
    AccessApplicationReconciler,
    DnsRecordReconciler,
    IdentityProviderReconciler,
    AccessPolicyReconciler,
]


def run_pass(reconciler: KindReconciler) -> ReconcileResult:
    """Run one kind's pass; failures are logged and never escape."""
    try:
        return reconciler.reconcile()
    except (ApiError, TransportError, StateBackendError, ZoneNotFoundError) as e:
        logging.error(f"{reconciler.kind} import skipped: {e}")
        return ReconcileResult(kind=reconciler.kind, error=str(e))
    except Exception as e:
        logging.exception(f"{reconciler.kind} import skipped: unexpected error")
        return ReconcileResult(kind=reconciler.kind, error=str(e))


def log_summary(results: list[ReconcileResult]) -> None:
    for result in results:
        if result.failed:
            outcome = f"failed ({result.error})"
        elif result.skipped_reason:
            outcome = f"skipped ({result.skipped_reason})"
        else:
            outcome = " -> ".join(d.value for d in result.decisions)
        logging.info(f"{result.kind} [{result.address or '-'}]: {outcome}")


def run(
    settings: AutoImportSettings,
    client: CloudflareClient | None = None,
    backend: StateBackend | None = None,
) -> list[ReconcileResult]:
    """Adopt pre-existing Cloudflare objects into the stack state.

    Raises ConfigurationMissingError before any pass runs when the core
    Cloudflare settings are incomplete.
    """
    settings.cloudflare.require_core()
    graph = load_synthesized_graph(settings.stack_dir)

    if backend is None:
        backend = TerraformStateBackend(
            settings.stack_dir,
            env=settings.terraform_env(),
            binary=settings.terraform_binary,
        )
    inspector = StateInspector(backend)

    own_client = client is None
    if client is None:
        client = CloudflareClient(token=settings.cloudflare.api_token or "")

    results = []
    try:
        for reconciler_cls in RECONCILERS:
            reconciler = reconciler_cls(
                settings=settings,
                client=client,
                inspector=inspector,
                backend=backend,
                graph=graph,
            )
            results.append(run_pass(reconciler))
    finally:
        if own_client:
            client.cleanup()

    log_summary(results)
    return results
