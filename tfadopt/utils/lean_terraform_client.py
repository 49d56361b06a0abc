import json
import logging
import os
import subprocess
from collections.abc import Mapping
from typing import Any, Protocol

from tfadopt.utils.exceptions import StateBackendError

DEFAULT_TERRAFORM_BINARY = "tofu"


def _compute_terraform_env(
    env: Mapping[str, str] | None = None,
) -> Mapping[str, str]:
    default_env = os.environ.copy()
    return default_env if env is None else {**default_env, **env}


def _terraform_command(
    args: list[str],
    working_dir: str,
    env: Mapping[str, str] | None = None,
) -> tuple[int, str, str]:
    result = subprocess.run(
        args,
        capture_output=True,
        check=False,
        cwd=working_dir,
        env=_compute_terraform_env(env),
    )
    return_code = result.returncode
    stdout = result.stdout.decode("utf-8")
    stderr = result.stderr.decode("utf-8")
    return return_code, stdout, stderr


def init(
    working_dir: str,
    env: Mapping[str, str] | None = None,
    binary: str = DEFAULT_TERRAFORM_BINARY,
) -> tuple[int, str, str]:
    """
    Run <binary> init -input=false -no-color -reconfigure.

    Re-running init against an already initialized backend is safe.

    :param working_dir: The directory where the terraform files are located
    :param env: Environment variables to pass to the terraform command
    :param binary: terraform compatible binary to run
    :return: (return_code, stdout, stderr)
    """
    return _terraform_command(
        args=[binary, "init", "-input=false", "-no-color", "-reconfigure"],
        working_dir=working_dir,
        env=env,
    )


def state_list(
    working_dir: str,
    env: Mapping[str, str] | None = None,
    binary: str = DEFAULT_TERRAFORM_BINARY,
) -> tuple[int, str, str]:
    """
    Run <binary> state list -no-color.

    :return: (return_code, stdout, stderr)
    """
    return _terraform_command(
        args=[binary, "state", "list", "-no-color"],
        working_dir=working_dir,
        env=env,
    )


def state_pull(
    working_dir: str,
    env: Mapping[str, str] | None = None,
    binary: str = DEFAULT_TERRAFORM_BINARY,
) -> tuple[int, str, str]:
    """
    Run <binary> state pull.

    :return: (return_code, stdout, stderr)
    """
    return _terraform_command(
        args=[binary, "state", "pull"],
        working_dir=working_dir,
        env=env,
    )


def import_resource(
    working_dir: str,
    address: str,
    import_id: str,
    env: Mapping[str, str] | None = None,
    binary: str = DEFAULT_TERRAFORM_BINARY,
) -> tuple[int, str, str]:
    """
    Run <binary> import -input=false -no-color <address> <import_id>.

    :param address: resource address, e.g. cloudflare_dns_record.record
    :param import_id: provider specific import identifier
    :return: (return_code, stdout, stderr)
    """
    return _terraform_command(
        args=[binary, "import", "-input=false", "-no-color", address, import_id],
        working_dir=working_dir,
        env=env,
    )


def state_rm(
    working_dir: str,
    address: str,
    env: Mapping[str, str] | None = None,
    binary: str = DEFAULT_TERRAFORM_BINARY,
) -> tuple[int, str, str]:
    """
    Run <binary> state rm <address>.

    The remote object is left untouched.

    :return: (return_code, stdout, stderr)
    """
    return _terraform_command(
        args=[binary, "state", "rm", address],
        working_dir=working_dir,
        env=env,
    )


class StateBackend(Protocol):
    """Operations the reconciliation needs from the state backend.

    The backend owns the state; it is only read and changed through these
    calls, never by editing state files.
    """

    def init(self) -> bool: ...

    def list_addresses(self) -> list[str]:
        """Return every tracked resource address.

        Raises StateBackendError when the state can not be listed.
        """
        ...

    def pull_snapshot(self) -> dict[str, Any]:
        """Return the full state document.

        Raises StateBackendError when the state can not be pulled.
        """
        ...

    def import_resource(self, address: str, import_id: str) -> bool: ...

    def remove(self, address: str) -> bool: ...


class TerraformStateBackend:
    """StateBackend implemented by running the terraform (tofu) CLI."""

    def __init__(
        self,
        working_dir: str,
        env: Mapping[str, str] | None = None,
        binary: str = DEFAULT_TERRAFORM_BINARY,
    ) -> None:
        self.working_dir = working_dir
        self.env = dict(env or {})
        self.binary = binary

    def _run(self, name: str, func: Any, *args: str) -> tuple[int, str, str]:
        try:
            return func(self.working_dir, *args, env=self.env, binary=self.binary)
        except OSError as e:
            logging.error(f"[{self.working_dir}] {self.binary} {name} failed: {e}")
            return 1, "", str(e)

    def init(self) -> bool:
        return_code, stdout, stderr = self._run("init", init)
        logging.debug(stdout)
        if return_code != 0:
            logging.warning(f"[{self.working_dir}] {self.binary} init failed: {stderr}")
            return False
        return True

    def list_addresses(self) -> list[str]:
        return_code, stdout, stderr = self._run("state list", state_list)
        if return_code != 0:
            raise StateBackendError(
                f"[{self.working_dir}] {self.binary} state list failed: {stderr}"
            )
        return [line.strip() for line in stdout.splitlines() if line.strip()]

    def pull_snapshot(self) -> dict[str, Any]:
        return_code, stdout, stderr = self._run("state pull", state_pull)
        if return_code != 0:
            raise StateBackendError(
                f"[{self.working_dir}] {self.binary} state pull failed: {stderr}"
            )
        if not stdout.strip():
            return {}
        try:
            snapshot = json.loads(stdout)
        except json.JSONDecodeError as e:
            raise StateBackendError(
                f"[{self.working_dir}] unparsable state snapshot: {e}"
            ) from e
        if not isinstance(snapshot, dict):
            raise StateBackendError(f"[{self.working_dir}] unexpected state snapshot")
        return snapshot

    def import_resource(self, address: str, import_id: str) -> bool:
        if not self.init():
            return False
        return_code, stdout, stderr = self._run(
            "import", import_resource, address, import_id
        )
        logging.debug(stdout)
        if return_code != 0:
            logging.warning(f"[{address}] failed to import {import_id}: {stderr}")
            return False
        return True

    def remove(self, address: str) -> bool:
        if not self.init():
            return False
        return_code, stdout, stderr = self._run("state rm", state_rm, address)
        logging.debug(stdout)
        if return_code != 0:
            logging.warning(f"[{address}] failed to remove from state: {stderr}")
            return False
        return True
