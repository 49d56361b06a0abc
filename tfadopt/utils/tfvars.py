import os
import re
from collections.abc import Iterable

from tfadopt.utils.exceptions import TfvarsValidationError

TFVARS_LINE = re.compile(r"^\s*([A-Za-z0-9_]+)\s*=\s*(.+?)\s*$")
QUOTED_VALUE = re.compile(r'^"(.*)"$', re.DOTALL)

REQUIRED_KEYS = {
    "cloudflare": [
        "cloudflare_api_token",
        "cloudflare_account_id",
        "domain_name",
        "subdomain_name",
        "target_ip_address",
        "google_client_id",
        "google_client_secret",
        "allowed_email_domain",
    ],
    "google": [
        "google_project_id",
        "cloudflare_team_domain",
        "domain_name",
        "subdomain_name",
        "google_client_id",
        "google_client_secret",
    ],
}


def pick_tfvars_path(environment: str, base_dir: str = ".") -> str | None:
    """terraform.<environment>.tfvars, falling back to terraform.tfvars."""
    for name in [f"terraform.{environment}.tfvars", "terraform.tfvars"]:
        path = os.path.join(base_dir, name)
        if os.path.exists(path):
            return path
    return None


def parse_simple_tfvars(content: str) -> dict[str, str]:
    """Parse flat `key = value` assignments, stripping double quotes.

    Nested blocks and lists are not understood, only their flat lines are kept.
    """
    values: dict[str, str] = {}
    for line in content.splitlines():
        m = TFVARS_LINE.match(line)
        if not m:
            continue
        key, value = m.group(1), m.group(2)
        quoted = QUOTED_VALUE.match(value)
        if quoted:
            value = quoted.group(1)
        values[key] = value
    return values


def read_tfvars(path: str) -> dict[str, str]:
    with open(path, encoding="utf-8") as f:
        return parse_simple_tfvars(f.read())


def validate_required_keys(path: str, keys: Iterable[str]) -> dict[str, str]:
    values = read_tfvars(path)
    missing = [k for k in keys if k not in values]
    empty = [k for k in keys if k in values and not values[k].strip()]
    if missing or empty:
        parts = []
        if missing:
            parts.append(f"missing keys: {', '.join(missing)}")
        if empty:
            parts.append(f"empty keys: {', '.join(empty)}")
        raise TfvarsValidationError(
            f"tfvars validation failed ({path}): {' / '.join(parts)}"
        )
    return values
