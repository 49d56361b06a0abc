import os
from collections.abc import Mapping

from pydantic import BaseModel, Field

from tfadopt.cloudflare_auto_import.naming import (
    CLOUDFLARE_STACK_ID,
    full_domain_name,
)
from tfadopt.utils.exceptions import ConfigurationMissingError
from tfadopt.utils.lean_terraform_client import DEFAULT_TERRAFORM_BINARY
from tfadopt.utils.tfvars import pick_tfvars_path, read_tfvars

CLOUDFLARE_API_TOKEN = "CLOUDFLARE_API_TOKEN"

# tfvars key -> CloudflareConfig field
TFVARS_FIELDS = {
    "cloudflare_account_id": "account_id",
    "domain_name": "domain",
    "subdomain_name": "subdomain",
    "cloudflare_api_token": "api_token",
    "target_ip_address": "target_ip_address",
    "google_client_id": "google_client_id",
    "google_client_secret": "google_client_secret",
    "allowed_email_domain": "allowed_email_domain",
}


class CloudflareConfig(BaseModel):
    account_id: str | None = None
    domain: str | None = None
    subdomain: str | None = None
    api_token: str | None = None
    target_ip_address: str | None = None
    google_client_id: str | None = None
    google_client_secret: str | None = None
    allowed_email_domain: str | None = None

    @classmethod
    def from_tfvars(
        cls,
        environment: str,
        base_dir: str = ".",
        environ: Mapping[str, str] | None = None,
    ) -> "CloudflareConfig":
        """Read terraform.<environment>.tfvars (or terraform.tfvars).

        CLOUDFLARE_API_TOKEN in environ takes precedence over the token
        found in the file.
        """
        environ = os.environ if environ is None else environ
        values: dict[str, str] = {}
        path = pick_tfvars_path(environment, base_dir)
        if path:
            tfvars = read_tfvars(path)
            values = {
                field: tfvars[key]
                for key, field in TFVARS_FIELDS.items()
                if tfvars.get(key)
            }
        if environ.get(CLOUDFLARE_API_TOKEN):
            values["api_token"] = environ[CLOUDFLARE_API_TOKEN]
        return cls(**values)

    @property
    def full_domain(self) -> str:
        return full_domain_name(self.subdomain or "", self.domain or "")

    def require_core(self) -> None:
        missing = [
            name
            for name in ["account_id", "domain", "subdomain", "api_token"]
            if not getattr(self, name)
        ]
        if missing:
            raise ConfigurationMissingError(
                f"missing cloudflare configuration: {', '.join(missing)}"
            )

    def tf_env(self) -> dict[str, str]:
        """TF_VAR_* variables the stack needs to plan, import and refresh."""
        env = {
            "TF_VAR_cloudflare_api_token": self.api_token or "",
            "TF_VAR_cloudflare_account_id": self.account_id or "",
            "TF_VAR_domain_name": self.domain or "",
            "TF_VAR_subdomain_name": self.subdomain or "",
        }
        optional = {
            "TF_VAR_target_ip_address": self.target_ip_address,
            "TF_VAR_google_client_id": self.google_client_id,
            "TF_VAR_google_client_secret": self.google_client_secret,
            "TF_VAR_allowed_email_domain": self.allowed_email_domain,
        }
        env.update({k: v for k, v in optional.items() if v})
        return env


class AutoImportSettings(BaseModel):
    environment: str = "prod"
    stack_id: str = CLOUDFLARE_STACK_ID
    stack_dir: str = os.path.join("cdktf.out", "stacks", CLOUDFLARE_STACK_ID)
    terraform_binary: str = DEFAULT_TERRAFORM_BINARY
    dry_run: bool = False
    cloudflare: CloudflareConfig = Field(default_factory=CloudflareConfig)

    def terraform_env(self) -> dict[str, str]:
        return {
            "STACK": self.stack_id,
            "ENVIRONMENT": self.environment,
            "TF_INPUT": "0",
            **self.cloudflare.tf_env(),
        }
