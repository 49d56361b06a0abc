import logging
import os
import re
import sys
import traceback
from collections.abc import Callable
from typing import Any

import click
import sentry_sdk
from sentry_sdk.integrations.logging import LoggingIntegration

from tfadopt.cloudflare_auto_import import integration as cloudflare_auto_import
from tfadopt.cloudflare_auto_import.config import (
    AutoImportSettings,
    CloudflareConfig,
)
from tfadopt.cloudflare_auto_import.naming import CLOUDFLARE_STACK_ID
from tfadopt.status import ExitCodes
from tfadopt.utils.binary import binary_option
from tfadopt.utils.environment import init_env
from tfadopt.utils.exceptions import (
    ConfigurationMissingError,
    TfvarsValidationError,
)
from tfadopt.utils.lean_terraform_client import DEFAULT_TERRAFORM_BINARY
from tfadopt.utils.tfvars import (
    REQUIRED_KEYS,
    pick_tfvars_path,
    validate_required_keys,
)


def before_breadcrumb(crumb: dict, _: Any) -> dict:
    # https://docs.sentry.io/platforms/python/configuration/filtering/
    if "message" in crumb and crumb["message"]:
        crumb["message"] = re.sub(r"Bearer \S+", "Bearer ***", crumb["message"])
    return crumb


# Enable Sentry
if os.getenv("SENTRY_DSN"):
    match os.environ.get("SENTRY_EVENT_LEVEL", "CRITICAL").upper():
        case "CRITICAL":
            sentry_event_level = logging.CRITICAL
        case "ERROR":
            sentry_event_level = logging.ERROR
        case _:
            raise ValueError(
                "Invalid value for SENTRY_EVENT_LEVEL. Must be CRITICAL or ERROR."
            )

    sentry_sdk.init(
        os.environ["SENTRY_DSN"],
        before_breadcrumb=before_breadcrumb,
        integrations=[
            LoggingIntegration(event_level=sentry_event_level),
        ],
    )


def log_level(function: Callable) -> Callable:
    function = click.option(
        "--log-level",
        help="log-level of the command. Defaults to INFO.",
        type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]),
    )(function)
    return function


def dry_run(function: Callable) -> Callable:
    help_msg = (
        "If `true`, it will only print the planned actions "
        "that would be performed, without executing them."
    )

    function = click.option("--dry-run/--no-dry-run", default=False, help=help_msg)(
        function
    )
    return function


def environment(function: Callable) -> Callable:
    function = click.option(
        "--environment",
        envvar="ENVIRONMENT",
        default="prod",
        show_default=True,
        help="Deployment environment, selects terraform.<environment>.tfvars.",
    )(function)
    return function


def tfvars_dir(function: Callable) -> Callable:
    function = click.option(
        "--tfvars-dir",
        default=".",
        show_default=True,
        type=click.Path(file_okay=False),
        help="Directory containing the tfvars files.",
    )(function)
    return function


@click.group()
@dry_run
@log_level
@click.pass_context
def cli(ctx: click.Context, dry_run: bool, log_level: str | None) -> None:
    ctx.ensure_object(dict)
    init_env(log_level=log_level, dry_run=dry_run)
    ctx.obj["dry_run"] = dry_run


@cli.command(
    "cloudflare-auto-import",
    short_help="Import pre-existing Cloudflare objects into the stack state.",
)
@environment
@tfvars_dir
@click.option(
    "--stack-dir",
    default=os.path.join("cdktf.out", "stacks", CLOUDFLARE_STACK_ID),
    show_default=True,
    type=click.Path(file_okay=False),
    help="Synthesized stack directory holding cdk.tf.json.",
)
@click.option(
    "--terraform-binary",
    default=DEFAULT_TERRAFORM_BINARY,
    show_default=True,
    help="terraform compatible binary used to manage the state.",
)
@binary_option("terraform_binary")
@click.pass_context
def cloudflare_auto_import_cmd(
    ctx: click.Context,
    environment: str,
    tfvars_dir: str,
    stack_dir: str,
    terraform_binary: str,
) -> None:
    try:
        settings = AutoImportSettings(
            environment=environment,
            stack_dir=stack_dir,
            terraform_binary=terraform_binary,
            dry_run=ctx.obj["dry_run"],
            cloudflare=CloudflareConfig.from_tfvars(environment, tfvars_dir),
        )
        cloudflare_auto_import.run(settings)
    except ConfigurationMissingError as e:
        logging.error(f"[{cloudflare_auto_import.INTEGRATION}] {e}")
        sys.exit(ExitCodes.ERROR)
    except Exception:
        traceback.print_exc(file=sys.stderr)
        sys.exit(ExitCodes.ERROR)


@cli.command(
    "validate-tfvars",
    short_help="Check that the tfvars file defines every required key.",
)
@click.option(
    "--stack",
    required=True,
    type=click.Choice(sorted(REQUIRED_KEYS)),
    help="Stack whose required keys are checked.",
)
@environment
@tfvars_dir
def validate_tfvars(stack: str, environment: str, tfvars_dir: str) -> None:
    path = pick_tfvars_path(environment, tfvars_dir)
    if not path:
        logging.error(
            f"tfvars file not found: terraform.{environment}.tfvars or terraform.tfvars"
        )
        sys.exit(ExitCodes.ERROR)
    try:
        validate_required_keys(path, REQUIRED_KEYS[stack])
    except TfvarsValidationError as e:
        logging.error(str(e))
        sys.exit(ExitCodes.ERROR)
    logging.info(f"{path} defines every key required by the {stack} stack")
