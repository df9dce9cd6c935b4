# create_kds_users.py
"""Create the KDS (kitchen display) and floor captain accounts for one tenant.

Usage: python create_kds_users.py [--config users.yaml] [--credentials key.json]

Needs KDS_TENANT_ID, KDS_KITCHEN_PASSWORD and KDS_CAPTAIN_PASSWORD (or the
same values in the YAML file) and a Firebase service-account key. The tenant
document must already exist.
"""
import argparse
import logging
import sys

from kds_provisioning.errors import ConfigurationError, TenantNotFoundError
from kds_provisioning.firebase_config import connect
from kds_provisioning.provisioner import Provisioner
from kds_provisioning.report import ConsoleReport
from kds_provisioning.settings import load_settings

logger = logging.getLogger("create_kds_users")


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Create KDS and Captain users for a restaurant tenant")
    parser.add_argument(
        "--config",
        dest="config_path",
        default=None,
        help="YAML parameter file (defaults to KDS_CONFIG_FILE; optional)",
    )
    parser.add_argument(
        "--credentials",
        dest="service_account",
        default=None,
        help="Firebase service account key (defaults to KDS_SERVICE_ACCOUNT or GOOGLE_APPLICATION_CREDENTIALS)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


def configure_logging(verbose=False):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def main(argv=None, environ=None, connect_fn=connect, report=None) -> int:
    args = parse_args(argv)
    configure_logging(args.verbose)
    report = report or ConsoleReport()

    try:
        settings = load_settings(args.config_path, args.service_account, environ)
    except ConfigurationError as exc:
        logger.error("Configuration error: %s", exc)
        return 1

    report.banner(settings.tenant_id)
    try:
        clients = connect_fn(settings.service_account)
    except Exception as exc:
        logger.error("Could not initialise Firebase from %s: %s", settings.service_account, exc)
        report.failed(exc)
        return 1

    try:
        Provisioner(clients, settings.tenant_id, report=report).provision_all(settings.users)
    except TenantNotFoundError as exc:
        logger.error("%s", exc)
        return 1
    except Exception as exc:
        logger.exception("Provisioning failed for tenant %s", settings.tenant_id)
        report.failed(exc)
        return 1
    finally:
        clients.close()

    report.credentials_sheet(settings.users, settings.timezone)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
