import sys
import argparse

from poolwarden.adapters.account_store import AccountStore
from poolwarden.adapters.aws_orgs import OrganizationsAdapter
from poolwarden.adapters.config_source import SSMConfigSource, YamlConfigSource
from poolwarden.core.reconciler import Reconciler
from poolwarden.core.validator import AccountValidator
from poolwarden.models.account import AccountRef
from poolwarden.models.outcome import ValidationReport
from poolwarden.ui.json_logger import configure_logging
from poolwarden.ui.printer import category_for, print_report
from poolwarden.validators import validate_shard_name


def exit_code_for(report: ValidationReport) -> int:
    """0 done, 2 policy violation, 3 requeue requested, 1 infrastructure error."""
    if report.result.requeue:
        return 3
    category = category_for(report.final)
    if category == "policy_violation":
        return 2
    if category == "infra_error":
        return 1
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Pool Warden: validate OU placement and owner tags of one account")
    parser.add_argument("--namespace", required=True, help="Namespace of the Account record")
    parser.add_argument("--name", required=True, help="Name of the Account record")
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--config", help="Path to the operator configuration YAML")
    source.add_argument("--ssm-path", help="SSM Parameter Store prefix holding the operator configuration")
    parser.add_argument("--accounts-table", required=True, help="DynamoDB table holding Account records")
    parser.add_argument("--region", default="us-east-1", help="Region of the accounts table")
    parser.add_argument("--shard", default="", help="Shard name to use when the configuration has none")
    parser.add_argument("--json-logs", action="store_true", help="Emit logs as JSON lines")
    parser.add_argument("--debug", action="store_true", help="Enable verbose logging")
    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    # Validate inputs immediately (Fail Fast)
    try:
        ref = AccountRef(namespace=args.namespace, name=args.name)
        if args.shard:
            args.shard = validate_shard_name(args.shard)
    except ValueError as e:
        parser.error(str(e))

    logger = configure_logging(debug=args.debug, json_output=args.json_logs)

    try:
        # 1. INITIALIZE STACK
        logger.info("Initializing AWS Organizations adapter...")
        orgs = OrganizationsAdapter()

        logger.info(f"Initializing Account Store (Table: {args.accounts_table})...")
        store = AccountStore(table_name=args.accounts_table, region_name=args.region)

        config_source = YamlConfigSource(args.config) if args.config else SSMConfigSource(args.ssm_path)
        reconciler = Reconciler(store, config_source, AccountValidator(orgs), default_shard_name=args.shard)

        # 2. RECONCILE
        logger.info(f"Reconciling {ref}")
        report = reconciler.reconcile(ref)

        # 3. OUTPUT RESULTS
        print_report(report, verbose=args.debug)
        sys.exit(exit_code_for(report))

    except Exception:
        logger.exception("Unexpected System Failure")
        sys.exit(1)


if __name__ == "__main__":
    main()
