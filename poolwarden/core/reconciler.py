import logging

from poolwarden.adapters.account_store import AccountStore, AccountStoreError
from poolwarden.adapters.config_source import ConfigSourceError
from poolwarden.core.settings import FeatureGates, InvalidSettingsError, ValidationSettings
from poolwarden.core.validator import AccountValidator
from poolwarden.models.account import AccountRef
from poolwarden.models.outcome import (
    ReconcileResult,
    ValidationKind,
    ValidationOutcome,
    ValidationReport,
)

logger = logging.getLogger(__name__)

# Backoff before retrying when the operator configuration is unavailable
CONFIG_WAIT_SECONDS = 5 * 60


class Reconciler:
    """
    One reconciliation = fetch the account, re-read the configuration,
    run the validator, report what the controller should do next.
    """
    def __init__(self, store: AccountStore, config_source, validator: AccountValidator,
                 default_shard_name: str = ""):
        self.store = store
        self.config_source = config_source
        self.validator = validator
        self.default_shard_name = default_shard_name
        # Last gate values read; a flag missing from the next config keeps its value
        self.gates = FeatureGates()

    def _stop(self, report: ValidationReport, message: str, result: ReconcileResult) -> ValidationReport:
        report.outcomes.append(ValidationOutcome(kind=ValidationKind.ERROR, message=message))
        report.result = result
        return report

    def load_settings(self) -> ValidationSettings:
        """Reads the configuration and swaps in the new gate snapshot."""
        config_map = self.config_source.load()
        settings = ValidationSettings.from_config_map(
            config_map,
            previous_gates=self.gates,
            default_shard_name=self.default_shard_name,
        )
        self.gates = settings.gates
        return settings

    def reconcile(self, ref: AccountRef) -> ValidationReport:
        report = ValidationReport(account_ref=str(ref))
        log_fields = {"controller": "accountvalidation", "account": str(ref)}

        # 1. Resolve the account
        try:
            account = self.store.get_account(ref)
        except AccountStoreError as e:
            logger.error(f"Could not retrieve account to validate: {e}", extra=log_fields)
            return self._stop(report, f"Infrastructure Error: {e}", ReconcileResult.do_not_requeue())

        if account is None:
            logger.error(f"Account {ref} not found", extra=log_fields)
            return self._stop(report, "Account not found", ReconcileResult.do_not_requeue())

        report.aws_account_id = account.aws_account_id

        # 2. Fresh configuration for this run
        try:
            settings = self.load_settings()
        except (ConfigSourceError, InvalidSettingsError) as e:
            logger.error(f"Could not load the operator configuration: {e}", extra=log_fields)
            return self._stop(report, f"Configuration Error: {e}", ReconcileResult.after(CONFIG_WAIT_SECONDS))

        logger.info(
            f"Validating {ref} (move_enabled={settings.gates.move_enabled}, tag_enabled={settings.gates.tag_enabled})",
            extra={**log_fields, "move_enabled": settings.gates.move_enabled,
                   "tag_enabled": settings.gates.tag_enabled},
        )

        # 3. Decide
        report = self.validator.validate(account, settings)
        logger.info(
            f"Validation of {ref} finished: {[k.value for k in report.kinds()]}",
            extra={**log_fields, "requeue": report.result.requeue, "requeue_after": report.result.requeue_after},
        )
        return report
