"""
Unit tests for the reconciler: account fetch, config loading, requeue decisions.
"""
from poolwarden.adapters.account_store import AccountStoreError
from poolwarden.adapters.config_source import ConfigSourceError
from poolwarden.core.reconciler import CONFIG_WAIT_SECONDS, Reconciler
from poolwarden.core.settings import FeatureGates
from poolwarden.core.validator import AccountValidator
from poolwarden.models.account import Account, AccountRef
from poolwarden.models.outcome import ReconcileResult, ValidationKind

REF = AccountRef(namespace="aws-account-operator", name="osd-1")


class _FakeStore:
    def __init__(self, account=None, error=None):
        self.account = account
        self.error = error

    def get_account(self, ref):
        if self.error:
            raise self.error
        return self.account


class _FakeConfig:
    def __init__(self, *maps, error=None):
        self.maps = list(maps)
        self.error = error
        self.loads = 0

    def load(self):
        self.loads += 1
        if self.error:
            raise self.error
        return self.maps.pop(0) if len(self.maps) > 1 else self.maps[0]


def _config(**flags):
    data = {"root": "ou-root-pool0002", "shard-name": "hive-a"}
    data.update({f"feature.validation_{k}": v for k, v in flags.items()})
    return data


def _account(aws_id="222222222222"):
    return Account(name="osd-1", namespace="aws-account-operator", aws_account_id=aws_id)


def test_full_run_moves_and_checks_tags(org):
    org.tags["222222222222"] = {"owner": "hive-a"}
    reconciler = Reconciler(_FakeStore(_account()), _FakeConfig(_config(move_account="true")), AccountValidator(org))

    report = reconciler.reconcile(REF)

    assert report.kinds() == [ValidationKind.MOVED, ValidationKind.TAG_OK]
    assert org.move_calls == [("222222222222", "ou-root-other009", "ou-root-pool0002")]
    assert report.result == ReconcileResult.do_not_requeue()


def test_missing_account_is_not_requeued(org):
    report = Reconciler(_FakeStore(None), _FakeConfig(_config()), AccountValidator(org)).reconcile(REF)

    assert report.kinds() == [ValidationKind.ERROR]
    assert report.result.requeue is False
    assert org.parent_calls == []


def test_account_fetch_failure_is_not_requeued(org):
    store = _FakeStore(error=AccountStoreError("throttled"))
    config = _FakeConfig(_config())

    report = Reconciler(store, config, AccountValidator(org)).reconcile(REF)

    assert report.result.requeue is False
    assert config.loads == 0


def test_config_failure_requeues_after_backoff(org):
    config = _FakeConfig(error=ConfigSourceError("ssm down"))

    report = Reconciler(_FakeStore(_account()), config, AccountValidator(org)).reconcile(REF)

    assert report.kinds() == [ValidationKind.ERROR]
    assert report.result == ReconcileResult.after(CONFIG_WAIT_SECONDS)
    assert org.parent_calls == []


def test_invalid_pool_ou_requeues_after_backoff(org):
    config = _FakeConfig({"root": "", "shard-name": "hive-a"})

    report = Reconciler(_FakeStore(_account()), config, AccountValidator(org)).reconcile(REF)

    assert report.result.requeue_after == CONFIG_WAIT_SECONDS


def test_config_is_reread_every_run(org):
    config = _FakeConfig(_config(move_account="false"), _config(move_account="true"))
    reconciler = Reconciler(_FakeStore(_account()), config, AccountValidator(org))

    reconciler.reconcile(REF)
    assert org.move_calls == []

    reconciler.reconcile(REF)
    assert len(org.move_calls) == 1
    assert config.loads == 2


def test_gates_stick_when_flag_disappears(org):
    config = _FakeConfig(_config(move_account="true", tag_account="true"), _config())
    reconciler = Reconciler(_FakeStore(_account("111111111111")), config, AccountValidator(org))

    reconciler.reconcile(REF)
    reconciler.reconcile(REF)

    assert reconciler.gates == FeatureGates(move_enabled=True, tag_enabled=True)


def test_default_shard_name_is_expected_owner(org):
    config = _FakeConfig({"root": "ou-root-pool0002"})
    reconciler = Reconciler(_FakeStore(_account("111111111111")), config, AccountValidator(org),
                            default_shard_name="hive-a")

    report = reconciler.reconcile(REF)

    assert report.final.kind == ValidationKind.TAG_OK
