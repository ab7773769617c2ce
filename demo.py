import sys
from poolwarden.core.settings import FeatureGates, ValidationSettings
from poolwarden.core.validator import AccountValidator
from poolwarden.models.account import Account
from poolwarden.ui.printer import print_report


class MockOrganizations:
    """
    Stunt Double: Pretends to be AWS Organizations.

        r-demo1
        ├── ou-demo-pool0002   <- 111111111111 (owner=hive-demo)
        └── ou-demo-other009   <- 222222222222 (team=x)
    """
    def __init__(self):
        self.parents = {
            "111111111111": ["ou-demo-pool0002"],
            "222222222222": ["ou-demo-other009"],
            "ou-demo-pool0002": ["r-demo1"],
            "ou-demo-other009": ["r-demo1"],
        }
        self.tags = {
            "111111111111": {"owner": "hive-demo"},
            "222222222222": {"team": "x"},
        }

    def list_parents(self, node_id):
        return self.parents.get(node_id, [])

    def move_account(self, account_id, source_parent_id, destination_parent_id):
        print(f"[mock] move {account_id}: {source_parent_id} -> {destination_parent_id}")
        self.parents[account_id] = [destination_parent_id]

    def list_tags(self, account_id):
        return self.tags.get(account_id, {})


if __name__ == "__main__":
    # --- SETUP ---
    validator = AccountValidator(MockOrganizations())
    settings = ValidationSettings(
        pool_ou_id="ou-demo-pool0002",
        shard_name="hive-demo",
        gates=FeatureGates(move_enabled="--move" in sys.argv),
    )

    accounts = [
        Account(name="osd-in-pool", namespace="demo", aws_account_id="111111111111"),
        Account(name="osd-stray", namespace="demo", aws_account_id="222222222222"),
        Account(name="osd-byoc", namespace="demo", aws_account_id="333333333333", byoc=True),
    ]

    # --- EXECUTION + REPORTING ---
    for account in accounts:
        print_report(validator.validate(account, settings), verbose=True)
