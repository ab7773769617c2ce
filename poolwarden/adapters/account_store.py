import boto3
import logging
from typing import Optional
from botocore.exceptions import BotoCoreError, ClientError
from poolwarden.models.account import Account, AccountRef

logger = logging.getLogger(__name__)


class AccountStoreError(Exception):
    """Raised when the account table cannot be read."""
    pass


class AccountStore:
    """
    The 'Memory' of the system, read-only.
    Adapter for the DynamoDB table the controller keeps its Account records in.
    Items are keyed on (namespace, name).
    """
    def __init__(self, table_name: str, region_name: str = "us-east-1", table=None):
        if table is None:
            self.dynamodb = boto3.resource("dynamodb", region_name=region_name)
            table = self.dynamodb.Table(table_name)
        self.table = table
        self.table_name = table_name

    def __repr__(self):
        return f"AccountStore(table={self.table_name})"

    def get_account(self, ref: AccountRef) -> Optional[Account]:
        """
        Fetches one Account record. Returns None when it does not exist.
        """
        try:
            response = self.table.get_item(
                Key={"namespace": ref.namespace, "name": ref.name},
                ConsistentRead=True
            )
        except (ClientError, BotoCoreError) as e:
            raise AccountStoreError(f"Failed to read account {ref} from {self.table_name}: {e}") from e

        item = response.get("Item")
        if not item:
            logger.debug(f"No record for {ref} in {self.table_name}")
            return None

        try:
            return Account.from_item(item)
        except KeyError as e:
            raise AccountStoreError(f"Malformed account record {ref}: missing {e}") from e
        except ValueError as e:
            raise AccountStoreError(f"Malformed account record {ref}: {e}") from e
