from dataclasses import dataclass
from typing import Any, Dict

from poolwarden.validators import validate_account_id


@dataclass(frozen=True)
class AccountRef:
    """
    Namespaced identifier of an Account record, e.g. 'aws-account-operator/osd-1234'.
    This is what the controller hands us when it asks for a reconciliation.
    """
    namespace: str
    name: str

    @classmethod
    def parse(cls, raw: str) -> "AccountRef":
        namespace, sep, name = (raw or "").partition("/")
        if not sep or not namespace or not name:
            raise ValueError(f"Account reference must look like 'namespace/name', got: {raw!r}")
        return cls(namespace=namespace, name=name)

    def __str__(self) -> str:
        return f"{self.namespace}/{self.name}"


@dataclass
class Account:
    """
    Represents a managed AWS account as stored by the controller.

    Attributes:
        name: Record name inside its namespace.
        namespace: Namespace the record lives in.
        aws_account_id: The 12-digit AWS Account ID (empty until the account is created).
        byoc: True for bring-your-own-cloud accounts supplied by the customer.
        account_pool: Name of the shared pool currently holding the account ('' if none).
    """
    name: str
    namespace: str
    aws_account_id: str = ""
    byoc: bool = False
    account_pool: str = ""

    @property
    def ref(self) -> AccountRef:
        return AccountRef(namespace=self.namespace, name=self.name)

    def is_byoc(self) -> bool:
        return self.byoc

    def is_owned_by_account_pool(self) -> bool:
        return bool(self.account_pool)

    @classmethod
    def from_item(cls, item: Dict[str, Any]) -> "Account":
        """
        Builds an Account from a raw Account Store item.
        The AWS id may be empty (not created yet) but never malformed.
        """
        aws_account_id = str(item.get("aws_account_id") or "")
        if aws_account_id:
            validate_account_id(aws_account_id)
        return cls(
            name=item["name"],
            namespace=item["namespace"],
            aws_account_id=aws_account_id,
            byoc=bool(item.get("byoc", False)),
            account_pool=str(item.get("account_pool") or ""),
        )
