import boto3
import logging
from typing import List, Dict
from botocore.exceptions import BotoCoreError, ClientError


class OrganizationsError(Exception):
    """
    Raised when an AWS Organizations call fails.
    The original botocore error is kept as __cause__ and its code on .code.
    """
    def __init__(self, message: str, code: str = ""):
        super().__init__(message)
        self.code = code


def _error_code(e: Exception) -> str:
    # ClientError carries an AWS error code; transport failures only have their class
    if isinstance(e, ClientError):
        return e.response.get("Error", {}).get("Code", "")
    return type(e).__name__


class OrganizationsAdapter:
    """
    The 'Hands' of the system.
    Translates raw AWS Organizations responses into the plain ids and dicts
    the validation core works with. Acts as both the tree service
    (parents / move) and the tag service.
    """
    def __init__(self, orgs_client=None):
        # Dependency Injection allows us to pass fake clients during testing
        self.orgs = orgs_client or boto3.client("organizations")
        self.logger = logging.getLogger("poolwarden.adapter")

    # --- READ METHODS ---

    def list_parents(self, node_id: str) -> List[str]:
        """
        Returns the ids of the immediate parents of an account or OU.
        A well-formed organization returns exactly one (none above the root).
        """
        try:
            resp = self.orgs.list_parents(ChildId=node_id)
        except (ClientError, BotoCoreError) as e:
            code = _error_code(e)
            raise OrganizationsError(f"ListParents failed for {node_id}: {code or e}", code=code) from e

        parent_ids = []
        for parent in resp.get("Parents", []):
            p_id = parent.get("Id")
            if not p_id:
                raise OrganizationsError(f"Hierarchy broken: parent missing Id for {node_id}")
            parent_ids.append(p_id)
        return parent_ids

    def list_tags(self, account_id: str) -> Dict[str, str]:
        """
        Fetches every tag on the account (all pages) as a lookup dictionary.
        """
        all_tags = []
        next_token = None
        try:
            while True:
                if next_token:
                    resp = self.orgs.list_tags_for_resource(ResourceId=account_id, NextToken=next_token)
                else:
                    resp = self.orgs.list_tags_for_resource(ResourceId=account_id)
                all_tags.extend(resp.get("Tags", []))
                next_token = resp.get("NextToken")
                if not next_token:
                    break
        except (ClientError, BotoCoreError) as e:
            code = _error_code(e)
            raise OrganizationsError(f"ListTagsForResource failed for {account_id}: {code or e}", code=code) from e

        return {tag["Key"]: tag["Value"] for tag in all_tags}

    # --- WRITE METHODS ---

    def move_account(self, account_id: str, source_parent_id: str, destination_parent_id: str):
        """
        Re-parents an account inside the organization.
        """
        try:
            self.orgs.move_account(
                AccountId=account_id,
                SourceParentId=source_parent_id,
                DestinationParentId=destination_parent_id
            )
            self.logger.info(f"AWS API: Moved {account_id} from {source_parent_id} to {destination_parent_id}")
        except (ClientError, BotoCoreError) as e:
            code = _error_code(e)
            raise OrganizationsError(f"Failed to move account {account_id}: {code or e}", code=code) from e
