import logging

from poolwarden.models.outcome import ValidationKind, ValidationOutcome

logger = logging.getLogger(__name__)

OWNER_TAG_KEY = "owner"


def validate_owner_tag(tags, aws_account_id: str, expected_owner: str,
                       fix_enabled: bool = False) -> ValidationOutcome:
    """
    Checks that the account's 'owner' tag names this shard.

    The tag set is fetched fresh on every call. fix_enabled is only reported;
    wrong or missing tags are classified, not repaired.
    """
    tag_set = tags.list_tags(aws_account_id)
    details = {
        "aws_account_id": aws_account_id,
        "expected_owner": expected_owner,
        "tag_fix_enabled": fix_enabled,
    }

    if OWNER_TAG_KEY not in tag_set:
        return ValidationOutcome(
            kind=ValidationKind.MISSING_TAG,
            message="Account is not tagged with an owner",
            details=details,
        )

    actual_owner = tag_set[OWNER_TAG_KEY]
    details["actual_owner"] = actual_owner
    if actual_owner != expected_owner:
        return ValidationOutcome(
            kind=ValidationKind.INCORRECT_OWNER_TAG,
            message="Account is not tagged with the correct owner",
            details=details,
        )

    return ValidationOutcome(kind=ValidationKind.TAG_OK, message="Owner tag matches shard", details=details)
