"""
Input validation utilities for identifiers coming from configuration and the CLI.
Rejects malformed ids before they reach the Organizations API.
"""
import re


def validate_account_id(account_id: str) -> str:
    """
    Validates AWS Account ID format.

    Args:
        account_id: AWS 12-digit account ID

    Returns:
        Validated account ID

    Raises:
        ValueError: If account ID format is invalid
    """
    if not account_id:
        raise ValueError("Account ID cannot be empty")

    if not re.match(r'^\d{12}$', account_id):
        raise ValueError(f"Invalid AWS Account ID format. Expected 12 digits, got: {account_id}")

    return account_id


def validate_ou_id(ou_id: str) -> str:
    """
    Validates an Organizations root or OU id ('r-xxxx' or 'ou-xxxx-xxxxxxxx').

    Raises:
        ValueError: If the id is empty or malformed
    """
    if not ou_id:
        raise ValueError("OU ID cannot be empty")

    if not re.match(r'^(r-[a-z0-9]{4,32}|ou-[a-z0-9]{4,32}-[a-z0-9]{8,32})$', ou_id):
        raise ValueError(f"Invalid OU/Root ID format: {ou_id}. Expected 'ou-xxxx-xxxxxxxx' or 'r-xxxx'")

    return ou_id


def validate_shard_name(shard_name: str) -> str:
    """Shard names end up as tag values: 1-256 chars, no control characters."""
    if not shard_name or not shard_name.strip():
        raise ValueError("Shard name cannot be empty")

    if len(shard_name) > 256:
        raise ValueError(f"Shard name exceeds 256 characters, got: {len(shard_name)}")

    if re.search(r'[\x00-\x1f\x7f]', shard_name):
        raise ValueError("Shard name contains control characters")

    return shard_name
