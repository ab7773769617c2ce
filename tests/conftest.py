"""
Shared fakes: an in-memory organization tree standing in for the Organizations adapter.
"""
import os
import sys

import pytest

# Add repo root to import path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from poolwarden.adapters.aws_orgs import OrganizationsError


class FakeOrganizations:
    """Tree service + tag service backed by plain dicts."""

    def __init__(self, parents=None, tags=None, move_error=None, tags_error=None):
        self.parents = parents or {}
        self.tags = tags or {}
        self.move_error = move_error
        self.tags_error = tags_error
        self.parent_calls = []
        self.move_calls = []
        self.tag_calls = []

    def list_parents(self, node_id):
        self.parent_calls.append(node_id)
        value = self.parents.get(node_id, [])
        if isinstance(value, Exception):
            raise value
        return list(value)

    def move_account(self, account_id, source_parent_id, destination_parent_id):
        self.move_calls.append((account_id, source_parent_id, destination_parent_id))
        if self.move_error:
            raise self.move_error
        self.parents[account_id] = [destination_parent_id]

    def list_tags(self, account_id):
        self.tag_calls.append(account_id)
        if self.tags_error:
            raise self.tags_error
        return dict(self.tags.get(account_id, {}))


@pytest.fixture
def org():
    """
    Root r-root1 with OU2 (the pool) and OU9 below it:

        r-root1
        ├── ou-root-pool0002  <- 111111111111
        │   └── ou-root-nested03 <- 333333333333
        └── ou-root-other009  <- 222222222222
    """
    return FakeOrganizations(
        parents={
            "111111111111": ["ou-root-pool0002"],
            "222222222222": ["ou-root-other009"],
            "333333333333": ["ou-root-nested03"],
            "ou-root-nested03": ["ou-root-pool0002"],
            "ou-root-pool0002": ["r-root1"],
            "ou-root-other009": ["r-root1"],
            "r-root1": [],
        },
        tags={
            "111111111111": {"owner": "hive-a", "team": "x"},
            "222222222222": {"team": "x"},
            "333333333333": {"owner": "hive-b"},
        },
    )


@pytest.fixture
def broken_org():
    return FakeOrganizations(
        parents={"111111111111": OrganizationsError("AccessDenied", code="AccessDeniedException")},
    )
