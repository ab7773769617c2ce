"""
The demo's mock Organizations must not leak state between instances.
"""
from demo import MockOrganizations


def test_mock_organizations_instances_do_not_share_state():
    first = MockOrganizations()
    first.move_account("222222222222", "ou-demo-other009", "ou-demo-pool0002")

    second = MockOrganizations()

    assert first.list_parents("222222222222") == ["ou-demo-pool0002"]
    assert second.list_parents("222222222222") == ["ou-demo-other009"]
    assert second.parents is not first.parents
    assert second.tags is not first.tags
