"""Tests for runner group and network configuration request payloads."""

from runner_control.models.runner_group import RunnerGroup
from runner_control.schemas.network import NetworkConfigurationSpec
from runner_control.schemas.runner_group import RunnerGroupSpec
from tests.mocks.github import make_group_payload


class TestRunnerGroupSpecPayloads:
    def test_create_payload_omits_empty_collections(self):
        payload = RunnerGroupSpec(name="g").to_create_payload()
        assert payload == {
            "name": "g",
            "visibility": "all",
            "allows_public_repositories": False,
            "restricted_to_workflows": False,
        }

    def test_create_payload_includes_sets(self):
        spec = RunnerGroupSpec(
            name="g",
            visibility="selected",
            selected_repository_ids=[1, 2],
            runners=[10],
            selected_workflows=["octo/repo/.github/workflows/ci.yml@main"],
            network_configuration_id="nc-1",
        )
        payload = spec.to_create_payload()
        assert payload["selected_repository_ids"] == [1, 2]
        assert payload["runners"] == [10]
        assert payload["selected_workflows"] == ["octo/repo/.github/workflows/ci.yml@main"]
        assert payload["network_configuration_id"] == "nc-1"

    def test_update_payload_has_no_membership_sets(self):
        payload = RunnerGroupSpec(name="g", selected_repository_ids=[1], runners=[2]).to_update_payload()
        assert "selected_repository_ids" not in payload
        assert "runners" not in payload
        assert payload["network_configuration_id"] is None


class TestRunnerGroupModel:
    def test_remote_assigned_fields(self):
        group = RunnerGroup.model_validate(make_group_payload(id=3, default=True, inherited=True))
        assert group.id == 3
        assert group.default is True
        assert group.inherited is True


class TestNetworkConfigurationSpec:
    def test_payload(self):
        spec = NetworkConfigurationSpec(name="net", network_settings_ids=["ns-1"])
        assert spec.to_payload() == {
            "name": "net",
            "compute_service": "actions",
            "network_settings_ids": ["ns-1"],
        }
