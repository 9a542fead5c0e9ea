"""Tests for hosted compute network configurations and settings."""

import asyncio

import pytest

from runner_control.core.errors import ValidationError
from runner_control.schemas.network import NetworkConfigurationSpec
from runner_control.services.network import NetworkService
from tests.mocks.github import body_of, empty_response, json_response, make_client, org_path

CONFIGURATIONS = org_path("settings", "network-configurations")


def configuration_payload(id="cfg-1", name="private-net", **kwargs):
    payload = {
        "id": id,
        "name": name,
        "compute_service": "actions",
        "network_settings_ids": ["ns-1"],
        "created_on": "2026-01-02T03:04:05Z",
    }
    payload.update(kwargs)
    return payload


def run(transport, operation):
    async def scenario():
        async with make_client(transport) as client:
            return await operation(NetworkService(client))

    return asyncio.run(scenario())


class TestNetworkConfigurationValidation:
    @pytest.mark.parametrize(
        "spec,message",
        [
            (NetworkConfigurationSpec(name="", network_settings_ids=["ns-1"]), "name"),
            (NetworkConfigurationSpec(name="n", compute_service="codespaces", network_settings_ids=["ns-1"]), "compute_service"),
            (NetworkConfigurationSpec(name="n"), "network_settings_ids"),
        ],
    )
    def test_rejects_before_any_call(self, transport, spec, message):
        with pytest.raises(ValidationError, match=message):
            run(transport, lambda service: service.create(spec))
        assert transport.requests == []


class TestNetworkConfigurationCrud:
    def test_create(self, transport):
        transport.add("POST", CONFIGURATIONS, json_response(configuration_payload(), 201))
        spec = NetworkConfigurationSpec(name="private-net", network_settings_ids=["ns-1"])

        configuration = run(transport, lambda service: service.create(spec))

        assert configuration.id == "cfg-1"
        assert configuration.created_on.year == 2026
        assert body_of(transport.requests[0]) == {
            "name": "private-net",
            "compute_service": "actions",
            "network_settings_ids": ["ns-1"],
        }

    def test_update_patches(self, transport):
        path = org_path("settings", "network-configurations", "cfg-1")
        transport.add("PATCH", path, json_response(configuration_payload(compute_service="none")))
        spec = NetworkConfigurationSpec(name="private-net", compute_service="none", network_settings_ids=["ns-1"])

        configuration = run(transport, lambda service: service.update("cfg-1", spec))

        assert configuration.compute_service == "none"
        assert body_of(transport.requests[0])["compute_service"] == "none"

    def test_find_by_name(self, transport):
        transport.add(
            "GET",
            CONFIGURATIONS,
            json_response(
                {
                    "total_count": 2,
                    "network_configurations": [
                        configuration_payload(id="a", name="one"),
                        configuration_payload(id="b", name="two"),
                    ],
                }
            ),
        )
        assert run(transport, lambda service: service.find_by_name("two")).id == "b"

    def test_delete(self, transport):
        path = org_path("settings", "network-configurations", "cfg-1")
        transport.add("DELETE", path, empty_response())
        run(transport, lambda service: service.delete("cfg-1"))
        assert transport.calls == [("DELETE", path)]


def test_get_network_settings(transport):
    path = org_path("settings", "network-settings", "ns-1")
    transport.add(
        "GET",
        path,
        json_response({"id": "ns-1", "name": "azure-vnet", "subnet_id": "/subscriptions/x/subnets/y", "region": "eastus"}),
    )

    settings = run(transport, lambda service: service.get_network_settings("ns-1"))

    assert settings.region == "eastus"
    assert settings.network_configuration_id is None
