import logging
from typing import List, Optional

from runner_control.core.constants import COMPUTE_SERVICES
from runner_control.core.errors import ValidationError
from runner_control.models.network import NetworkConfiguration, NetworkSettings
from runner_control.schemas.network import NetworkConfigurationSpec
from runner_control.services.github import GitHubClient

logger = logging.getLogger(__name__)


class NetworkService:
    """
    Hosted compute network configurations and (read-only) network settings.

    Network settings resources are created outside the API, e.g. from an Azure
    subscription, so they can only be looked up here.
    """

    def __init__(self, client: GitHubClient):
        self.client = client

    def _configurations_path(self, *parts) -> str:
        return self.client.org_path("settings", "network-configurations", *parts)

    @staticmethod
    def validate(spec: NetworkConfigurationSpec) -> None:
        if not spec.name or not spec.name.strip():
            raise ValidationError("Network configuration name must not be empty")
        if spec.compute_service not in COMPUTE_SERVICES:
            allowed = ", ".join(sorted(COMPUTE_SERVICES))
            raise ValidationError(f"Invalid compute_service '{spec.compute_service}' (must be one of: {allowed})")
        if not spec.network_settings_ids:
            raise ValidationError("network_settings_ids must contain at least one network settings id")

    async def create(self, spec: NetworkConfigurationSpec) -> NetworkConfiguration:
        self.validate(spec)
        logger.info(f"Creating network configuration '{spec.name}'")
        return await self.client.post(self._configurations_path(), spec.to_payload(), model=NetworkConfiguration)

    async def read(self, configuration_id: str) -> NetworkConfiguration:
        return await self.client.get(self._configurations_path(configuration_id), model=NetworkConfiguration)

    async def list(self) -> List[NetworkConfiguration]:
        return await self.client.get_all(
            self._configurations_path(), "network_configurations", model=NetworkConfiguration
        )

    async def find_by_name(self, name: str) -> Optional[NetworkConfiguration]:
        for configuration in await self.list():
            if configuration.name == name:
                return configuration
        return None

    async def update(self, configuration_id: str, spec: NetworkConfigurationSpec) -> NetworkConfiguration:
        self.validate(spec)
        logger.info(f"Updating network configuration {configuration_id}")
        configuration = await self.client.patch(
            self._configurations_path(configuration_id), spec.to_payload(), model=NetworkConfiguration
        )
        if configuration is not None:
            return configuration
        return await self.read(configuration_id)

    async def delete(self, configuration_id: str) -> None:
        logger.info(f"Deleting network configuration {configuration_id}")
        await self.client.delete(self._configurations_path(configuration_id))

    async def get_network_settings(self, settings_id: str) -> NetworkSettings:
        path = self.client.org_path("settings", "network-settings", settings_id)
        return await self.client.get(path, model=NetworkSettings)
