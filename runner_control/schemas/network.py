from typing import Any, Dict, List

from pydantic import BaseModel, Field

from runner_control.core.constants import DEFAULT_COMPUTE_SERVICE


class NetworkConfigurationSpec(BaseModel):
    """Desired state of a hosted compute network configuration."""

    name: str = Field(..., description="Name of the network configuration")
    compute_service: str = Field(DEFAULT_COMPUTE_SERVICE, description="'none' or 'actions'")
    network_settings_ids: List[str] = Field(
        default_factory=list, description="Network settings resources to attach (currently exactly one)"
    )

    def to_payload(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "compute_service": self.compute_service,
            "network_settings_ids": list(self.network_settings_ids),
        }
