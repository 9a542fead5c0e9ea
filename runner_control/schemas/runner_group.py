from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from runner_control.core.constants import VISIBILITY_ALL


class RunnerGroupSpec(BaseModel):
    """Desired state of a self-hosted runner group."""

    name: str = Field(..., description="Name of the runner group")
    visibility: str = Field(VISIBILITY_ALL, description="One of 'all', 'selected', 'private'")
    selected_repository_ids: List[int] = Field(
        default_factory=list, description="Repositories allowed to use the group when visibility is 'selected'"
    )
    runners: List[int] = Field(default_factory=list, description="IDs of runners in the group")
    allows_public_repositories: bool = Field(False, description="Whether public repositories can use the group")
    restricted_to_workflows: bool = Field(False, description="Whether the group is restricted to selected workflows")
    selected_workflows: List[str] = Field(default_factory=list, description="Workflows allowed to use the group")
    network_configuration_id: Optional[str] = Field(
        None, description="Identifier of a hosted compute network configuration"
    )

    def to_create_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "name": self.name,
            "visibility": self.visibility,
            "allows_public_repositories": self.allows_public_repositories,
            "restricted_to_workflows": self.restricted_to_workflows,
        }
        if self.selected_repository_ids:
            payload["selected_repository_ids"] = list(self.selected_repository_ids)
        if self.runners:
            payload["runners"] = list(self.runners)
        if self.selected_workflows:
            payload["selected_workflows"] = list(self.selected_workflows)
        if self.network_configuration_id:
            payload["network_configuration_id"] = self.network_configuration_id
        return payload

    def to_update_payload(self) -> Dict[str, Any]:
        """Mutable scalar fields for PATCH. Membership sets are replaced separately."""
        return {
            "name": self.name,
            "visibility": self.visibility,
            "allows_public_repositories": self.allows_public_repositories,
            "restricted_to_workflows": self.restricted_to_workflows,
            "selected_workflows": list(self.selected_workflows),
            # None detaches the network configuration
            "network_configuration_id": self.network_configuration_id,
        }
