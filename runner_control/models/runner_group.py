from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class RunnerGroup(BaseModel):
    """
    A self-hosted runner group.

    ``default``, ``inherited``, the URLs and ``workflow_restrictions_read_only``
    are assigned by GitHub and never sent back.
    """

    model_config = ConfigDict(extra="ignore")

    id: int
    name: str
    visibility: str = "all"
    default: bool = False
    inherited: bool = False
    allows_public_repositories: bool = False
    restricted_to_workflows: bool = False
    selected_workflows: List[str] = Field(default_factory=list)
    network_configuration_id: Optional[str] = None
    workflow_restrictions_read_only: bool = False
    selected_repositories_url: Optional[str] = None
    runners_url: Optional[str] = None
    hosted_runners_url: Optional[str] = None


class Repository(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: int
    name: Optional[str] = None
    full_name: Optional[str] = None
    private: bool = False
    visibility: Optional[str] = None
