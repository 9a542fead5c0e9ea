from typing import List, Optional

from pydantic import BaseModel, Field

from runner_control.core.constants import DEFAULT_WORK_FOLDER
from runner_control.models.runner import Runner


class RunnerSpec(BaseModel):
    """Desired state of a self-hosted runner."""

    name: str = Field(..., description="Name of the self-hosted runner")
    runner_group_id: Optional[int] = Field(None, description="ID of the runner group to add the runner to")
    labels: List[str] = Field(default_factory=list, description="Custom labels, replaceable after creation")
    read_only_labels: List[str] = Field(
        default_factory=list,
        description="Labels fixed at registration; can be added to but never removed",
    )
    work_folder: str = Field(DEFAULT_WORK_FOLDER, description="Working directory for job execution")

    @property
    def all_labels(self) -> List[str]:
        """Read-only labels followed by custom labels, without duplicates."""
        seen = set()
        result = []
        for name in [*self.read_only_labels, *self.labels]:
            if name not in seen:
                seen.add(name)
                result.append(name)
        return result


class RunnerCreateResult(BaseModel):
    """Materialized state of a newly registered runner."""

    runner: Runner
    encoded_jit_config: str = Field(..., repr=False, description="One-time runner configuration secret")

    @property
    def id(self) -> int:
        return self.runner.id
