"""
Pydantic models for GitHub self-hosted runners as returned by the REST API.

Uses extra="ignore" to silently discard fields we don't use.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from runner_control.core.constants import LABEL_TYPE_READ_ONLY, RUNNER_STATUS_OFFLINE


class RunnerLabel(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: Optional[int] = None
    name: str
    type: str = "custom"  # "read-only" or "custom"

    @property
    def is_read_only(self) -> bool:
        return self.type == LABEL_TYPE_READ_ONLY


class Runner(BaseModel):
    """A self-hosted runner registered with the organization."""

    model_config = ConfigDict(extra="ignore")

    id: int
    name: str
    os: Optional[str] = None
    status: Optional[str] = None  # "online", "offline", ...
    busy: bool = False
    ephemeral: bool = False
    runner_group_id: Optional[int] = None
    labels: List[RunnerLabel] = Field(default_factory=list)

    @property
    def label_names(self) -> List[str]:
        return [label.name for label in self.labels]

    @property
    def read_only_label_names(self) -> List[str]:
        return [label.name for label in self.labels if label.is_read_only]

    @property
    def custom_label_names(self) -> List[str]:
        return [label.name for label in self.labels if not label.is_read_only]

    @property
    def is_offline(self) -> bool:
        return self.status == RUNNER_STATUS_OFFLINE


class RunnerLabelList(BaseModel):
    model_config = ConfigDict(extra="ignore")

    total_count: int = 0
    labels: List[RunnerLabel] = Field(default_factory=list)


class JITConfig(BaseModel):
    """Response of generate-jitconfig: the new runner plus its one-time secret."""

    model_config = ConfigDict(extra="ignore")

    runner: Runner
    encoded_jit_config: str = Field(..., repr=False)


class RunnerApplication(BaseModel):
    """A downloadable runner agent binary."""

    model_config = ConfigDict(extra="ignore")

    os: Optional[str] = None
    architecture: Optional[str] = None
    download_url: Optional[str] = None
    filename: Optional[str] = None
    sha256_checksum: Optional[str] = None


class RunnerToken(BaseModel):
    """Registration or removal token for the organization."""

    model_config = ConfigDict(extra="ignore")

    token: str = Field(..., repr=False)
    expires_at: Optional[datetime] = None
