"""
Pydantic models for hosted compute networking (Azure private networking).
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class NetworkConfiguration(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    name: str
    compute_service: Optional[str] = None
    network_settings_ids: List[str] = Field(default_factory=list)
    created_on: Optional[datetime] = None


class NetworkSettings(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    name: str
    network_configuration_id: Optional[str] = None
    subnet_id: Optional[str] = None
    region: Optional[str] = None
