"""
Schema Exports

Desired-state records supplied by the declarative caller, plus the result
records handed back to it.
"""

from runner_control.schemas.network import NetworkConfigurationSpec
from runner_control.schemas.runner import RunnerCreateResult, RunnerSpec
from runner_control.schemas.runner_group import RunnerGroupSpec

__all__ = [
    "NetworkConfigurationSpec",
    "RunnerCreateResult",
    "RunnerGroupSpec",
    "RunnerSpec",
]
