"""
Self-hosted runner group reconciliation.

Visibility and selected repositories must stay consistent on every create and
update: visibility 'all' admits no selected repositories, visibility
'selected' requires at least one. Repository and runner membership are each
replaced wholesale with a PUT of the complete set.
"""

import logging
from typing import List, Optional, Sequence

from runner_control.core.constants import (
    RUNNER_GROUP_VISIBILITIES,
    VISIBILITY_ALL,
    VISIBILITY_SELECTED,
)
from runner_control.core.errors import ResponseShapeError, ValidationError, failing_step
from runner_control.models.runner import Runner
from runner_control.models.runner_group import Repository, RunnerGroup
from runner_control.schemas.runner_group import RunnerGroupSpec
from runner_control.services.github import GitHubClient
from runner_control.services.label_diff import set_changed

logger = logging.getLogger(__name__)


def validate_visibility(visibility: str, selected_repository_ids: Optional[Sequence[int]]) -> None:
    """Raise ValidationError unless visibility and selected repositories agree."""
    if visibility not in RUNNER_GROUP_VISIBILITIES:
        allowed = ", ".join(sorted(RUNNER_GROUP_VISIBILITIES))
        raise ValidationError(f"Invalid visibility '{visibility}' (must be one of: {allowed})")
    if visibility == VISIBILITY_ALL and selected_repository_ids:
        raise ValidationError("selected_repository_ids cannot be set when visibility is 'all'")
    if visibility == VISIBILITY_SELECTED and not selected_repository_ids:
        raise ValidationError("selected_repository_ids cannot be empty when visibility is 'selected'")


class RunnerGroupService:
    def __init__(self, client: GitHubClient):
        self.client = client

    def _groups_path(self, *parts) -> str:
        return self.client.org_path("actions", "runner-groups", *parts)

    async def create(self, spec: RunnerGroupSpec) -> RunnerGroup:
        validate_visibility(spec.visibility, spec.selected_repository_ids)

        logger.info(f"Creating runner group '{spec.name}' (visibility: {spec.visibility})")
        with failing_step("create_group"):
            group = await self.client.post(self._groups_path(), spec.to_create_payload(), model=RunnerGroup)
            if group is None:
                raise ResponseShapeError("POST", self._groups_path(), 201, "empty body")

        logger.info(f"Runner group '{spec.name}' created with id {group.id}")
        return group

    async def read(self, group_id: int) -> RunnerGroup:
        return await self.client.get(self._groups_path(group_id), model=RunnerGroup)

    async def list(self) -> List[RunnerGroup]:
        return await self.client.get_all(self._groups_path(), "runner_groups", model=RunnerGroup)

    async def find_by_name(self, name: str) -> Optional[RunnerGroup]:
        for group in await self.list():
            if group.name == name:
                return group
        return None

    async def list_repositories(self, group_id: int) -> List[Repository]:
        path = self._groups_path(group_id, "repositories")
        return await self.client.get_all(path, "repositories", model=Repository)

    async def list_runners(self, group_id: int) -> List[Runner]:
        return await self.client.get_all(self._groups_path(group_id, "runners"), "runners", model=Runner)

    async def update(self, group_id: int, previous: RunnerGroupSpec, desired: RunnerGroupSpec) -> RunnerGroup:
        """
        PATCH the scalar fields, then replace repositories and runners if they changed.

        The two set replacements are independent calls; if the second fails the
        first stays applied and the error names the failed step.
        """
        validate_visibility(desired.visibility, desired.selected_repository_ids)

        logger.info(f"Updating runner group {group_id}")
        with failing_step("update_group", resource_id=group_id):
            group = await self.client.patch(
                self._groups_path(group_id), desired.to_update_payload(), model=RunnerGroup
            )

        if set_changed(previous.selected_repository_ids, desired.selected_repository_ids):
            with failing_step("set_repositories", resource_id=group_id):
                await self.set_repositories(group_id, desired.selected_repository_ids)

        if set_changed(previous.runners, desired.runners):
            with failing_step("set_runners", resource_id=group_id):
                await self.set_runners(group_id, desired.runners)

        if group is not None:
            return group
        return await self.read(group_id)

    async def set_repositories(self, group_id: int, repository_ids: Sequence[int]) -> None:
        """Replace the complete list of repositories allowed to use the group."""
        logger.info(f"Replacing repositories of runner group {group_id}")
        await self.client.put(
            self._groups_path(group_id, "repositories"),
            {"selected_repository_ids": list(repository_ids)},
        )

    async def set_runners(self, group_id: int, runner_ids: Sequence[int]) -> None:
        """Replace the complete list of runners in the group."""
        logger.info(f"Replacing runners of runner group {group_id}")
        await self.client.put(self._groups_path(group_id, "runners"), {"runners": list(runner_ids)})

    async def add_runner(self, group_id: int, runner_id: int) -> None:
        logger.info(f"Adding runner {runner_id} to runner group {group_id}")
        await self.client.put(self._groups_path(group_id, "runners", runner_id))

    async def remove_runner(self, group_id: int, runner_id: int) -> None:
        logger.info(f"Removing runner {runner_id} from runner group {group_id}")
        await self.client.delete(self._groups_path(group_id, "runners", runner_id))

    async def delete(self, group_id: int) -> None:
        logger.info(f"Deleting runner group {group_id}")
        await self.client.delete(self._groups_path(group_id))
