"""
Self-hosted runner lifecycle.

Runners are created only through just-in-time (JIT) issuance, mutated through
group reassignment and label replacement, and deleted only while offline.
Multi-call operations run strictly in sequence and are not transactional: a
failure leaves earlier calls applied and names the failed step on the error.
"""

import logging
from typing import Any, List, Optional

from runner_control.core.constants import DEFAULT_RUNNER_GROUP_ID
from runner_control.core.errors import (
    PreconditionError,
    ResponseShapeError,
    ValidationError,
    failing_step,
)
from runner_control.models.runner import (
    JITConfig,
    Runner,
    RunnerApplication,
    RunnerLabel,
    RunnerLabelList,
    RunnerToken,
)
from runner_control.schemas.runner import RunnerCreateResult, RunnerSpec
from runner_control.services.github import GitHubClient
from runner_control.services.label_diff import LabelDiff, diff_labels, set_changed
from runner_control.services.runner_groups import RunnerGroupService

logger = logging.getLogger(__name__)


def allocated_runner_id(payload: Any) -> Optional[int]:
    """Runner id from a generate-jitconfig body, if it carries one."""
    if not isinstance(payload, dict):
        return None
    runner = payload.get("runner")
    if not isinstance(runner, dict):
        return None
    runner_id = runner.get("id")
    return runner_id if isinstance(runner_id, int) else None


class RunnerService:
    def __init__(self, client: GitHubClient):
        self.client = client
        self.groups = RunnerGroupService(client)

    def _runners_path(self, *parts) -> str:
        return self.client.org_path("actions", "runners", *parts)

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    @staticmethod
    def validate_create(spec: RunnerSpec) -> None:
        """A runner must declare at least one label of each kind before registration."""
        if not spec.name or not spec.name.strip():
            raise ValidationError("Runner name must not be empty")
        if not spec.read_only_labels:
            raise ValidationError(f"Runner '{spec.name}' must declare at least one read-only label")
        if not spec.labels:
            raise ValidationError(f"Runner '{spec.name}' must declare at least one custom label")

    async def create(self, spec: RunnerSpec) -> RunnerCreateResult:
        """
        Register a runner via JIT issuance, then set its custom labels.

        The JIT call allocates the runner identity. If anything fails after it,
        the error carries ``resource_id`` and is raised as is: issuing a second
        JIT call would allocate a duplicate runner.
        """
        self.validate_create(spec)

        group_id = spec.runner_group_id or DEFAULT_RUNNER_GROUP_ID
        payload = {
            "name": spec.name,
            "runner_group_id": group_id,
            "labels": list(spec.read_only_labels),
            "work_folder": spec.work_folder,
        }

        logger.info(f"Registering runner '{spec.name}' in group {group_id}")
        with failing_step("generate_jitconfig"):
            try:
                jit = await self.client.post(self._runners_path("generate-jitconfig"), payload, model=JITConfig)
            except ResponseShapeError as e:
                e.resource_id = allocated_runner_id(e.payload)
                if e.resource_id is not None:
                    logger.error(f"Runner '{spec.name}' was allocated as {e.resource_id} but the response is unusable")
                raise
            if jit is None:
                raise ResponseShapeError("POST", self._runners_path("generate-jitconfig"), 201, "empty body")

        runner = jit.runner
        diff = diff_labels(runner.label_names, spec.all_labels, spec.read_only_labels)
        if diff.to_send:
            with failing_step("set_labels", resource_id=runner.id):
                labels = await self._set_labels(runner.id, diff.to_send)
            runner = runner.model_copy(update={"labels": labels})

        logger.info(f"Runner '{spec.name}' registered with id {runner.id}")
        return RunnerCreateResult(runner=runner, encoded_jit_config=jit.encoded_jit_config)

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    async def read(self, runner_id: int) -> Runner:
        return await self.client.get(self._runners_path(runner_id), model=Runner)

    async def list(self, runner_group_id: Optional[int] = None) -> List[Runner]:
        """All organization runners, or only the members of one group."""
        if runner_group_id:
            path = self.client.org_path("actions", "runner-groups", runner_group_id, "runners")
        else:
            path = self._runners_path()
        return await self.client.get_all(path, "runners", model=Runner)

    async def find_by_name(self, name: str, runner_group_id: Optional[int] = None) -> Optional[Runner]:
        for runner in await self.list(runner_group_id):
            if runner.name == name:
                return runner
        return None

    async def list_labels(self, runner_id: int) -> List[RunnerLabel]:
        labels = await self.client.get(self._runners_path(runner_id, "labels"), model=RunnerLabelList)
        return labels.labels if labels else []

    async def list_applications(self) -> List[RunnerApplication]:
        """Runner agent binaries available for download."""
        applications = await self.client.get(self._runners_path("downloads"), model=List[RunnerApplication])
        return applications or []

    async def create_registration_token(self) -> RunnerToken:
        return await self.client.post(self._runners_path("registration-token"), model=RunnerToken)

    async def create_remove_token(self) -> RunnerToken:
        return await self.client.post(self._runners_path("remove-token"), model=RunnerToken)

    # ------------------------------------------------------------------
    # Update
    # ------------------------------------------------------------------

    async def reassign_group(
        self,
        runner_id: int,
        old_group_id: Optional[int],
        new_group_id: Optional[int],
    ) -> None:
        """Remove from the old group, then add to the new one.

        If the removal fails the addition is never attempted.
        """
        if old_group_id == new_group_id:
            return
        if old_group_id:
            with failing_step("remove_from_group", resource_id=runner_id):
                await self.groups.remove_runner(old_group_id, runner_id)
        if new_group_id:
            with failing_step("add_to_group", resource_id=runner_id):
                await self.groups.add_runner(new_group_id, runner_id)

    async def plan_labels(self, runner_id: int, desired: List[str]) -> LabelDiff:
        """Classify current labels from the remote and diff them; no mutation."""
        current = await self.list_labels(runner_id)
        read_only = [label.name for label in current if label.is_read_only]
        return diff_labels([label.name for label in current], desired, read_only)

    async def update_labels(self, runner_id: int, desired: List[str]) -> List[RunnerLabel]:
        with failing_step("read_labels", resource_id=runner_id):
            diff = await self.plan_labels(runner_id, desired)
        diff.raise_for_rejected(step="plan_labels")
        with failing_step("set_labels", resource_id=runner_id):
            return await self._set_labels(runner_id, diff.to_send)

    @staticmethod
    def _reject_labels(runner_id: int, message: str, rejected: List[str]) -> None:
        logger.warning(f"Rejected label update for runner {runner_id}: {message} {rejected}")
        raise ValidationError(f"{message}: {', '.join(rejected)}", rejected=rejected, step="plan_labels")

    async def update(self, runner_id: int, previous: RunnerSpec, desired: RunnerSpec) -> Runner:
        """
        Move the runner between groups and replace its custom labels.

        Label rules are checked before any mutation, so a rejected label set
        leaves the runner untouched, group included. Read-only labels are
        fixed at registration: they can be neither removed nor added later.
        """
        labels_changed = set_changed(previous.all_labels, desired.all_labels)
        added_read_only = [name for name in desired.read_only_labels if name not in previous.read_only_labels]

        diff = None
        if labels_changed or added_read_only:
            removed_read_only = [name for name in previous.read_only_labels if name not in desired.all_labels]
            if removed_read_only:
                self._reject_labels(runner_id, "Read-only labels cannot be removed", removed_read_only)

            with failing_step("read_labels", resource_id=runner_id):
                current = await self.list_labels(runner_id)
            remote_read_only = [label.name for label in current if label.is_read_only]

            not_registered = [name for name in desired.read_only_labels if name not in remote_read_only]
            if not_registered:
                self._reject_labels(
                    runner_id, "Read-only labels can only be assigned at registration", not_registered
                )

            diff = diff_labels([label.name for label in current], desired.all_labels, remote_read_only)
            if not diff.ok:
                self._reject_labels(
                    runner_id, "Read-only labels cannot be removed", [str(item) for item in diff.rejected]
                )

        await self.reassign_group(runner_id, previous.runner_group_id, desired.runner_group_id)

        if diff is not None and labels_changed:
            logger.info(f"Replacing labels of runner {runner_id} with {diff.to_send}")
            with failing_step("set_labels", resource_id=runner_id):
                await self._set_labels(runner_id, diff.to_send)

        return await self.read(runner_id)

    async def _set_labels(self, runner_id: int, labels: List[str]) -> List[RunnerLabel]:
        """Full replacement of the runner's custom labels."""
        result = await self.client.put(
            self._runners_path(runner_id, "labels"), {"labels": list(labels)}, model=RunnerLabelList
        )
        return result.labels if result else []

    # ------------------------------------------------------------------
    # Delete
    # ------------------------------------------------------------------

    async def delete(self, runner_id: int) -> None:
        """Delete a runner; only allowed while it is offline."""
        with failing_step("read_status", resource_id=runner_id):
            runner = await self.read(runner_id)
        if not runner.is_offline:
            logger.warning(f"Refusing to delete runner {runner_id} with status '{runner.status}'")
            raise PreconditionError(
                f"Runner {runner_id} must be offline to be deleted (status: {runner.status})",
                status=runner.status,
                step="read_status",
            )

        logger.info(f"Deleting runner {runner_id}")
        with failing_step("delete_runner", resource_id=runner_id):
            await self.client.delete(self._runners_path(runner_id))
