"""Tests for runner group reconciliation."""

import asyncio

import httpx
import pytest

from runner_control.core.errors import RemoteError, ValidationError
from runner_control.schemas.runner_group import RunnerGroupSpec
from runner_control.services.runner_groups import RunnerGroupService, validate_visibility
from tests.mocks.github import (
    body_of,
    empty_response,
    json_response,
    make_client,
    make_group_payload,
    make_runner_payload,
    org_path,
)

GROUPS = org_path("actions", "runner-groups")


def group_path(group_id, *parts):
    return org_path("actions", "runner-groups", group_id, *parts)


def run(transport, operation):
    async def scenario():
        async with make_client(transport) as client:
            return await operation(RunnerGroupService(client))

    return asyncio.run(scenario())


class TestValidateVisibility:
    @pytest.mark.parametrize(
        "visibility,repositories",
        [("all", []), ("all", None), ("selected", [1]), ("private", []), ("private", [1, 2])],
    )
    def test_accepts(self, visibility, repositories):
        validate_visibility(visibility, repositories)

    def test_all_with_repositories(self):
        with pytest.raises(ValidationError, match="visibility is 'all'"):
            validate_visibility("all", [1])

    def test_selected_without_repositories(self):
        with pytest.raises(ValidationError, match="cannot be empty"):
            validate_visibility("selected", [])

    def test_unknown_visibility(self):
        with pytest.raises(ValidationError, match="Invalid visibility"):
            validate_visibility("public", [])


class TestRunnerGroupCreate:
    def test_create_posts_payload(self, transport):
        transport.add("POST", GROUPS, json_response(make_group_payload(id=9, name="gpu", visibility="selected"), 201))
        spec = RunnerGroupSpec(name="gpu", visibility="selected", selected_repository_ids=[11, 12], runners=[42])

        group = run(transport, lambda service: service.create(spec))

        assert group.id == 9
        assert body_of(transport.requests[0]) == {
            "name": "gpu",
            "visibility": "selected",
            "allows_public_repositories": False,
            "restricted_to_workflows": False,
            "selected_repository_ids": [11, 12],
            "runners": [42],
        }

    @pytest.mark.parametrize(
        "spec",
        [
            RunnerGroupSpec(name="g", visibility="all", selected_repository_ids=[1]),
            RunnerGroupSpec(name="g", visibility="selected"),
            RunnerGroupSpec(name="g", visibility="internal"),
        ],
    )
    def test_invalid_visibility_makes_no_calls(self, transport, spec):
        with pytest.raises(ValidationError):
            run(transport, lambda service: service.create(spec))
        assert transport.requests == []

    def test_remote_failure_reports_step(self, transport):
        transport.add("POST", GROUPS, httpx.Response(422, text="name taken"))

        with pytest.raises(RemoteError) as exc_info:
            run(transport, lambda service: service.create(RunnerGroupSpec(name="g")))

        assert exc_info.value.step == "create_group"
        assert exc_info.value.body == "name taken"


class TestRunnerGroupUpdate:
    def test_scalar_change_only_patches(self, transport):
        transport.add("PATCH", group_path(7), json_response(make_group_payload(name="renamed")))
        previous = RunnerGroupSpec(name="group-a", runners=[1, 2])
        desired = RunnerGroupSpec(name="renamed", runners=[2, 1])

        group = run(transport, lambda service: service.update(7, previous, desired))

        assert transport.calls == [("PATCH", group_path(7))]
        assert group.name == "renamed"
        patch = body_of(transport.requests[0])
        assert patch["name"] == "renamed"
        assert patch["network_configuration_id"] is None
        assert "runners" not in patch

    def test_replaces_changed_sets(self, transport):
        transport.add("PATCH", group_path(7), json_response(make_group_payload(visibility="selected")))
        transport.add("PUT", group_path(7, "repositories"), empty_response())
        transport.add("PUT", group_path(7, "runners"), empty_response())
        previous = RunnerGroupSpec(name="group-a", visibility="selected", selected_repository_ids=[1], runners=[5])
        desired = RunnerGroupSpec(name="group-a", visibility="selected", selected_repository_ids=[1, 2], runners=[6])

        run(transport, lambda service: service.update(7, previous, desired))

        assert transport.calls == [
            ("PATCH", group_path(7)),
            ("PUT", group_path(7, "repositories")),
            ("PUT", group_path(7, "runners")),
        ]
        assert body_of(transport.requests[1]) == {"selected_repository_ids": [1, 2]}
        assert body_of(transport.requests[2]) == {"runners": [6]}

    def test_second_set_failure_keeps_first_applied(self, transport):
        transport.add("PATCH", group_path(7), json_response(make_group_payload(visibility="selected")))
        transport.add("PUT", group_path(7, "repositories"), empty_response())
        transport.add("PUT", group_path(7, "runners"), httpx.Response(500, text="oops"))
        previous = RunnerGroupSpec(name="group-a", visibility="selected", selected_repository_ids=[1], runners=[5])
        desired = RunnerGroupSpec(name="group-a", visibility="selected", selected_repository_ids=[2], runners=[6])

        with pytest.raises(RemoteError) as exc_info:
            run(transport, lambda service: service.update(7, previous, desired))

        assert exc_info.value.step == "set_runners"
        assert exc_info.value.resource_id == 7
        assert len(transport.calls_to("PUT", group_path(7, "repositories"))) == 1

    def test_invalid_desired_state_makes_no_calls(self, transport):
        previous = RunnerGroupSpec(name="group-a", visibility="selected", selected_repository_ids=[1])
        desired = RunnerGroupSpec(name="group-a", visibility="all", selected_repository_ids=[1])

        with pytest.raises(ValidationError):
            run(transport, lambda service: service.update(7, previous, desired))

        assert transport.requests == []

    def test_empty_patch_response_reads_back(self, transport):
        transport.add("PATCH", group_path(7), empty_response())
        transport.add("GET", group_path(7), json_response(make_group_payload(name="group-b")))
        spec = RunnerGroupSpec(name="group-b")

        group = run(transport, lambda service: service.update(7, spec, spec))

        assert group.name == "group-b"
        assert transport.calls == [("PATCH", group_path(7)), ("GET", group_path(7))]


class TestRunnerGroupMembership:
    def test_add_and_remove_runner(self, transport):
        transport.add("PUT", group_path(7, "runners", 42), empty_response())
        transport.add("DELETE", group_path(7, "runners", 42), empty_response())

        async def scenario(service):
            await service.add_runner(7, 42)
            await service.remove_runner(7, 42)

        run(transport, scenario)

        assert [r.content for r in transport.requests] == [b"", b""]

    def test_list_runners(self, transport):
        transport.add(
            "GET",
            group_path(7, "runners"),
            json_response({"total_count": 1, "runners": [make_runner_payload(id=3, runner_group_id=7)]}),
        )
        runners = run(transport, lambda service: service.list_runners(7))
        assert [runner.runner_group_id for runner in runners] == [7]

    def test_list_repositories(self, transport):
        transport.add(
            "GET",
            group_path(7, "repositories"),
            json_response({"total_count": 1, "repositories": [{"id": 11, "full_name": "test-org/app"}]}),
        )
        repositories = run(transport, lambda service: service.list_repositories(7))
        assert repositories[0].full_name == "test-org/app"


class TestRunnerGroupLookupAndDelete:
    def test_find_by_name(self, transport):
        transport.add(
            "GET",
            GROUPS,
            json_response(
                {
                    "total_count": 2,
                    "runner_groups": [make_group_payload(id=1, name="Default"), make_group_payload(id=7)],
                }
            ),
        )
        assert run(transport, lambda service: service.find_by_name("group-a")).id == 7

    def test_find_by_name_missing(self, transport):
        transport.add("GET", GROUPS, json_response({"total_count": 0, "runner_groups": []}))
        assert run(transport, lambda service: service.find_by_name("nope")) is None

    @pytest.mark.parametrize("status_code", [204, 404])
    def test_delete(self, transport, status_code):
        transport.add("DELETE", group_path(7), httpx.Response(status_code))

        run(transport, lambda service: service.delete(7))

        assert transport.calls == [("DELETE", group_path(7))]

    def test_delete_failure_is_raised(self, transport):
        transport.add("DELETE", group_path(7), httpx.Response(409, text="group has runners"))

        with pytest.raises(RemoteError) as exc_info:
            run(transport, lambda service: service.delete(7))

        assert exc_info.value.status_code == 409
