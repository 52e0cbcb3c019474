"""GitHub side of the migration: REST through PyGithub, Projects through GraphQL."""

from __future__ import annotations

import logging
import os
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, Final

from github import Auth, Github, GithubException, UnknownObjectException

from . import utils
from .exceptions import LabelAlreadyExistsError, MigrationError, TransportError, UserNotFoundError
from .models import (
    CreatedIssue,
    ExistingProjectItem,
    ProjectInfo,
    ProjectItemsPage,
    StatusOption,
    TargetLabel,
    TargetMilestone,
    TargetUser,
)

if TYPE_CHECKING:
    from collections.abc import Iterator

    from github.Issue import Issue
    from github.Milestone import Milestone
    from github.Repository import Repository

    from .protocols import OwnerType
    from .schemas import RepoTarget

# Module-wide logger
logger: logging.Logger = logging.getLogger(__name__)

_TOKEN_ENV_VARS: Final[tuple[str, ...]] = ("GITHUB_TOKEN", "PAT")
_DEFAULT_TOKEN_PASS_PATH: Final[str] = "github/cli/token"  # noqa: S105

STATUS_FIELD_NAME: Final[str] = "Status"
# GitHub's neutral label color, used when the map does not give one
DEFAULT_LABEL_COLOR: Final[str] = "ededed"

_OWNER_PLACEHOLDER = "__OWNER__"

PROJECT_QUERY = """
query($login: String!, $number: Int!) {
  __OWNER__(login: $login) {
    projectV2(number: $number) {
      id
      number
      title
      fields(first: 100) {
        nodes {
          ... on ProjectV2FieldCommon {
            id
            name
          }
          ... on ProjectV2SingleSelectField {
            options {
              id
              name
              color
            }
          }
        }
      }
    }
  }
}
"""

PROJECT_ITEMS_QUERY = """
query($login: String!, $number: Int!, $first: Int!, $after: String) {
  __OWNER__(login: $login) {
    projectV2(number: $number) {
      items(first: $first, after: $after) {
        pageInfo {
          hasNextPage
          endCursor
        }
        nodes {
          id
          content {
            ... on Issue {
              number
              title
            }
          }
          fieldValueByName(name: "Status") {
            ... on ProjectV2ItemFieldSingleSelectValue {
              name
            }
          }
        }
      }
    }
  }
}
"""

ADD_PROJECT_ITEM_MUTATION = """
mutation($projectId: ID!, $contentId: ID!) {
  addProjectV2ItemById(input: {projectId: $projectId, contentId: $contentId}) {
    item {
      id
    }
  }
}
"""

SET_ITEM_STATUS_MUTATION = """
mutation($projectId: ID!, $itemId: ID!, $fieldId: ID!, $optionId: String!) {
  updateProjectV2ItemFieldValue(
    input: {projectId: $projectId, itemId: $itemId, fieldId: $fieldId, value: {singleSelectOptionId: $optionId}}
  ) {
    projectV2Item {
      id
    }
  }
}
"""


def get_token(token: str | None = None, pass_path: str | None = None) -> str | None:
    """Get a GitHub token: explicit value, pass path, env vars, then the default pass location."""
    if token:
        return token

    if pass_path:
        return utils.get_pass_value(pass_path)

    for env_var in _TOKEN_ENV_VARS:
        value = os.environ.get(env_var)
        if value:
            return value

    try:
        return utils.get_pass_value(_DEFAULT_TOKEN_PASS_PATH)
    except (utils.PassError, OSError):
        logger.warning("No GitHub token specified nor found")
        return None


def get_client(token: str | None = None) -> Github:
    """Get a GitHub client using the token (anonymous without one)."""
    if token is None:
        return Github()
    return Github(auth=Auth.Token(token))


def _is_already_exists_error(exc: GithubException) -> bool:
    """Check if a GithubException is a 422 'already_exists' validation error."""
    if exc.status != 422 or not isinstance(exc.data, dict):
        return False
    errors: object = exc.data.get("errors")
    if not isinstance(errors, list):
        return False
    return any(isinstance(e, dict) and e.get("code") == "already_exists" for e in errors)


@contextmanager
def _transport(action: str) -> Iterator[None]:
    try:
        yield
    except GithubException as e:
        msg = f"Failed to {action}: {e}"
        raise TransportError(msg) from e


class GitHubTarget:
    """`TargetClient` implementation for one repository (and its owner's projects)."""

    def __init__(self, client: Github, repo: RepoTarget) -> None:
        self.client: Github = client
        self.repo_target: RepoTarget = repo
        self._repository: Repository | None = None
        # Objects PyGithub needs back when creating issues and comments
        self._milestones: dict[int, Milestone] = {}
        self._issues: dict[int, Issue] = {}

    @property
    def repository(self) -> Repository:
        if self._repository is None:
            repo_path = self.repo_target.full_name
            try:
                self._repository = self.client.get_repo(repo_path)
            except UnknownObjectException as e:
                msg = f"Repository {repo_path} does not exist or is not accessible"
                raise MigrationError(msg) from e
            except GithubException as e:
                msg = f"Error loading repository {repo_path}: {e}"
                raise TransportError(msg) from e
        return self._repository

    def _graphql(self, query: str, variables: dict[str, Any]) -> dict[str, Any]:
        """Run a GraphQL document through PyGithub's requester (shared auth and rate limiting)."""
        _, response = self.client.requester.graphql_query(query, variables)
        return response["data"]

    # --- Repository ---

    def list_labels(self) -> list[TargetLabel]:
        with _transport("list labels"):
            return [TargetLabel(label.id, label.name, label.color) for label in self.repository.get_labels()]

    def list_milestones(self) -> list[TargetMilestone]:
        with _transport("list milestones"):
            milestones = list(self.repository.get_milestones(state="open"))
        self._milestones = {milestone.number: milestone for milestone in milestones}
        return [TargetMilestone(milestone.id, milestone.number, milestone.title) for milestone in milestones]

    def create_label(self, name: str, color: str | None) -> None:
        color = (color or DEFAULT_LABEL_COLOR).strip().removeprefix("#")
        try:
            self.repository.create_label(name=name, color=color)
        except GithubException as e:
            if _is_already_exists_error(e):
                msg = f"Label {name} already exists"
                raise LabelAlreadyExistsError(msg) from e
            msg = f"Failed to create label {name}: {e}"
            raise TransportError(msg) from e
        logger.debug(f"Created label {name} (#{color})")

    def get_user(self, username: str) -> TargetUser:
        try:
            user = self.client.get_user(username)
            return TargetUser(login=user.login, id=user.id)
        except UnknownObjectException as e:
            msg = f"GitHub user @{username} not found"
            raise UserNotFoundError(msg) from e
        except GithubException as e:
            msg = f"Failed to look up GitHub user @{username}: {e}"
            raise TransportError(msg) from e

    def create_issue(
        self,
        title: str,
        body: str,
        labels: list[str],
        assignees: list[str],
        milestone_number: int | None = None,
    ) -> CreatedIssue:
        with _transport(f"create issue {title!r}"):
            kwargs: dict[str, Any] = {"title": title, "body": body, "labels": labels, "assignees": assignees}
            if milestone_number is not None:
                milestone = self._milestones.get(milestone_number)
                if milestone is None:
                    milestone = self.repository.get_milestone(milestone_number)
                    self._milestones[milestone_number] = milestone
                kwargs["milestone"] = milestone
            issue = self.repository.create_issue(**kwargs)
        self._issues[issue.number] = issue
        logger.debug(f"Created issue #{issue.number}: {title}")
        return CreatedIssue(number=issue.number, node_id=issue.node_id)

    def create_comment(self, issue_number: int, body: str) -> None:
        with _transport(f"comment on issue #{issue_number}"):
            issue = self._issues.get(issue_number)
            if issue is None:
                issue = self.repository.get_issue(issue_number)
                self._issues[issue_number] = issue
            issue.create_comment(body)

    # --- Projects (v2) ---

    def get_project(self, owner_type: OwnerType, owner: str, number: int) -> ProjectInfo:
        query = PROJECT_QUERY.replace(_OWNER_PLACEHOLDER, owner_type)
        try:
            data = self._graphql(query, {"login": owner, "number": number})
        except UnknownObjectException as e:
            msg = f"Project #{number} of {owner_type} {owner} does not exist or is not accessible"
            raise MigrationError(msg) from e
        except GithubException as e:
            msg = f"Failed to load project #{number} of {owner}: {e}"
            raise TransportError(msg) from e

        project = (data.get(owner_type) or {}).get("projectV2")
        if not project:
            msg = f"Project #{number} of {owner_type} {owner} does not exist or is not accessible"
            raise MigrationError(msg)

        status_field = next(
            (node for node in project["fields"]["nodes"] if node and node.get("name") == STATUS_FIELD_NAME),
            None,
        )
        if status_field is None:
            msg = f"Project {project['title']} has no {STATUS_FIELD_NAME} field"
            raise MigrationError(msg)

        options = [
            StatusOption(id=option["id"], name=option["name"], color=option.get("color") or "")
            for option in status_field.get("options") or []
        ]
        return ProjectInfo(
            id=project["id"],
            number=project["number"],
            title=project["title"],
            status_field_id=status_field["id"],
            status_options=options,
        )

    def get_project_items_page(
        self,
        owner_type: OwnerType,
        owner: str,
        number: int,
        *,
        first: int,
        after: str | None = None,
    ) -> ProjectItemsPage:
        query = PROJECT_ITEMS_QUERY.replace(_OWNER_PLACEHOLDER, owner_type)
        with _transport(f"list items of project #{number}"):
            data = self._graphql(query, {"login": owner, "number": number, "first": first, "after": after})

        connection = data[owner_type]["projectV2"]["items"]
        items: list[ExistingProjectItem] = []
        for node in connection["nodes"]:
            content = node.get("content") or {}
            # Draft issues and pull requests have no issue number
            if not content.get("number"):
                continue
            status = node.get("fieldValueByName") or {}
            items.append(
                ExistingProjectItem(
                    id=node["id"],
                    issue_number=content["number"],
                    issue_title=content["title"],
                    current_status=status.get("name"),
                )
            )
        page_info = connection["pageInfo"]
        return ProjectItemsPage(items=items, end_cursor=page_info["endCursor"], has_next_page=page_info["hasNextPage"])

    def add_to_project(self, project_id: str, content_id: str) -> str:
        with _transport("add issue to project"):
            data = self._graphql(ADD_PROJECT_ITEM_MUTATION, {"projectId": project_id, "contentId": content_id})
        return data["addProjectV2ItemById"]["item"]["id"]

    def set_item_status(self, project_id: str, item_id: str, field_id: str, option_id: str) -> None:
        with _transport(f"set status of project item {item_id}"):
            self._graphql(
                SET_ITEM_STATUS_MUTATION,
                {"projectId": project_id, "itemId": item_id, "fieldId": field_id, "optionId": option_id},
            )
