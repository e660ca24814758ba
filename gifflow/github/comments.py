from dataclasses import dataclass
from typing import Any, Dict, Iterable, Optional

from gifflow.github import api
from gifflow.logger import get_logger


logger = get_logger("gifflow.github.comments")


@dataclass(frozen=True)
class Target:
    """
    Where a response lands: an issue/PR number or, failing that, a commit.
    """
    installation_id: int
    owner: str
    repo: str
    number: Optional[int] = None
    sha: Optional[str] = None
    kind: str = "issue"
    title: str = ""
    body: str = ""

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repo}"


def _commit_sha(payload: Dict[str, Any]) -> Optional[str]:
    deployment = payload.get("deployment") or {}
    if deployment.get("sha"):
        return deployment["sha"]

    for section in ("check_run", "check_suite"):
        sha = (payload.get(section) or {}).get("head_sha")
        if sha:
            return sha

    head_commit = payload.get("head_commit") or {}
    return head_commit.get("id") or payload.get("after")


def target_from_payload(payload: Dict[str, Any]) -> Optional[Target]:
    installation_id = (payload.get("installation") or {}).get("id")
    repository = payload.get("repository") or {}
    owner = (repository.get("owner") or {}).get("login")
    repo = repository.get("name")

    if not installation_id or not owner or not repo:
        return None

    base = dict(installation_id=installation_id, owner=owner, repo=repo)

    issue = payload.get("issue")
    if issue and issue.get("number") is not None:
        return Target(
            **base,
            number=issue["number"],
            kind="pr" if issue.get("pull_request") else "issue",
            title=issue.get("title") or "",
            body=issue.get("body") or "",
        )

    pr = payload.get("pull_request")
    if pr and pr.get("number") is not None:
        return Target(
            **base,
            number=pr["number"],
            kind="pr",
            title=pr.get("title") or "",
            body=pr.get("body") or "",
        )

    sha = _commit_sha(payload)
    if sha:
        return Target(**base, sha=sha, kind="commit")

    return Target(**base, kind="none")


class GitHubActions:
    """
    Comment/label/assign adapters.

    Every call degrades to False/None on failure instead of raising.
    """

    def __init__(self, client=api):
        self.client = client

    async def post_comment(self, target: Target, body: str) -> bool:
        try:
            if target.number is not None:
                await self.client.create_comment(
                    target.installation_id, target.owner, target.repo, target.number, body
                )
                logger.info("Comment posted to #%s in %s", target.number, target.full_name)
            elif target.sha:
                await self.client.create_commit_comment(
                    target.installation_id, target.owner, target.repo, target.sha, body
                )
                logger.info("Comment posted to commit %s in %s", target.sha[:7], target.full_name)
            else:
                logger.warning("No issue, pull request or commit to comment on in %s", target.full_name)
                return False
        except Exception:
            logger.exception("Failed to post comment in %s", target.full_name)
            return False

        return True

    async def add_labels(self, target: Target, labels: Iterable[str]) -> bool:
        labels = sorted(set(labels))
        if not labels or target.number is None:
            return False

        try:
            await self.client.add_labels(
                target.installation_id, target.owner, target.repo, target.number, labels
            )
        except Exception:
            logger.exception("Failed to label #%s in %s", target.number, target.full_name)
            return False

        logger.info("Labeled #%s in %s: %s", target.number, target.full_name, ", ".join(labels))
        return True

    async def find_maintainer(self, target: Target) -> Optional[str]:
        """
        First collaborator, in listing order, with admin or push permission.
        """
        try:
            collaborators = await self.client.list_collaborators(
                target.installation_id, target.owner, target.repo
            )
        except Exception:
            logger.exception("Error fetching maintainer for %s", target.full_name)
            return None

        for collaborator in collaborators:
            permissions = collaborator.get("permissions") or {}
            if permissions.get("admin") or permissions.get("push"):
                return collaborator.get("login")

        return None

    async def assign(self, target: Target, login: str) -> bool:
        if target.number is None:
            return False

        try:
            await self.client.add_assignees(
                target.installation_id, target.owner, target.repo, target.number, [login]
            )
        except Exception:
            logger.exception("Failed to assign %s to #%s in %s", login, target.number, target.full_name)
            return False

        return True

    async def auto_label_and_assign(self, target: Target, labels: Iterable[str]) -> bool:
        """
        Apply the label set in one call, then assign one maintainer.

        Skipped entirely for an empty label set.
        """
        labels = set(labels)
        if not labels:
            return False

        await self.add_labels(target, labels)

        maintainer = await self.find_maintainer(target)
        if maintainer:
            await self.assign(target, maintainer)

        return True
