from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Optional

from gifflow.logger import get_logger


logger = get_logger("gifflow.github.classifier")


class ActionKey(str, Enum):
    PULL_REQUEST = "pull request"
    PULL_REQUEST_REOPENED = "pull request reopened"
    MERGE_SUCCESSFUL = "merge successful"
    MERGE_CONFLICT = "merge conflict"
    APPROVED = "approved"

    BRANCH_UPDATED = "branch updated"
    FORCE_PUSH = "force push detected"
    FEATURE_BRANCH_UPDATED = "feature branch updated"
    HOTFIX_BRANCH_UPDATED = "hotfix branch updated"

    ISSUE_OPENED = "issue opened"
    ISSUE_REOPENED = "reopened issue"
    ISSUE_RESOLVED = "issue resolved"

    DEPLOYED = "deployed"
    DEPLOYMENT_FAILED = "deployment failed"
    DEPLOYMENT_CANCELED = "deployment canceled"
    DEPLOYMENT_TIMED_OUT = "deployment timed out"
    DEPLOYMENT_UNKNOWN = "deployment unknown status"

    CODE_STYLE = "code style"

    NEW_DISCUSSION = "new discussion"
    DISCUSSION_ANSWERED = "discussion answered"
    DISCUSSION_CLOSED = "discussion closed"
    NEW_DISCUSSION_COMMENT = "new discussion comment"


Payload = Dict[str, Any]


@dataclass(frozen=True)
class Rule:
    key: ActionKey
    when: Callable[[Payload], bool]


# A group is an ordered tuple of rules where only the first match fires.
# Groups of the same event are independent of each other.
RuleGroup = tuple


# ---------------------------------------------------------
# Payload projections
# ---------------------------------------------------------

def _action(payload: Payload) -> Optional[str]:
    return payload.get("action")


def _section(payload: Payload, name: str) -> Payload:
    value = payload.get(name)
    return value if isinstance(value, dict) else {}


def _text(value: Any) -> str:
    return value if isinstance(value, str) else ""


def branch_name(ref: Optional[str]) -> Optional[str]:
    """
    "refs/heads/feature/x" -> "feature/x". Tags and other refs keep their
    full name.
    """
    if not isinstance(ref, str) or not ref:
        return None
    prefix = "refs/heads/"
    return ref[len(prefix):] if ref.startswith(prefix) else ref


def _branch(payload: Payload) -> str:
    return branch_name(payload.get("ref")) or ""


def _is_default_branch(payload: Payload) -> bool:
    return _branch(payload) in ("main", "master")


def _comment_text(payload: Payload) -> str:
    return _text(_section(payload, "comment").get("body")).lower()


def _comment_by_bot(payload: Payload) -> bool:
    user = _section(_section(payload, "comment"), "user")
    login = _text(user.get("login")).lower()
    return user.get("type") == "Bot" or login.endswith("[bot]")


def _new_human_comment(payload: Payload) -> bool:
    return _action(payload) == "created" and not _comment_by_bot(payload)


def _deployment_state(payload: Payload) -> str:
    return _text(_section(payload, "deployment_status").get("state")).lower()


def _check(payload: Payload) -> Payload:
    return _section(payload, "check_run") or _section(payload, "check_suite")


def _check_name(payload: Payload) -> str:
    check = _check(payload)
    name = _text(check.get("name")) or _text(_section(check, "app").get("name"))
    return name.lower()


def _conclusion(payload: Payload) -> Optional[str]:
    return _check(payload).get("conclusion")


def _action_is(*actions: str) -> Callable[[Payload], bool]:
    return lambda payload: _action(payload) in actions


def _state_is(*states: str) -> Callable[[Payload], bool]:
    return lambda payload: _deployment_state(payload) in states


# ---------------------------------------------------------
# Rule tables
# ---------------------------------------------------------

EVENT_RULES: Dict[str, tuple[RuleGroup, ...]] = {
    "pull_request": (
        (
            Rule(ActionKey.PULL_REQUEST, _action_is("opened")),
            Rule(ActionKey.PULL_REQUEST_REOPENED, _action_is("reopened")),
            Rule(
                ActionKey.MERGE_SUCCESSFUL,
                lambda p: _action(p) == "closed"
                and bool(_section(p, "pull_request").get("merged")),
            ),
            Rule(
                ActionKey.MERGE_CONFLICT,
                lambda p: _section(p, "pull_request").get("mergeable_state") == "dirty",
            ),
            Rule(ActionKey.APPROVED, _action_is("approved")),
        ),
    ),
    "pull_request_review": (
        (
            Rule(
                ActionKey.APPROVED,
                lambda p: _action(p) == "submitted"
                and _text(_section(p, "review").get("state")).lower() == "approved",
            ),
        ),
    ),
    "push": (
        (Rule(ActionKey.BRANCH_UPDATED, _is_default_branch),),
        (
            Rule(
                ActionKey.FORCE_PUSH,
                lambda p: not _is_default_branch(p) and bool(p.get("forced")),
            ),
        ),
        (
            Rule(
                ActionKey.FEATURE_BRANCH_UPDATED,
                lambda p: _branch(p).startswith("feature/"),
            ),
            Rule(
                ActionKey.HOTFIX_BRANCH_UPDATED,
                lambda p: _branch(p).startswith("hotfix/"),
            ),
        ),
    ),
    "issues": (
        (
            Rule(ActionKey.ISSUE_OPENED, _action_is("opened")),
            Rule(ActionKey.ISSUE_REOPENED, _action_is("reopened")),
            Rule(ActionKey.ISSUE_RESOLVED, _action_is("closed")),
        ),
    ),
    "issue_comment": (
        (
            Rule(
                ActionKey.ISSUE_RESOLVED,
                lambda p: _new_human_comment(p) and "fix" in _comment_text(p),
            ),
        ),
        (
            Rule(
                ActionKey.DEPLOYED,
                lambda p: _new_human_comment(p) and "deploy" in _comment_text(p),
            ),
        ),
    ),
    "deployment_status": (
        (
            Rule(ActionKey.DEPLOYED, _state_is("success")),
            Rule(ActionKey.DEPLOYMENT_FAILED, _state_is("failure", "error")),
            Rule(ActionKey.DEPLOYMENT_CANCELED, _state_is("cancelled", "canceled")),
            Rule(ActionKey.DEPLOYMENT_TIMED_OUT, _state_is("timed_out")),
            Rule(
                ActionKey.DEPLOYMENT_UNKNOWN,
                lambda p: bool(_deployment_state(p)),
            ),
        ),
    ),
    "discussion": (
        (
            Rule(ActionKey.NEW_DISCUSSION, _action_is("created")),
            Rule(ActionKey.DISCUSSION_ANSWERED, _action_is("answered")),
            Rule(ActionKey.DISCUSSION_CLOSED, _action_is("closed")),
        ),
    ),
    "discussion_comment": (
        (Rule(ActionKey.NEW_DISCUSSION_COMMENT, _action_is("created")),),
    ),
}

_CHECK_RULES: tuple[RuleGroup, ...] = (
    (
        Rule(
            ActionKey.CODE_STYLE,
            lambda p: _conclusion(p) == "success" and "lint" in _check_name(p),
        ),
        Rule(
            ActionKey.DEPLOYED,
            lambda p: _conclusion(p) == "success" and "deploy" in _check_name(p),
        ),
        Rule(ActionKey.CODE_STYLE, lambda p: _conclusion(p) == "failure"),
    ),
)

EVENT_RULES["check_run"] = _CHECK_RULES
EVENT_RULES["check_suite"] = _CHECK_RULES

# Handled by the installation lifecycle, never by action keys
LIFECYCLE_EVENTS = frozenset({"installation", "installation_repositories"})


def classify(event_type: str, payload: Payload) -> list[ActionKey]:
    """
    Map a webhook to its action keys.

    Pure: unknown events and unrecognized payload shapes yield [].
    """
    if not isinstance(payload, dict):
        return []

    keys: list[ActionKey] = []

    for group in EVENT_RULES.get(event_type, ()):
        for rule in group:
            if rule.when(payload):
                keys.append(rule.key)
                break

    if ActionKey.DEPLOYMENT_UNKNOWN in keys:
        logger.info("Unhandled deployment status: %s", _deployment_state(payload))

    if not keys:
        logger.debug("No action for %s/%s", event_type, _action(payload))

    return keys
