import random
from typing import Any, Awaitable, Callable, Dict, Iterable, Optional

from gifflow.github import api
from gifflow.github.classifier import ActionKey, branch_name
from gifflow.github.comments import GitHubActions, Target, target_from_payload
from gifflow.github.labeler import labels_for
from gifflow.github.search import find_similar
from gifflow.logger import get_logger
from gifflow.media.tenor import TenorResolver
from gifflow.responses import templates
from gifflow.responses.topics import pick_term


logger = get_logger("gifflow.responses.orchestrator")

Payload = Dict[str, Any]


# Keys answered by one fixed comment: (text, footer)
FIXED_TEMPLATES: Dict[ActionKey, tuple[str, Optional[str]]] = {
    ActionKey.MERGE_SUCCESSFUL: (templates.MERGE_SUCCESSFUL, None),
    ActionKey.MERGE_CONFLICT: (templates.MERGE_CONFLICT, None),
    ActionKey.APPROVED: (templates.APPROVED, None),
    ActionKey.ISSUE_RESOLVED: (templates.ISSUE_RESOLVED, None),
    ActionKey.DEPLOYED: (templates.DEPLOYED, None),
    ActionKey.DEPLOYMENT_CANCELED: (templates.DEPLOYMENT_CANCELED, None),
    ActionKey.CODE_STYLE: (templates.CODE_STYLE, templates.CODE_STYLE_FOOTER),
}


class ResponseOrchestrator:
    """
    Runs the response pipeline for each action key of a webhook.

    Collaborators are injectable: `client` is the GitHub REST module (or a
    fake with the same coroutines), `media` resolves a term to a GIF URL,
    `rng` picks topic terms.
    """

    def __init__(
        self,
        client=api,
        media: Optional[TenorResolver] = None,
        rng: Optional[random.Random] = None,
    ):
        self.client = client
        self.actions = GitHubActions(client)
        self.media = media or TenorResolver()
        self.rng = rng or random.Random()

        self._pipelines: Dict[ActionKey, Callable[..., Awaitable[None]]] = {
            ActionKey.PULL_REQUEST: self._new_contribution,
            ActionKey.ISSUE_OPENED: self._new_contribution,
            ActionKey.BRANCH_UPDATED: self._branch_updated,
        }
        for key in FIXED_TEMPLATES:
            self._pipelines[key] = self._fixed_comment

    def has_pipeline(self, key: ActionKey) -> bool:
        return key in self._pipelines

    async def resolve_media(self, key: ActionKey) -> Optional[str]:
        term = pick_term(key.value, self.rng)
        if term is None:
            logger.info("No topic entry for %s, skipping media", key.value)
            return None

        try:
            return await self.media.resolve(term)
        except Exception:
            logger.exception("Media resolution failed for %r", term)
            return None

    async def dispatch(self, keys: Iterable[ActionKey], payload: Payload):
        """
        Run every key independently: one failing pipeline never stops
        the others.
        """
        for key in keys:
            try:
                await self.handle(key, payload)
            except Exception:
                logger.exception("Pipeline for %s failed", key.value)

    async def handle(self, key: ActionKey, payload: Payload):
        pipeline = self._pipelines.get(key)
        if pipeline is None:
            return

        target = target_from_payload(payload)
        if target is None:
            logger.warning("Payload has no repository context for %s", key.value)
            return

        gif_url = await self.resolve_media(key)
        await pipeline(key, target, payload, gif_url)

    # ---------------------------------------------------------
    # Pipelines
    # ---------------------------------------------------------

    async def _new_contribution(
        self, key: ActionKey, target: Target, payload: Payload, gif_url: Optional[str]
    ):
        is_pr = key is ActionKey.PULL_REQUEST
        kind = "pr" if is_pr else "issue"

        similar = await find_similar(
            target.installation_id,
            target.owner,
            target.repo,
            target.title,
            target.number,
            kind,
            client=self.client,
        )
        labels = labels_for(target.title, target.body)

        similarity_posted = False
        if similar:
            header = templates.SIMILAR_PRS if is_pr else templates.SIMILAR_ISSUES
            similarity_posted = await self.actions.post_comment(
                target, templates.render_similar(header, similar)
            )

        if labels:
            await self.actions.auto_label_and_assign(target, labels)

        if not similarity_posted:
            text = templates.NEW_PR if is_pr else templates.NEW_ISSUE
            await self.actions.post_comment(target, templates.render_comment(text, gif_url))

    async def _branch_updated(
        self, key: ActionKey, target: Target, payload: Payload, gif_url: Optional[str]
    ):
        branch = branch_name(payload.get("ref"))

        if branch:
            text = templates.BRANCH_UPDATED.format(branch=branch)
        else:
            logger.error("The 'ref' field is missing in the push payload")
            text = templates.BRANCH_UNKNOWN

        await self.actions.post_comment(target, templates.render_comment(text, gif_url))

    async def _fixed_comment(
        self, key: ActionKey, target: Target, payload: Payload, gif_url: Optional[str]
    ):
        text, footer = FIXED_TEMPLATES[key]
        await self.actions.post_comment(
            target, templates.render_comment(text, gif_url, footer=footer)
        )
