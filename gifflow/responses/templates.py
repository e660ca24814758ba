from typing import Optional

from gifflow.settings import GIF_SETTINGS, GifSettings


ATTRIBUTION = "> [Via Tenor](https://tenor.com/)"

NEW_ISSUE = "😵 Oh no! A new issue spotted. Thank you for your contribution!"
NEW_PR = "😵 Oh no! A new PR spotted. Thank you for your contribution!"

SIMILAR_ISSUES = "👉🏻 Similar issues found, please check:"
SIMILAR_PRS = "👉🏻 Similar PRs found, please check:"

BRANCH_UPDATED = "The branch **{branch}** has been updated."
BRANCH_UNKNOWN = "😵 Oops! Something went wrong, the branch information couldn't be retrieved."

MERGE_SUCCESSFUL = "👌 The PR is merged."
MERGE_CONFLICT = "⚔️ Merge Conflict, resolve it."
APPROVED = "👍 Approved by admin/maintainer."
ISSUE_RESOLVED = "🎉🥳 Looks like issue resolved, feel free to reopen, if not."
DEPLOYED = "🚀 Deployment successful, hooray!"
DEPLOYMENT_CANCELED = "❌ Deployment was canceled."
CODE_STYLE = "🔍 Code style issues detected."
CODE_STYLE_FOOTER = "> Please review the guidelines and make necessary adjustments."


def render_comment(
    text: str,
    gif_url: Optional[str],
    footer: Optional[str] = None,
    gif: GifSettings = GIF_SETTINGS,
) -> str:
    """
    Text, then the GIF and its attribution when one was resolved.
    """
    parts = [text]

    if gif_url:
        parts.append(
            f'<img src="{gif_url}" width="{gif.width}" alt="tenorGif" height="{gif.height}"/>'
        )
    comment = "<br/>".join(parts)

    if footer:
        comment += f"\n\n{footer}"

    if gif_url:
        comment += f"\n\n{ATTRIBUTION}"

    return comment


def render_similar(header: str, items) -> str:
    lines = "<br/>".join(f"- #{item.number} - {item.title}" for item in items)
    return f"{header}<br/>{lines}"
