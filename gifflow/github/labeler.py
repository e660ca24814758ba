import re
from dataclasses import dataclass
from typing import Optional, Pattern


@dataclass(frozen=True)
class KeywordRule:
    pattern: Pattern[str]
    label: str


def _rule(keyword: str, label: str) -> KeywordRule:
    return KeywordRule(re.compile(re.escape(keyword), re.IGNORECASE), label)


KEYWORD_RULES: tuple[KeywordRule, ...] = (
    _rule("bug", "bug"),
    _rule("error", "error"),
    _rule("fail", "failure"),
    _rule("crash", "crash"),
    _rule("feature", "enhancement"),
    _rule("improve", "enhancement"),
    _rule("refactor", "enhancement"),
    _rule("first issue", "good first issue"),
    _rule("beginner", "good first issue"),
)


def labels_for(
    title: Optional[str],
    body: Optional[str],
    rules: tuple[KeywordRule, ...] = KEYWORD_RULES,
) -> set[str]:
    """
    Every rule matching the title or body contributes its label.
    """
    title = title or ""
    body = body or ""

    return {
        rule.label
        for rule in rules
        if rule.pattern.search(title) or rule.pattern.search(body)
    }
