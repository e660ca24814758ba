import random
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class TopicEntry:
    keys: frozenset[str]
    terms: tuple[str, ...]


def _entry(keys: list[str], terms: list[str]) -> TopicEntry:
    return TopicEntry(frozenset(keys), tuple(terms))


TOPICS: tuple[TopicEntry, ...] = (
    _entry(["merge conflict", "conflict", "cannot merge"], ["frustration", "confusion", "resolution"]),
    _entry(["pull failed", "cannot pull", "fetch error"], ["connection issue", "retry", "frustration"]),
    _entry(["pull request", "new pull request"], ["army incoming", "new call"]),
    _entry(["pull request reopened"], ["old pain", "migraine"]),
    _entry(["issue reopened", "reopened issue"], ["self slap", "bad days"]),
    _entry(["dependency conflict", "cannot install", "package error"], ["puzzled", "not fitting"]),
    _entry(["new discussion", "discussion created"], ["people chatting", "looking for answer"]),
    _entry(["discussion answered", "new discussion comment"], ["got it", "wondering"]),
    _entry(["discussion closed"], ["end of discussion"]),
    _entry(["code style", "lint error", "style guide"], ["cleaning up", "making adjustment", "fixing"]),
    _entry(["branch out of date", "needs rebasing", "update required"], ["rewinding", "updating", "catching up"]),
    _entry(["force push detected", "feature branch updated", "hotfix branch updated"], ["hold on tight", "speed"]),
    _entry(["permission denied", "access error", "cannot push"], ["locked door", "blocked path", "denied access"]),
    _entry(["network error", "connection failed", "timeout", "deployment timed out"], ["signal lost", "buffering", "connectivity issue"]),
    _entry(["env error", "configuration failed", "setup issue", "deployment failed"], ["error in setting", "broken gear"]),
    _entry(["deployment canceled", "deployment cancelled"], ["abort mission", "never mind"]),
    _entry(["deployment unknown status"], ["confusion", "shrug"]),
    _entry(["merged", "merge successful", "successfully merged"], ["celebration", "high fives"]),
    _entry(["approved", "reviewed", "pull request approved"], ["thumbs up", "clapping", "nodding in approval"]),
    _entry(["deployed", "deployment successful", "successfully deployed"], ["fireworks", "launch success", "mission accomplished"]),
    _entry(["fixed", "solved", "issue resolved"], ["peace restored", "problem solved"]),
    _entry(["new problem", "new issue", "issue opened"], ["face palm", "sad life"]),
    _entry(["branch updated", "branch synced", "branch rebased"], ["smooth", "keep up"]),
)


def topic_for(key: str, topics: tuple[TopicEntry, ...] = TOPICS) -> Optional[TopicEntry]:
    for entry in topics:
        if key in entry.keys:
            return entry
    return None


def pick_term(key: str, rng: random.Random, topics: tuple[TopicEntry, ...] = TOPICS) -> Optional[str]:
    entry = topic_for(key, topics)
    if entry is None or not entry.terms:
        return None
    return rng.choice(entry.terms)
