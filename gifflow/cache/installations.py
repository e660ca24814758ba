import threading
from dataclasses import dataclass, replace
from typing import Iterable, Optional

from gifflow.logger import get_logger


logger = get_logger("gifflow.cache.installations")


@dataclass(frozen=True)
class Installation:
    id: int
    repositories: frozenset[str]
    suspended: bool = False


def repo_names(repos: Optional[Iterable]) -> frozenset[str]:
    """
    Normalize repository descriptors (payload dicts or names) to full names.
    """
    names = set()
    for repo in repos or ():
        if isinstance(repo, dict):
            name = repo.get("full_name") or repo.get("name")
        else:
            name = repo
        if name:
            names.add(str(name))
    return frozenset(names)


class InstallationRegistry:
    """
    In-memory cache of installations and their repositories.

    Not a system of record: the forge stays authoritative and the contents
    are rebuilt after a restart by re-listing installations. Entries are
    immutable and swapped whole under the lock, so readers see either the
    old or the new Installation, never a mix.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._installations: dict[int, Installation] = {}

    def upsert(self, installation_id: int, repos: Optional[Iterable]) -> Installation:
        repositories = repo_names(repos)

        with self._lock:
            current = self._installations.get(installation_id)
            if current is None:
                installation = Installation(installation_id, repositories)
            else:
                installation = replace(current, repositories=repositories)
            self._installations[installation_id] = installation

        logger.info(
            "Stored installation %s with %d repositories",
            installation_id,
            len(repositories),
        )
        return installation

    def add_repos(self, installation_id: int, repos: Optional[Iterable]):
        added = repo_names(repos)
        with self._lock:
            current = self._installations.get(installation_id)
            if current is None:
                self._installations[installation_id] = Installation(installation_id, added)
            else:
                self._installations[installation_id] = replace(
                    current, repositories=current.repositories | added
                )

    def remove_repos(self, installation_id: int, repos: Optional[Iterable]):
        removed = repo_names(repos)
        with self._lock:
            current = self._installations.get(installation_id)
            if current is not None:
                self._installations[installation_id] = replace(
                    current, repositories=current.repositories - removed
                )

    def remove(self, installation_id: int):
        with self._lock:
            removed = self._installations.pop(installation_id, None)

        if removed is not None:
            logger.info("Removed installation %s", installation_id)

    def set_suspended(self, installation_id: int, suspended: bool):
        with self._lock:
            current = self._installations.get(installation_id)
            if current is None:
                return
            self._installations[installation_id] = replace(current, suspended=suspended)

        logger.info("Installation %s suspended=%s", installation_id, suspended)

    def get(self, installation_id: int) -> Optional[Installation]:
        return self._installations.get(installation_id)

    def is_suspended(self, installation_id: int) -> bool:
        installation = self.get(installation_id)
        return bool(installation and installation.suspended)

    def __len__(self) -> int:
        return len(self._installations)


_registry: Optional[InstallationRegistry] = None


def get_registry() -> InstallationRegistry:
    """
    Return the process-wide installation registry.
    """
    global _registry

    if _registry is None:
        _registry = InstallationRegistry()

    return _registry
