"""Protocol definitions for the external collaborators.

The controller only talks to a Locator (resolve text to candidates) and a
Launcher (execute a candidate). Both are structural: any object with these
coroutine methods works, no inheritance needed.

This module has no dependencies on other project modules besides the data model.
"""

from collections.abc import Sequence
from typing import Protocol

from runbox.core.candidates import Candidate


class Locator(Protocol):
    """Resolves a text query to a ranked candidate list.

    Contract:
    - search() and list_all() return candidates in ranked order; the caller
      never re-sorts them
    - items may be Candidate instances or payload mappings accepted by
      Candidate.from_payload
    - transport failures raise (ideally LocatorUnavailable); the caller keeps
      the previous results on screen

    Example:
        class Fixed:
            async def search(self, query):
                return [{"name": "Firefox", "path": "/usr/bin/firefox", "kind": "app", "score": 0.9}]

            async def list_all(self):
                return await self.search("")
    """

    async def search(self, query: str) -> Sequence[Candidate]:
        ...

    async def list_all(self) -> Sequence[Candidate]:
        ...


class Launcher(Protocol):
    """Executes or opens a resolved candidate.

    category says how reference is interpreted (executable, file, shell command).
    Failure is signalled by raising, ideally LaunchFailed.
    """

    async def execute(self, category: str, reference: str) -> None:
        ...
