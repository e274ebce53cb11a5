"""Tree collection store."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from pydantic import BaseModel, ConfigDict

from pydust._api.trees import fetch_tree_page
from pydust._transport import Transport
from pydust.config import DustConfig
from pydust.exceptions import DustError
from pydust.models.tree import Tree, TreePage
from pydust.state.observable import Observable

_logger = logging.getLogger(__name__)


class TreeCollectionState(BaseModel):
    """Snapshot of the tree store.

    ``loading`` is true strictly while at least one fetch is outstanding.
    ``version`` increases on every committed change.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    trees: tuple[Tree, ...] = ()
    loading: bool = False
    version: int = 0


class TreeStore(Observable[TreeCollectionState]):
    """Holds the fetched trees and the loading flag.

    Fetch failures are absorbed here: they are logged, the loading flag is
    cleared and the previous collection is kept. Nothing is raised to the
    caller.

    Overlapping fetches are not deduplicated. ``loading`` stays true until
    the last outstanding one settles, and the last successful response to
    settle replaces the collection.
    """

    def __init__(self, config: DustConfig, transport: Transport) -> None:
        super().__init__()
        self._config = config
        self._transport = transport
        self._state = TreeCollectionState()
        self._in_flight = 0

    @property
    def state(self) -> TreeCollectionState:
        return self._state

    @property
    def trees(self) -> tuple[Tree, ...]:
        return self._state.trees

    @property
    def loading(self) -> bool:
        return self._state.loading

    def _commit(self, **changes: Any) -> None:
        changes["version"] = self._state.version + 1
        self._state = self._state.model_copy(update=changes)
        self._notify(self._state)

    def start_fetch(self) -> asyncio.Task[None]:
        """Mark the store as loading and start fetching the first page of trees.

        Must be called from a running event loop. ``loading`` is already true
        when this returns; the returned task settles once the store has been
        updated.
        """
        loop = asyncio.get_running_loop()
        self._in_flight += 1
        if not self._state.loading:
            self._commit(loading=True)
        return loop.create_task(self._run_fetch(), name="pydust-fetch-trees")

    async def fetch_trees(self) -> None:
        """Fetch trees and wait until the store has settled."""
        await self.start_fetch()

    async def _run_fetch(self) -> None:
        page: TreePage | None = None
        try:
            page = await fetch_tree_page(self._config, self._transport)
        except DustError as exc:
            _logger.warning("Fetching trees failed, keeping %d known trees: %s", len(self._state.trees), exc)
        finally:
            self._in_flight -= 1
            changes: dict[str, Any] = {}
            if page is not None:
                changes["trees"] = tuple(page.data)
            if self._in_flight == 0:
                changes["loading"] = False
            if changes:
                self._commit(**changes)
