"""Fire-and-forget side effects: run independent actions, collect per-action results."""

import asyncio
import logging
from typing import Awaitable

from pydantic import BaseModel

logger = logging.getLogger(__name__)


class ActionResult(BaseModel):
    action: str
    ok: bool
    error: str | None = None


async def run_actions(actions: dict[str, Awaitable]) -> list[ActionResult]:
    """Await all actions concurrently; one failure never cancels the others.

    Returns one ActionResult per action, in the order given.
    """
    if not actions:
        return []

    names = list(actions)
    outcomes = await asyncio.gather(*actions.values(), return_exceptions=True)

    results = []
    for name, outcome in zip(names, outcomes):
        if isinstance(outcome, Exception):
            logger.warning("Action %s failed: %s", name, outcome)
            results.append(ActionResult(action=name, ok=False, error=str(outcome)))
        else:
            logger.info("Action %s succeeded", name)
            results.append(ActionResult(action=name, ok=True))
    return results
