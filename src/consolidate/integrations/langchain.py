"""LangChain callback integration for the consolidate library.

Provides :class:`ConsolidatingCallbackHandler`, a LangChain callback handler
that treats every streamed token as an origin event and calls a refresh
function at the consolidated rate. Streaming UIs use it to redraw a few
times per second instead of once per token.

Example::

    from consolidate.integrations.langchain import ConsolidatingCallbackHandler

    handler = ConsolidatingCallbackHandler(panel.redraw, delay=0.05, max_delay=0.25)
    llm.invoke(prompt, config={"callbacks": [handler]})
    handler.close()
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from langchain_core.callbacks import BaseCallbackHandler

from consolidate.config import ConsolidateConfig, TrailingPolicy
from consolidate.decorator import ConsolidatedFunction

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from consolidate.core import Consolidator


class ConsolidatingCallbackHandler(BaseCallbackHandler):
    """LangChain callback handler that consolidates token-stream refreshes.

    Args:
        refresh: Zero-argument callable (sync or async) run once per
            consolidated event.
        delay: Quiet period in seconds. A refresh follows the last token of
            a stream after this long.
        max_delay: Ceiling in seconds. While tokens keep streaming, a
            refresh happens at least this often.
        trailing: Trailing-timer policy when the ceiling fires.
        refresh_on_error: Whether a failed run also reports an event, so the
            UI can redraw its error state.
    """

    def __init__(
        self,
        refresh: Callable[[], Any | Awaitable[Any]],
        delay: float = 0.1,
        max_delay: float = 0.5,
        trailing: TrailingPolicy = TrailingPolicy.DISARM,
        *,
        refresh_on_error: bool = True,
    ) -> None:
        super().__init__()
        self._config = ConsolidateConfig(delay=delay, max_delay=max_delay, trailing=trailing)
        self._refresh = ConsolidatedFunction(refresh, self._config)
        self._refresh_on_error = refresh_on_error
        self.tokens = 0

    @property
    def config(self) -> ConsolidateConfig:
        return self._config

    @property
    def consolidator(self) -> Consolidator | None:
        """The underlying :class:`Consolidator`, created on the first token."""
        return self._refresh.consolidator

    def on_llm_new_token(self, token: str, **kwargs: Any) -> None:
        """Report one origin event per streamed token."""
        self.tokens += 1
        self._refresh()

    def on_llm_error(self, error: BaseException, **kwargs: Any) -> None:
        if self._refresh_on_error:
            self._refresh()

    def close(self) -> None:
        """Stop the underlying consolidator."""
        self._refresh.stop()

    async def aclose(self) -> None:
        """Stop the underlying consolidator and wait for its loop to exit."""
        await self._refresh.aclose()
