"""State Manager — cookie transport for the bounded state store.

Invariants:
    - Reads never fail: a corrupt/expired cookie yields no state plus a clear directive
    - Writes go through write_state (sanitize, size bound); on too_large nothing
      is emitted and the client keeps its previous cookie
    - Every successful mutation returns exactly one Set-Cookie directive
    - A mutation that fails after a reset read carries the clear directive
      on its error, so the corrupt cookie never outlives the request
    - Identifiers are normalized before they reach the store

Design Decisions:
    - Works on raw header strings in and directive strings out, so routes stay thin
      and the manager is testable without a request object
    - Clock injected for staleness tests
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone

from linkcard.core.cookie_header import (
    DEFAULT_COOKIE_OPTIONS, STATE_COOKIE_NAME, CookieOptions,
    build_clear_cookie, build_set_cookie, parse_cookie_header,
)
from linkcard.core.domain_types import Err, Ok, Result
from linkcard.core.errors import ErrorDetail, NO_IDENTIFIER
from linkcard.core.normalize_input import normalize
from linkcard.core.state_store import (
    StateUpdate, create_state, merge_state, read_state, record_usage, write_state,
)
from linkcard.schemas.renderer import RendererConfigUpdate
from linkcard.schemas.state import PersistedState, PreferencesUpdate

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StateResponse:
    state: PersistedState | None
    set_cookie: str | None = None
    warnings: list[str] = field(default_factory=list)
    was_reset: bool = False
    was_sanitized: bool = False


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _with_clear_directive(
    written: Result[StateResponse, ErrorDetail], read: StateResponse,
) -> Result[StateResponse, ErrorDetail]:
    """A refused write after a reset read still clears the corrupt cookie."""
    if isinstance(written, Err) and read.was_reset:
        return Err(replace(written.error, set_cookie=read.set_cookie))
    return written


class StateManager:
    """Reads the state cookie and produces Set-Cookie directives for updates."""

    def __init__(
        self,
        cookie_name: str = STATE_COOKIE_NAME,
        options: CookieOptions = DEFAULT_COOKIE_OPTIONS,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.cookie_name = cookie_name
        self.options = options
        self._clock = clock

    def get_state(self, cookie_header: str | None) -> StateResponse:
        blob = parse_cookie_header(cookie_header).get(self.cookie_name)
        result = read_state(blob, self._clock())
        if result.should_reset:
            logger.warning(f"State reset: {'; '.join(result.errors)}")
            return StateResponse(
                state=None,
                set_cookie=self.clear_state(),
                warnings=result.warnings,
                was_reset=True,
            )
        return StateResponse(state=result.state, warnings=result.warnings)

    def set_state(self, state: PersistedState) -> Result[StateResponse, ErrorDetail]:
        written = write_state(state)
        if isinstance(written, Err):
            logger.warning(
                written.error.message, extra={"error_code": written.error.code},
            )
            return written
        if written.value.was_sanitized:
            logger.info("State sanitized to fit the cookie size limit")
        return Ok(StateResponse(
            state=written.value.state,
            set_cookie=build_set_cookie(
                self.cookie_name, written.value.serialized, self.options,
            ),
            was_sanitized=written.value.was_sanitized,
        ))

    def _apply(
        self, cookie_header: str | None, update: StateUpdate,
    ) -> Result[StateResponse, ErrorDetail]:
        now = self._clock()
        read = self.get_state(cookie_header)
        if read.state is None:
            written = self.set_state(create_state(update, now))
        else:
            written = self.set_state(merge_state(read.state, update, now))
        return _with_clear_directive(written, read)

    # ─── Mutations ───────────────────────────────────────────────

    def store_identifier(
        self, cookie_header: str | None, raw: str,
    ) -> Result[StateResponse, ErrorDetail]:
        """Normalize raw input and store it as the current identifier."""
        normalized = normalize(raw)
        if isinstance(normalized, Err):
            return normalized
        return self._apply(cookie_header, StateUpdate(identifier_url=normalized.value))

    def update_renderer_config(
        self, cookie_header: str | None, update: RendererConfigUpdate,
    ) -> Result[StateResponse, ErrorDetail]:
        return self._apply(cookie_header, StateUpdate(renderer_config=update))

    def update_preferences(
        self, cookie_header: str | None, update: PreferencesUpdate,
    ) -> Result[StateResponse, ErrorDetail]:
        return self._apply(cookie_header, StateUpdate(preferences=update))

    def increment_usage(self, cookie_header: str | None) -> Result[StateResponse, ErrorDetail]:
        read = self.get_state(cookie_header)
        if read.state is None or read.state.identifier_record is None:
            return Err(ErrorDetail(
                "No LinkedIn profile stored", NO_IDENTIFIER,
                set_cookie=read.set_cookie,
            ))
        return self.set_state(record_usage(read.state, self._clock()))

    def clear_state(self) -> str:
        return build_clear_cookie(self.cookie_name, self.options)
