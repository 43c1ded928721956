"""Per-buffer suggestion lifecycle: trigger, fetch, select, accept and dismiss."""

import asyncio
import itertools
import logging
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Callable, Dict, List, Optional, Set

from ai.prompts import build_suggestion_prompt
from core.config import Config, get_config
from core.errors import (
    CacheFailure,
    ErrorReporter,
    InvalidInput,
    ProcessingError,
    ProviderConnectionError,
    ResponseDecodeError,
    SuggestionError,
)
from core.metrics import MetricsStore, SuggestionMetrics
from suggest.applier import Applier
from suggest.cache import SuggestionCache
from suggest.chunker import build_context, join_chunks
from suggest.debounce import DebounceController
from suggest.interfaces import Editor, Scheduler
from suggest.models import (
    AcceptOutcome,
    EditContext,
    SuggestionContext,
    SuggestionItem,
    SuggestionSet,
    SuggestionState,
)
from suggest.parser import parse
from suggest.renderer import Renderer

logger = logging.getLogger(__name__)


class SuggestionManager:
    """
    Owns suggestion state for every open buffer.

    Contexts and debounce timers are kept per buffer in explicit registries on
    the instance; only the cache is shared between buffers.
    """

    def __init__(
        self,
        editor: Editor,
        provider,
        config: Optional[Config] = None,
        cache: Optional[SuggestionCache] = None,
        reporter: Optional[ErrorReporter] = None,
        renderer: Optional[Renderer] = None,
        applier: Optional[Applier] = None,
        ignore_rules=None,
        scheduler: Optional[Scheduler] = None,
        clock: Callable[[], float] = time.monotonic,
        metrics: Optional[MetricsStore] = None
    ):
        self.editor = editor
        self.provider = provider
        self.config = config or get_config()
        self.clock = clock
        self.cache = cache or SuggestionCache(
            capacity_bytes=self.config.suggestion_cache_capacity_bytes,
            ttl_sec=self.config.suggestion_cache_ttl_sec,
            clock=clock
        )
        self.reporter = reporter or ErrorReporter()
        self.renderer = renderer or Renderer(editor)
        self.applier = applier or Applier()
        self.ignore_rules = ignore_rules
        self.scheduler = scheduler
        self.metrics = metrics or MetricsStore(max_entries=self.config.metrics_window)

        self._contexts: Dict[str, SuggestionContext] = {}
        self._controllers: Dict[str, DebounceController] = {}
        self._tasks: Set[asyncio.Task] = set()
        self._request_ids = itertools.count(1)

    # Registry

    def ctx(self, buffer_id: str) -> SuggestionContext:
        """Get or create the suggestion context of a buffer."""
        ctx = self._contexts.get(buffer_id)
        if ctx is None:
            ctx = SuggestionContext()
            self._contexts[buffer_id] = ctx
        return ctx

    def controller(self, buffer_id: str) -> DebounceController:
        """Get or create the debounce controller of a buffer."""
        controller = self._controllers.get(buffer_id)
        if controller is None:
            controller = DebounceController(
                callback=lambda cursor: self._on_debounced(buffer_id),
                interval_ms=self.config.suggestion_debounce_ms,
                throttle_ms=self.config.suggestion_throttle_ms,
                scheduler=self.scheduler,
                clock=self.clock,
                cursor_getter=lambda: self.editor.get_cursor(buffer_id)
            )
            self._controllers[buffer_id] = controller
        return controller

    def state(self, buffer_id: str) -> SuggestionState:
        ctx = self._contexts.get(buffer_id)
        return ctx.state if ctx else SuggestionState.IDLE

    def current_set(self, buffer_id: str) -> Optional[SuggestionSet]:
        ctx = self._contexts.get(buffer_id)
        return ctx.current_set if ctx else None

    def is_visible(self, buffer_id: str) -> bool:
        return self.renderer.is_visible(buffer_id)

    # Editor events

    def on_text_changed(self, buffer_id: str) -> None:
        """Editor reported a text change in insert mode."""
        self._on_edit_signal(buffer_id)

    def on_cursor_moved(self, buffer_id: str) -> None:
        """Editor reported a cursor move in insert mode."""
        self._on_edit_signal(buffer_id)

    def on_insert_enter(self, buffer_id: str) -> None:
        if not self.is_visible(buffer_id):
            self._on_edit_signal(buffer_id)

    def on_insert_leave(self, buffer_id: str) -> None:
        self.dismiss(buffer_id)

    def on_buffer_closed(self, buffer_id: str) -> None:
        self.dismiss(buffer_id)
        self._controllers.pop(buffer_id, None)

    def should_trigger(self, buffer_id: str) -> bool:
        """Check whether an edit in this buffer may lead to a suggestion."""
        if not self.config.suggestion_enabled:
            return False
        try:
            if not self.editor.is_insert_mode(buffer_id) or not self.editor.is_modifiable(buffer_id):
                return False
            path = self.editor.get_path(buffer_id)
            row, col = self.editor.get_cursor(buffer_id)
            line = self.editor.get_lines(buffer_id, row - 1, row)
        except (KeyError, IndexError, ValueError) as e:
            logger.debug(f"Cannot inspect buffer {buffer_id}: {e}")
            return False

        if (path and self.ignore_rules is not None and self.config.suggestion_respect_ignore
                and self.ignore_rules.is_ignored(path)):
            logger.debug(f"Ignored path, not suggesting: {path}")
            return False

        prefix = line[0][:col].strip() if line else ""
        return len(prefix) >= self.config.suggestion_min_chars

    def _on_edit_signal(self, buffer_id: str) -> None:
        if not self.should_trigger(buffer_id):
            return
        ctx = self.ctx(buffer_id)
        if ctx.internal_move:
            return

        document = tuple(self.editor.get_lines(buffer_id))
        if ctx.previous_document == document:
            return
        ctx.previous_document = document

        self.controller(buffer_id).on_edit_signal(self.editor.get_cursor(buffer_id))

    def _on_debounced(self, buffer_id: str) -> None:
        if not self.should_trigger(buffer_id):
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("No running event loop, cannot fetch suggestions")
            return
        task = loop.create_task(self.suggest(buffer_id))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    # Fetching

    def _edit_context(self, buffer_id: str) -> EditContext:
        try:
            lines = self.editor.get_lines(buffer_id)
            cursor = self.editor.get_cursor(buffer_id)
        except (KeyError, IndexError, ValueError) as e:
            raise InvalidInput(f"Invalid buffer: {e}") from e

        if not lines:
            raise InvalidInput("Buffer is empty")
        if not isinstance(cursor, tuple) or len(cursor) < 2:
            raise InvalidInput("Invalid cursor position")
        row, col = cursor[0], cursor[1]
        if not 1 <= row <= len(lines) or col < 0:
            raise InvalidInput(f"Cursor {cursor} outside buffer of {len(lines)} lines")

        return EditContext.build(
            buffer_id,
            (row, col),
            lines,
            filetype=self.editor.get_filetype(buffer_id),
            path=self.editor.get_path(buffer_id)
        )

    def _cache_get(self, key: str) -> Optional[str]:
        try:
            return self.cache.get(key)
        except Exception as e:
            self.reporter.report(CacheFailure(f"Cache read failed: {e}"), "SuggestionManager.suggest")
            return None

    def _cache_set(self, key: str, payload: str) -> None:
        try:
            self.cache.set(key, payload)
        except Exception as e:
            error = e if isinstance(e, CacheFailure) else CacheFailure(f"Cache write failed: {e}")
            self.reporter.report(error, "SuggestionManager.suggest")

    def _is_current(self, buffer_id: str, request_id: int) -> bool:
        ctx = self._contexts.get(buffer_id)
        return ctx is not None and ctx.request_id == request_id

    def _record(self, buffer_id: str, started: float, cache_hit: bool, sets: int,
                response_chars: int, success: bool) -> None:
        metric = SuggestionMetrics(
            buffer_id=buffer_id,
            cache_hit=cache_hit,
            sets=sets,
            elapsed_ms=int((self.clock() - started) * 1000),
            response_chars=response_chars,
            success=success
        )
        self.metrics.add(metric)
        if metric.slow:
            logger.warning(f"Slow suggestion request for {buffer_id}: {metric.elapsed_ms}ms")

    def _fail(self, buffer_id: str, request_id: int, error: BaseException, source: str) -> None:
        self.reporter.report(error, source)
        if self._is_current(buffer_id, request_id):
            ctx = self._contexts[buffer_id]
            ctx.state = SuggestionState.IDLE
            ctx.sets = []
            self.renderer.clear(buffer_id)

    def _commit(self, buffer_id: str, request_id: int, text: str, key: Optional[str]) -> bool:
        """Parse a response and make it the buffer's active suggestions."""
        if not self._is_current(buffer_id, request_id):
            logger.debug(f"Discarding stale suggestion response for {buffer_id}")
            return False

        sets = parse(text, self.editor.get_lines(buffer_id))
        if key is not None:
            self._cache_set(key, text)

        ctx = self._contexts[buffer_id]
        if not sets:
            ctx.state = SuggestionState.IDLE
            ctx.sets = []
            self.renderer.clear(buffer_id)
            self.reporter.notify_once("No suggestions found", logging.INFO)
            return False

        ctx.sets = sets
        ctx.current_index = 0
        ctx.state = SuggestionState.READY
        logger.info(f"{len(sets)} suggestion set(s) ready for {buffer_id}")
        self.show(buffer_id)
        return True

    async def suggest(self, buffer_id: str) -> bool:
        """
        Fetch suggestions for the buffer's current cursor context.

        A cache hit skips the provider. Responses that arrive after the buffer
        was dismissed or a newer request started are discarded.

        Args:
            buffer_id: Target buffer.

        Returns:
            True if suggestions were committed and rendered.
        """
        ctx = self.ctx(buffer_id)
        request_id = next(self._request_ids)
        ctx.request_id = request_id
        ctx.state = SuggestionState.FETCHING
        started = self.clock()
        source = "SuggestionManager.suggest"
        provider_name = getattr(self.provider, "name", None)
        logger.debug(f"Generating suggestions for {buffer_id}")

        try:
            edit_context = self._edit_context(buffer_id)
        except InvalidInput as e:
            self._fail(buffer_id, request_id, e, source)
            return False

        key = self.cache.generate_key(edit_context)
        cached = self._cache_get(key)
        if cached is not None:
            logger.debug("Using cached suggestions")
            try:
                committed = self._commit(buffer_id, request_id, cached, None)
                self._record(buffer_id, started, True, len(ctx.sets), len(cached), True)
                return committed
            except ResponseDecodeError as e:
                self.reporter.report(CacheFailure(f"Cached suggestions unusable: {e}"), source)

        cfg = self.config
        try:
            chunks = build_context(
                edit_context.lines,
                edit_context.cursor_line,
                cfg.suggestion_max_context_lines,
                cfg.suggestion_chunk_size,
                line_numbers=True
            )
            code = join_chunks(chunks) + "\n\n"
        except (InvalidInput, ProcessingError) as e:
            self._fail(buffer_id, request_id, e, source)
            return False

        filename = Path(edit_context.path).name if edit_context.path else "untitled"
        messages = build_suggestion_prompt(
            filename,
            code,
            edit_context.cursor_line,
            edit_context.cursor_col,
            filetype=edit_context.filetype or None
        )

        parts: List[str] = []
        result = {"committed": False}

        def on_chunk(content: str) -> None:
            parts.append(content)

        def on_finish() -> None:
            text = "".join(parts)
            try:
                result["committed"] = self._commit(buffer_id, request_id, text, key)
            except ResponseDecodeError as e:
                self._fail(buffer_id, request_id, e, f"{source}:on_finish")
                self._record(buffer_id, started, False, 0, len(text), False)
                return
            self._record(buffer_id, started, False, len(ctx.sets), len(text), True)

        def on_error(error: BaseException) -> None:
            if not self._is_current(buffer_id, request_id):
                logger.debug(f"Ignoring error from stale request: {error}")
                return
            if not isinstance(error, SuggestionError):
                error = ProviderConnectionError(str(error) or "unknown error", provider=provider_name)
            self._fail(buffer_id, request_id, error, f"{source}:on_error")
            self._record(buffer_id, started, False, 0, len("".join(parts)), False)

        try:
            await self.provider.stream_completion(messages, on_chunk, on_finish, on_error)
        except Exception as e:
            on_error(ProviderConnectionError(f"Provider call failed: {e}", provider=provider_name))
        return result["committed"]

    # Display and navigation

    def show(self, buffer_id: str) -> None:
        """Render the selected suggestion set, if in insert mode."""
        self.renderer.clear(buffer_id)
        if not self.editor.is_insert_mode(buffer_id):
            return
        active = self.current_set(buffer_id)
        if not active:
            return
        self.renderer.render(
            buffer_id,
            active,
            self.editor.get_lines(buffer_id),
            self.editor.get_cursor(buffer_id)
        )

    def hide(self, buffer_id: str) -> None:
        self.renderer.clear(buffer_id)

    def next(self, buffer_id: str) -> None:
        """Select the next suggestion set, wrapping around."""
        ctx = self._contexts.get(buffer_id)
        if ctx is None or ctx.state is not SuggestionState.READY or not ctx.sets:
            return
        ctx.current_index = (ctx.current_index + 1) % len(ctx.sets)
        self.show(buffer_id)

    def prev(self, buffer_id: str) -> None:
        """Select the previous suggestion set, wrapping around."""
        ctx = self._contexts.get(buffer_id)
        if ctx is None or ctx.state is not SuggestionState.READY or not ctx.sets:
            return
        ctx.current_index = (ctx.current_index - 1) % len(ctx.sets)
        self.show(buffer_id)

    def dismiss(self, buffer_id: str) -> None:
        """Drop every suggestion for the buffer and invalidate in-flight requests."""
        controller = self._controllers.get(buffer_id)
        if controller is not None:
            controller.reset()
        self.renderer.clear(buffer_id)
        self._contexts.pop(buffer_id, None)

    # Accepting

    @staticmethod
    def current_item(active: SuggestionSet, cursor_row: int) -> Optional[SuggestionItem]:
        """First item whose rows contain the cursor."""
        for item in active:
            if item.contains_row(cursor_row):
                return item
        return None

    @staticmethod
    def nearest_item(active: SuggestionSet, cursor_row: int) -> Optional[SuggestionItem]:
        """Item whose start row is closest to the cursor."""
        if not active:
            return None
        return min(active, key=lambda item: abs(item.start_row - cursor_row))

    @contextmanager
    def _internal_move(self, ctx: SuggestionContext):
        ctx.internal_move = True
        try:
            yield
        finally:
            ctx.internal_move = False

    def _native_fallback(self, buffer_id: str) -> AcceptOutcome:
        accept_key = self.config.keys_accept
        if accept_key and accept_key == self.config.keys_native_completion:
            self.editor.feedkeys(buffer_id, accept_key)
            return AcceptOutcome.FALLBACK
        return AcceptOutcome.NOOP

    def _jump_to(self, buffer_id: str, ctx: SuggestionContext, item: SuggestionItem) -> None:
        row = item.start_row - 1 if item.start_row > 1 else 1
        lines = self.editor.get_lines(buffer_id)
        row = min(row, len(lines)) if lines else 1
        col = len(lines[row - 1]) if lines else 0
        with self._internal_move(ctx):
            self.editor.set_cursor(buffer_id, (row, col))
            self.editor.start_insert(buffer_id)
        self.show(buffer_id)

    def accept(self, buffer_id: str) -> AcceptOutcome:
        """
        Accept the suggestion under the cursor.

        If no item contains the cursor, the cursor jumps to the nearest item
        instead. Without any suggestion the native completion key is replayed
        when it is also the accept key.

        Args:
            buffer_id: Target buffer.

        Returns:
            What the accept did.
        """
        ctx = self._contexts.get(buffer_id)
        active = ctx.current_set if ctx is not None and ctx.state is SuggestionState.READY else None
        if not active:
            return self._native_fallback(buffer_id)

        cursor_row = self.editor.get_cursor(buffer_id)[0]
        item = self.current_item(active, cursor_row)
        if item is None:
            target = self.nearest_item(active, cursor_row)
            logger.debug(f"Jumping to suggestion {target.id} at row {target.start_row}")
            self._jump_to(buffer_id, ctx, target)
            return AcceptOutcome.JUMPED

        self.renderer.clear(buffer_id)
        with self._internal_move(ctx):
            edit = self.applier.apply(item, self.editor, buffer_id)

        remaining: SuggestionSet = []
        for other in active:
            if other is item:
                continue
            if other.start_row > item.start_row:
                other.shift(edit.delta)
            remaining.append(other)
        ctx.sets[ctx.current_index] = remaining
        ctx.previous_document = tuple(self.editor.get_lines(buffer_id))
        logger.debug(f"Applied suggestion {item.id}, {len(remaining)} left, delta {edit.delta}")

        if not remaining:
            self.dismiss(buffer_id)
        else:
            self.show(buffer_id)
        return AcceptOutcome.APPLIED
