"""Full-screen review of suggestions for one buffer."""

from prompt_toolkit import Application
from prompt_toolkit.formatted_text import FormattedText
from prompt_toolkit.layout import HSplit, Window
from prompt_toolkit.layout.controls import FormattedTextControl
from prompt_toolkit.layout.layout import Layout

from core.config import Config
from editor.buffers import BufferManager
from editor.ghost_text import GhostTextRenderer
from editor.keys import create_key_bindings


class ReviewView:
    """Buffer text with ghost text plus a status line."""

    def __init__(self, manager, buffers: BufferManager, buffer_id: str, config: Config):
        self.manager = manager
        self.buffers = buffers
        self.buffer_id = buffer_id
        self.config = config
        self.renderer = GhostTextRenderer()

    def body(self) -> FormattedText:
        state = self.buffers.get(self.buffer_id)
        return self.renderer.render(state.lines, state.overlay)

    def status(self) -> FormattedText:
        ctx = self.manager.ctx(self.buffer_id)
        if ctx.current_set:
            info = f" Set {ctx.current_index + 1}/{len(ctx.sets)}, {len(ctx.current_set)} item(s)"
        else:
            info = " No suggestions"
        keys = (
            f"{self.config.keys_accept} accept  {self.config.keys_next}/{self.config.keys_prev} cycle  "
            f"{self.config.keys_dismiss} dismiss  q quit"
        )
        return FormattedText([("reverse", f"{info}  |  {keys} ")])


def build_review_application(manager, buffers: BufferManager, buffer_id: str, config: Config,
                             **kwargs) -> Application:
    """
    Build an application whose configured keys drive the suggestion manager.

    Args:
        manager: SuggestionManager holding suggestions for the buffer.
        buffers: Buffer store the manager edits.
        buffer_id: Buffer under review.
        config: Key configuration.
        **kwargs: Passed through to Application (input, output).

    Returns:
        The application, not yet running.
    """
    view = ReviewView(manager, buffers, buffer_id, config)
    kb = create_key_bindings(manager, lambda: buffer_id, config)

    @kb.add("q")
    @kb.add("c-c")
    def _(event):
        event.app.exit()

    layout = Layout(HSplit([
        Window(content=FormattedTextControl(view.body), wrap_lines=False),
        Window(content=FormattedTextControl(view.status), height=1),
    ]))

    return Application(layout=layout, key_bindings=kb, full_screen=True, **kwargs)
