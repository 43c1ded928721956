"""Key bindings for suggestion actions."""

import logging
import re
from typing import Callable, Tuple

from prompt_toolkit.key_binding import KeyBindings

from core.config import Config

logger = logging.getLogger(__name__)

KEY_RE = re.compile(r"^<(?P<mods>(?:[A-Za-z]-)*)(?P<key>[^>]+)>$")

NAMED_KEYS = {
    "tab": "tab",
    "s-tab": "s-tab",
    "cr": "enter",
    "enter": "enter",
    "esc": "escape",
    "space": "space",
    "bs": "backspace",
    "up": "up",
    "down": "down",
    "left": "left",
    "right": "right",
}


def translate_key(name: str) -> Tuple[str, ...]:
    """
    Translate a configured key name to a prompt_toolkit key sequence.

    Meta/Alt chords become an escape prefix, as terminals send them.

    Args:
        name: Key name such as "<M-l>", "<C-]>", "<Tab>" or a single character.

    Returns:
        Tuple of prompt_toolkit key names.

    Raises:
        ValueError: If the name cannot be translated.
    """
    match = KEY_RE.match(name)
    if not match:
        if len(name) == 1:
            return (name,)
        raise ValueError(f"Unsupported key: {name}")

    mods = [m.lower() for m in match.group("mods").split("-") if m]
    key = match.group("key")
    lowered = key.lower()

    if not mods:
        if lowered in NAMED_KEYS:
            return (NAMED_KEYS[lowered],)
        raise ValueError(f"Unsupported key: {name}")

    meta = any(m in ("m", "a") for m in mods)
    ctrl = "c" in mods
    shift = "s" in mods

    base = NAMED_KEYS.get(lowered, key if len(key) == 1 else None)
    if base is None:
        raise ValueError(f"Unsupported key: {name}")
    if ctrl:
        base = f"c-{base.lower()}"
    elif shift and base == "tab":
        base = "s-tab"
    elif shift and len(base) == 1:
        base = base.upper()

    return ("escape", base) if meta else (base,)


def create_key_bindings(manager, buffer_id_getter: Callable[[], str], config: Config) -> KeyBindings:
    """
    Build key bindings that drive a suggestion manager.

    Args:
        manager: SuggestionManager to drive.
        buffer_id_getter: Returns the buffer the keys act on.
        config: Key configuration.

    Returns:
        KeyBindings for the application.
    """
    kb = KeyBindings()

    def bind(key_name: str, action: Callable[[str], object]) -> None:
        try:
            keys = translate_key(key_name)
        except ValueError as e:
            logger.warning(f"Skipping key binding: {e}")
            return

        @kb.add(*keys)
        def _(event):
            action(buffer_id_getter())

    bind(config.keys_accept, manager.accept)
    bind(config.keys_next, manager.next)
    bind(config.keys_prev, manager.prev)
    bind(config.keys_dismiss, manager.dismiss)
    return kb
