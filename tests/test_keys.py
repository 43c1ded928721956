"""Tests for key translation and bindings."""

import dataclasses
from unittest.mock import MagicMock

import pytest

from core.config import DEFAULT_CONFIG
from editor.keys import create_key_bindings, translate_key


@pytest.mark.parametrize("name, expected", [
    ("<M-l>", ("escape", "l")),
    ("<A-j>", ("escape", "j")),
    ("<C-]>", ("c-]",)),
    ("<C-N>", ("c-n",)),
    ("<Tab>", ("tab",)),
    ("<S-Tab>", ("s-tab",)),
    ("<CR>", ("enter",)),
    ("x", ("x",)),
])
def test_translate_key(name, expected):
    assert translate_key(name) == expected


@pytest.mark.parametrize("name", ["<F13>", "<Whatever>", "ab"])
def test_translate_unsupported(name):
    with pytest.raises(ValueError):
        translate_key(name)


def test_create_key_bindings():
    """Test that configured keys drive the manager actions."""
    manager = MagicMock()
    kb = create_key_bindings(manager, lambda: "buf", DEFAULT_CONFIG)

    bindings = {binding.keys: binding for binding in kb.bindings}
    assert len(bindings) == 4

    accept = kb.get_bindings_for_keys(("escape", "l"))
    assert accept
    accept[0].handler(MagicMock())
    manager.accept.assert_called_once_with("buf")

    kb.get_bindings_for_keys(("escape", "j"))[0].handler(MagicMock())
    manager.next.assert_called_once_with("buf")


def test_bad_key_is_skipped():
    config = dataclasses.replace(DEFAULT_CONFIG, keys_dismiss="<Nope>")
    kb = create_key_bindings(MagicMock(), lambda: "buf", config)
    assert len(kb.bindings) == 3
