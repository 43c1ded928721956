"""Shared fixtures for suggestion tests."""

import dataclasses

import pytest

from core.config import DEFAULT_CONFIG
from editor.buffers import BufferManager
from fakes import FIB_LINES, FakeClock, FakeScheduler


@pytest.fixture
def clock():
    return FakeClock(1000.0)


@pytest.fixture
def scheduler():
    return FakeScheduler()


@pytest.fixture
def config():
    """Default config with a deterministic setup."""
    return dataclasses.replace(DEFAULT_CONFIG, show_metrics=False)


@pytest.fixture
def buffers():
    """Buffer manager with the fib buffer in insert mode, cursor after 'def fib'."""
    manager = BufferManager()
    manager.create("buf", "\n".join(FIB_LINES), filetype="python")
    manager.set_cursor("buf", (1, 7))
    manager.start_insert("buf")
    return manager
