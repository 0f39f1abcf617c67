"""The dashboard loop: refresh, render, wait for a shortcut, dispatch."""

from __future__ import annotations

import logging
from collections.abc import Callable

import click

from gent.tui.actions import TuiAction, available_actions
from gent.tui.commands import CACHE_INVALIDATING, Screen, execute_action
from gent.tui.display import contextual_hint, render_dashboard
from gent.tui.keys import CTRL_C, CTRL_D, KeyPress, read_key
from gent.tui.overlay import show_cursor
from gent.tui.state import StateAggregator, StateSnapshot

logger = logging.getLogger(__name__)


class DashboardApp:
    def __init__(
        self,
        aggregator: StateAggregator | None = None,
        read: Callable[[], KeyPress] = read_key,
        execute: Callable[[str, StateSnapshot, Screen], bool] = execute_action,
    ) -> None:
        self.aggregator = aggregator or StateAggregator()
        self.read = read
        self.execute = execute
        self.state: StateSnapshot | None = None
        self.rows: list[str] = []

    def _paint(self, rows: list[str]) -> None:
        self.rows = rows
        click.clear()
        click.echo("\n".join(rows))

    def refresh(self) -> list[TuiAction]:
        if self.state is not None:
            # Keep the previous frame up while slow lookups run
            self._paint(render_dashboard(self.state, [], refreshing=True))
        self.state = self.aggregator.aggregate()
        actions = available_actions(self.state)
        self._paint(
            render_dashboard(self.state, actions, hint=contextual_hint(self.state))
        )
        return actions

    def wait_for_action(self, actions: list[TuiAction]) -> TuiAction | None:
        """Read keys until one matches a shortcut. None means quit."""
        by_key = {a.shortcut: a for a in actions}
        while True:
            key = self.read()
            if key.raw in (CTRL_C, CTRL_D):
                return None
            action = by_key.get(key.name.lower())
            if action is not None:
                return action

    def run(self) -> None:
        try:
            while True:
                actions = self.refresh()
                action = self.wait_for_action(actions)
                if action is None or action.id == "quit":
                    break
                logger.info("Running action %s", action.id)
                keep_going = self.execute(action.id, self.state, Screen(self.rows, self.read))
                if not keep_going:
                    break
                if action.id in CACHE_INVALIDATING:
                    self.aggregator.reset_cache()
        finally:
            show_cursor()
            click.clear()


def run_dashboard() -> None:
    DashboardApp().run()
