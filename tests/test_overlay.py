from __future__ import annotations

import click

from gent.tui.overlay import (
    CLEAR_SCREEN,
    compose_overlay,
    move_to,
    overlay_origin,
)


def test_move_to():
    assert move_to(3, 7) == "\x1b[3;7H"


def test_overlay_origin_centres():
    assert overlay_origin(10, 40, 80, 24) == (7, 20)


def test_overlay_origin_clamps_to_screen():
    assert overlay_origin(40, 100, 80, 24) == (1, 1)


def test_compose_dims_dashboard_and_places_dialog():
    dashboard = [click.style("branch", fg="magenta"), "commits"]
    out = compose_overlay(dashboard, ["┌──┐", "└──┘"], 4, 20, 10)
    assert out.startswith(CLEAR_SCREEN)
    assert move_to(1, 1) + click.style("branch", dim=True) in out
    assert click.style("branch", fg="magenta") not in out
    assert move_to(4, 8) + "┌──┐" in out
    assert move_to(5, 8) + "└──┘" in out


def test_compose_drops_rows_beyond_screen():
    dashboard = [f"row {i}" for i in range(30)]
    out = compose_overlay(dashboard, ["x"], 1, 20, 10)
    assert "row 9" in out
    assert "row 10" not in out
