import pytest
from pydantic import TypeAdapter, ValidationError

import browser_focus.actions.impl  # noqa: F401  (registers actions)
from browser_focus.core import registry
from browser_focus.core.action import ActionSpec
from browser_focus.core.controller.runner import Runner
from browser_focus.core.errors import ActionExecutionError
from browser_focus.core.result import ActionResult

from conftest import URL1, URL2, FakeFrame


def specs(data: list[dict]) -> list[ActionSpec]:
    return TypeAdapter(list[ActionSpec]).validate_python(data)


def test_all_window_actions_registered() -> None:
    names = set(registry.list_actions())
    assert {
        "open_url", "back", "forward", "refresh", "click", "type", "extract_text",
        "open_window", "focus_window", "close_window", "wait_for_window",
        "focus_frame", "focus_default", "execute_script", "execute_async_script",
        "accept_dialog", "dismiss_dialog", "snapshot", "contains", "pause",
    } <= names
    assert registry.get_meta("focus_window").summary.startswith("Focus a window")


def test_validate_spec_rejects_bad_args() -> None:
    with pytest.raises(KeyError, match="not registered"):
        registry.validate_spec(ActionSpec(name="teleport"))
    with pytest.raises(ValidationError):
        registry.validate_spec(ActionSpec(name="open_url", args={"url": "not a url"}))
    with pytest.raises(ValidationError, match="exactly one"):
        registry.validate_spec(ActionSpec(name="focus_window", args={"index": 0, "query": "x"}))
    with pytest.raises(ValidationError, match="exactly one"):
        registry.validate_spec(ActionSpec(name="focus_frame", args={}))
    with pytest.raises(ValueError, match="takes no arguments"):
        registry.validate_spec(ActionSpec(name="close_window", args={"index": 1}))

    _meta, params = registry.validate_spec(ActionSpec(name="focus_window", args={"index": -1}))
    assert params.index == -1


def test_selectors_are_stripped_and_must_not_be_blank() -> None:
    _meta, params = registry.validate_spec(ActionSpec(name="click", args={"selector": "  #go \n"}))
    assert params.selector == "#go"
    with pytest.raises(ValidationError):
        registry.validate_spec(ActionSpec(name="click", args={"selector": "   "}))


@pytest.mark.asyncio
async def test_runner_executes_window_script(iface, session) -> None:
    session.frames_by_url[URL1] = [FakeFrame(name="imgbox", id="imgbox", url="https://one.example/img")]
    rows = await Runner().run(
        iface,
        specs(
            [
                {"name": "open_url", "args": {"url": URL1}},
                {"name": "open_window", "args": {"url": URL2}},
                {"name": "focus_window", "args": {"index": 0}},
                {"name": "focus_frame", "args": {"selector": "#imgbox"}},
                {"name": "extract_text", "args": {"selector": "img"}},
                {"name": "focus_default"},
                {"name": "focus_window", "args": {"query": "Two"}},
                {"name": "close_window"},
            ]
        ),
    )
    assert [r.ok for r in rows] == [True] * 8
    assert rows[2].meta["url"] == URL1
    assert rows[4].extracted == "img@https://one.example/img"
    assert rows[7].detail == URL1


@pytest.mark.asyncio
async def test_runner_reports_focus_errors(iface, tmp_path) -> None:
    runner = Runner(artifacts_dir=tmp_path)
    rows = await runner.run(
        iface,
        specs(
            [
                {"name": "focus_window", "args": {"index": -1}},
                {"name": "focus_window", "args": {"query": "garbage"}},
                {"name": "close_window"},
                {"name": "open_url", "args": {"url": "nope"}},
            ]
        ),
    )
    assert [r.ok for r in rows] == [False] * 4
    assert "out of bounds: -1 current size: 1" in rows[0].detail
    assert "matched no title or URL: garbage" in rows[1].detail
    assert "last window" in rows[2].detail
    assert rows[3].detail.startswith("invalid spec")
    assert rows[0].artifact_path and (tmp_path / "fail-01-focus_window.png").exists()
    assert rows[3].artifact_path is None


@pytest.mark.asyncio
async def test_runner_retries_then_succeeds(iface) -> None:
    attempts = []

    async def flaky(_iface, _params):
        attempts.append(1)
        if len(attempts) < 2:
            raise ActionExecutionError(action="flaky", message="not yet")
        return ActionResult.success(step="flaky")

    registry.register("test_flaky", flaky)
    rows = await Runner(retries=1).run(iface, specs([{"name": "test_flaky"}]))
    assert rows[0].ok and rows[0].attempts == 2


@pytest.mark.asyncio
async def test_runner_stop_on_failure(iface) -> None:
    rows = await Runner(stop_on_failure=True).run(
        iface,
        specs([{"name": "close_window"}, {"name": "refresh"}]),
    )
    assert len(rows) == 1 and not rows[0].ok


@pytest.mark.asyncio
async def test_script_and_dialog_actions(iface, session) -> None:
    session.script_results["return 12;"] = 12
    rows = await Runner().run(
        iface,
        specs(
            [
                {"name": "execute_script", "args": {"script": "alert(arguments[0])", "args": ["one"]}},
                {"name": "accept_dialog"},
                {"name": "execute_script", "args": {"script": "return 12;"}},
                {"name": "dismiss_dialog"},
                {"name": "contains", "args": {"text": "One", "expect": False}},
            ]
        ),
    )
    assert [r.ok for r in rows] == [True, True, True, False, True]
    assert rows[1].extracted == "one"
    assert rows[2].extracted == 12
    assert session.accepted == [None]
