from browser_focus.core.focus_stack import FocusStack


def test_push_moves_existing_entry_to_top() -> None:
    stack = FocusStack("a")
    stack.push("b")
    stack.push("c")
    stack.push("a")
    assert stack.as_list() == ["b", "c", "a"]
    assert stack.top == "a"
    assert len(stack) == 3


def test_remove_and_pop() -> None:
    stack = FocusStack()
    assert stack.top is None
    assert stack.pop() is None
    for h in ("a", "b", "c"):
        stack.push(h)
    assert stack.remove("b") is True
    assert stack.remove("b") is False
    assert stack.pop() == "c"
    assert "a" in stack and "c" not in stack
    assert list(stack) == ["a"]
