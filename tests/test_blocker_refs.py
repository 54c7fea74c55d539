"""Blocker reference parsing tests."""

from __future__ import annotations

from pydantic import TypeAdapter

from planner.blocker_refs import (
    BlockerRef,
    SubtaskBlocker,
    TaskBlocker,
    blocker_task_id,
    format_blocker_reference,
    is_subtask_reference,
    parse_blocker_reference,
)


def test_task_and_subtask_references_are_told_apart() -> None:
    assert is_subtask_reference("task_123") is False
    assert is_subtask_reference("task_123:subtask_456") is True
    assert is_subtask_reference(SubtaskBlocker(task_id="a", subtask_id="b")) is True


def test_parse_task_reference() -> None:
    parsed = parse_blocker_reference("task_123")
    assert isinstance(parsed, TaskBlocker)
    assert parsed.task_id == "task_123"
    assert parsed.subtask_id is None


def test_parse_subtask_reference_splits_on_first_separator() -> None:
    parsed = parse_blocker_reference("task_123:subtask_456")
    assert parsed == SubtaskBlocker(task_id="task_123", subtask_id="subtask_456")

    nested = parse_blocker_reference("t1:s1:extra")
    assert nested.task_id == "t1"
    assert nested.subtask_id == "s1:extra"


def test_references_serialize_to_stored_form() -> None:
    assert str(parse_blocker_reference("t1")) == "t1"
    assert str(parse_blocker_reference("t1:s1")) == "t1:s1"
    assert format_blocker_reference("t1") == "t1"
    assert format_blocker_reference("t1", "s1") == "t1:s1"
    assert blocker_task_id("t1:s1") == "t1"


def test_tagged_variant_validates_from_mapping() -> None:
    adapter = TypeAdapter(BlockerRef)
    ref = adapter.validate_python({"kind": "subtask", "task_id": "t1", "subtask_id": "s1"})
    assert isinstance(ref, SubtaskBlocker)
    assert str(ref) == "t1:s1"
