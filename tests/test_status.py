"""Tests for the task status transition table."""
import pytest

from jobdesk.workflow.status import (
    TaskStatus,
    can_request_transition,
    can_transition,
    is_task_terminal,
)


class TestCanTransition:

    @pytest.mark.parametrize("to_status", ["in-progress", "completed", "delayed"])
    def test_pending_moves_forward(self, to_status):
        assert can_transition(TaskStatus.PENDING, to_status)

    @pytest.mark.parametrize("to_status", ["pending", "completed", "delayed"])
    def test_in_progress_moves(self, to_status):
        assert can_transition("in-progress", to_status)

    @pytest.mark.parametrize("terminal", [TaskStatus.COMPLETED, TaskStatus.DELAYED])
    def test_terminal_states_are_stuck(self, terminal):
        assert is_task_terminal(terminal)
        for target in TaskStatus:
            if target is terminal:
                assert can_transition(terminal, target)
            else:
                assert not can_transition(terminal, target)

    def test_same_status_is_allowed(self):
        for status in TaskStatus:
            assert can_transition(status, status)

    def test_queue_only_opens_to_pending(self):
        assert can_transition(TaskStatus.IN_QUEUE, TaskStatus.PENDING)
        assert not can_transition(TaskStatus.IN_QUEUE, TaskStatus.IN_PROGRESS)
        assert not can_transition(TaskStatus.IN_QUEUE, TaskStatus.COMPLETED)

    def test_nothing_goes_back_into_the_queue(self):
        for status in (TaskStatus.PENDING, TaskStatus.IN_PROGRESS):
            assert not can_transition(status, TaskStatus.IN_QUEUE)

    def test_unblock_is_not_requestable(self):
        assert not can_request_transition(TaskStatus.IN_QUEUE, TaskStatus.PENDING)
        assert can_request_transition(TaskStatus.PENDING, TaskStatus.IN_PROGRESS)

    def test_parse_rejects_unknown_values(self):
        assert TaskStatus.parse(" Completed ") is TaskStatus.COMPLETED
        with pytest.raises(ValueError):
            TaskStatus.parse("archived")
