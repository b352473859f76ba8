class LifeManagerError(Exception):
    """Base exception for service-layer failures."""
    pass


class TaskNotFoundError(LifeManagerError):
    """Raised when a task instance id is not in the store."""

    def __init__(self, task_id: str) -> None:
        super().__init__(f"Task not found: {task_id}")
        self.task_id = task_id


class ReminderNotFoundError(LifeManagerError):
    """Raised when a reminder id is not in the store."""

    def __init__(self, reminder_id: str) -> None:
        super().__init__(f"Reminder not found: {reminder_id}")
        self.reminder_id = reminder_id


class InvalidTransitionError(LifeManagerError):
    """Raised when a status change would break the status invariants.

    For example, marking a completed instance as not done without undoing
    the completion first, or skipping without a reason.
    """
    pass
