"""Timer session — work time accounting for the active production step.

    elapsed = accumulated + (now - session_started_at)   while active
    elapsed = accumulated                                 while paused

Pausing folds the running interval into the accumulator; resuming starts a
fresh interval. Elapsed time is the sum of all active intervals.
"""

from datetime import datetime

from protean.fields import Boolean, DateTime, Float, Integer

from production.domain import production


@production.value_object(part_of="Workflow")
class TimerSession:
    """Work time of the step that currently owns the timer."""

    step_index = Integer(required=True, min_value=0)
    session_started_at = DateTime()
    accumulated_seconds = Float(default=0.0)
    active = Boolean(default=True)

    @classmethod
    def begin(cls, step_index: int, now: datetime, carried_seconds: float = 0.0) -> "TimerSession":
        return cls(
            step_index=step_index,
            session_started_at=now,
            accumulated_seconds=carried_seconds,
            active=True,
        )

    def elapsed_seconds(self, now: datetime) -> float:
        accumulated = self.accumulated_seconds or 0.0
        if not self.active or self.session_started_at is None:
            return accumulated
        return accumulated + max((now - self.session_started_at).total_seconds(), 0.0)

    def freeze(self, now: datetime) -> "TimerSession":
        """A paused copy with the running interval folded in."""
        return TimerSession(
            step_index=self.step_index,
            session_started_at=None,
            accumulated_seconds=self.elapsed_seconds(now),
            active=False,
        )

    def resume(self, now: datetime) -> "TimerSession":
        return TimerSession(
            step_index=self.step_index,
            session_started_at=now,
            accumulated_seconds=self.accumulated_seconds or 0.0,
            active=True,
        )
