"""Starting, pausing and resuming steps — commands and handler.

The first StartStep for an order instantiates its workflow.
"""

from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Boolean, DateTime, Identifier, Integer, String
from protean.utils.globals import current_domain

from production.domain import production
from production.workflow.workflow import Workflow


@production.command(part_of="Workflow")
class StartStep:
    """Begin work on a pending step."""

    order_id = Identifier(required=True)
    order_number = String(required=True, max_length=50, sanitize=False)
    step_index = Integer(required=True, min_value=0)
    actor_id = Identifier(required=True)
    strict_sequence = Boolean(default=True)
    requested_at = DateTime()


@production.command(part_of="Workflow")
class PauseStep:
    """Pause the timer of the in-progress step."""

    order_id = Identifier(required=True)
    actor_id = Identifier(required=True)
    requested_at = DateTime()


@production.command(part_of="Workflow")
class ResumeStep:
    """Resume the timer of the paused in-progress step."""

    order_id = Identifier(required=True)
    actor_id = Identifier(required=True)
    requested_at = DateTime()


@production.command_handler(part_of=Workflow)
class StartingHandler:
    @handle(StartStep)
    def start_step(self, command):
        repo = current_domain.repository_for(Workflow)
        try:
            wf = repo.get(command.order_id)
        except ObjectNotFoundError:
            wf = Workflow.create(
                order_id=command.order_id,
                order_number=command.order_number,
                strict_sequence=command.strict_sequence,
                now=command.requested_at,
            )
        wf.start_step(command.step_index, command.actor_id, now=command.requested_at)
        repo.add(wf)
        return wf

    @handle(PauseStep)
    def pause_step(self, command):
        repo = current_domain.repository_for(Workflow)
        wf = repo.get(command.order_id)
        wf.pause_step(command.actor_id, now=command.requested_at)
        repo.add(wf)
        return wf

    @handle(ResumeStep)
    def resume_step(self, command):
        repo = current_domain.repository_for(Workflow)
        wf = repo.get(command.order_id)
        wf.resume_step(command.actor_id, now=command.requested_at)
        repo.add(wf)
        return wf
