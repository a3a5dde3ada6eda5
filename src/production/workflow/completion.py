"""Completing and skipping steps — commands and handler."""

from protean import handle
from protean.fields import DateTime, Identifier, Integer, Text
from protean.utils.globals import current_domain

from production.domain import production
from production.workflow.workflow import Workflow


@production.command(part_of="Workflow")
class CompleteStep:
    """Finish an in-progress step, optionally with operator notes."""

    order_id = Identifier(required=True)
    step_index = Integer(required=True, min_value=0)
    actor_id = Identifier(required=True)
    notes = Text(sanitize=False)
    requested_at = DateTime()


@production.command(part_of="Workflow")
class SkipStep:
    """Explicitly bypass a pending step."""

    order_id = Identifier(required=True)
    step_index = Integer(required=True, min_value=0)
    actor_id = Identifier(required=True)
    reason = Text(required=True, sanitize=False)
    requested_at = DateTime()


@production.command_handler(part_of=Workflow)
class CompletionHandler:
    @handle(CompleteStep)
    def complete_step(self, command):
        repo = current_domain.repository_for(Workflow)
        wf = repo.get(command.order_id)
        wf.complete_step(command.step_index, command.actor_id, notes=command.notes, now=command.requested_at)
        repo.add(wf)
        return wf

    @handle(SkipStep)
    def skip_step(self, command):
        repo = current_domain.repository_for(Workflow)
        wf = repo.get(command.order_id)
        wf.skip_step(command.step_index, command.reason, command.actor_id, now=command.requested_at)
        repo.add(wf)
        return wf
