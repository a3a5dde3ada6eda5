"""Blocking, unblocking and quality issues — commands and handler."""

from protean import handle
from protean.fields import DateTime, Identifier, Integer, Text
from protean.utils.globals import current_domain

from production.domain import production
from production.workflow.workflow import Workflow


@production.command(part_of="Workflow")
class BlockStep:
    """Halt an in-progress step because of a problem."""

    order_id = Identifier(required=True)
    step_index = Integer(required=True, min_value=0)
    actor_id = Identifier(required=True)
    reason = Text(required=True, sanitize=False)
    requested_at = DateTime()


@production.command(part_of="Workflow")
class UnblockStep:
    """Release a blocked step back to pending."""

    order_id = Identifier(required=True)
    step_index = Integer(required=True, min_value=0)
    actor_id = Identifier(required=True)
    requested_at = DateTime()


@production.command(part_of="Workflow")
class ReportQualityIssue:
    """Record a quality problem without changing any step."""

    order_id = Identifier(required=True)
    actor_id = Identifier(required=True)
    description = Text(required=True, sanitize=False)
    requested_at = DateTime()


@production.command_handler(part_of=Workflow)
class BlockingHandler:
    @handle(BlockStep)
    def block_step(self, command):
        repo = current_domain.repository_for(Workflow)
        wf = repo.get(command.order_id)
        wf.block_step(command.step_index, command.reason, command.actor_id, now=command.requested_at)
        repo.add(wf)
        return wf

    @handle(UnblockStep)
    def unblock_step(self, command):
        repo = current_domain.repository_for(Workflow)
        wf = repo.get(command.order_id)
        wf.unblock_step(command.step_index, command.actor_id, now=command.requested_at)
        repo.add(wf)
        return wf

    @handle(ReportQualityIssue)
    def report_quality_issue(self, command):
        repo = current_domain.repository_for(Workflow)
        wf = repo.get(command.order_id)
        wf.report_quality_issue(command.description, command.actor_id, now=command.requested_at)
        repo.add(wf)
        return wf
