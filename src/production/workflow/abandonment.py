"""Workflow lifecycle — abandoning, archiving and status sync bookkeeping."""

from protean import handle
from protean.fields import DateTime, Identifier, String, Text
from protean.utils.globals import current_domain

from production.domain import production
from production.workflow.workflow import Workflow


@production.command(part_of="Workflow")
class AbandonWorkflow:
    """Stop production of an order for good."""

    order_id = Identifier(required=True)
    actor_id = Identifier(required=True)
    reason = Text(required=True, sanitize=False)
    requested_at = DateTime()


@production.command(part_of="Workflow")
class ArchiveWorkflow:
    """Freeze a workflow whose order reached a terminal status."""

    order_id = Identifier(required=True)
    order_status = String(required=True, max_length=50)
    requested_at = DateTime()


@production.command(part_of="Workflow")
class MarkStatusSynced:
    """Record that the order service accepted the post-production status."""

    order_id = Identifier(required=True)
    order_status = String(required=True, max_length=50)
    requested_at = DateTime()


@production.command_handler(part_of=Workflow)
class LifecycleHandler:
    @handle(AbandonWorkflow)
    def abandon_workflow(self, command):
        repo = current_domain.repository_for(Workflow)
        wf = repo.get(command.order_id)
        wf.abandon(command.reason, command.actor_id, now=command.requested_at)
        repo.add(wf)
        return wf

    @handle(ArchiveWorkflow)
    def archive_workflow(self, command):
        repo = current_domain.repository_for(Workflow)
        wf = repo.get(command.order_id)
        wf.archive(command.order_status, now=command.requested_at)
        repo.add(wf)
        return wf

    @handle(MarkStatusSynced)
    def mark_status_synced(self, command):
        repo = current_domain.repository_for(Workflow)
        wf = repo.get(command.order_id)
        wf.mark_status_synced(command.order_status, now=command.requested_at)
        repo.add(wf)
        return wf
