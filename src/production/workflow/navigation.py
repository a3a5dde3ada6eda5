"""Step selection — command and handler."""

from protean import handle
from protean.fields import DateTime, Identifier, Integer
from protean.utils.globals import current_domain

from production.domain import production
from production.workflow.workflow import Workflow


@production.command(part_of="Workflow")
class SelectStep:
    """Point the operator's view at another step."""

    order_id = Identifier(required=True)
    step_index = Integer(required=True, min_value=0)
    requested_at = DateTime()


@production.command_handler(part_of=Workflow)
class NavigationHandler:
    @handle(SelectStep)
    def select_step(self, command):
        repo = current_domain.repository_for(Workflow)
        wf = repo.get(command.order_id)
        wf.select_step(command.step_index, now=command.requested_at)
        repo.add(wf)
        return wf
