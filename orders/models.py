from django.db import models
from django.utils import timezone

from .workflow import DEFAULT_WORKFLOW, WORKFLOWS, WorkflowError, get_workflow


class Order(models.Model):
    WORKFLOW_CHOICES = [(w.id, w.label) for w in WORKFLOWS.values()]

    state = models.CharField(max_length=32, default="draft", db_index=True)
    workflow = models.CharField(max_length=64, choices=WORKFLOW_CHOICES, default=DEFAULT_WORKFLOW)

    total_price = models.DecimalField(max_digits=12, decimal_places=2)
    currency = models.CharField(max_length=3, default="TRY")

    payment_gateway = models.ForeignKey(
        "payments.PaymentGateway", on_delete=models.PROTECT,
        null=True, blank=True, related_name="orders",
    )

    locked = models.BooleanField(default=False)  # held by checkout
    placed_at = models.DateTimeField(blank=True, null=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def get_workflow(self):
        return get_workflow(self.workflow)

    def allowed_transitions(self) -> list:
        return self.get_workflow().allowed_transitions(self.state)

    def apply_transition(self, transition_id: str):
        """Move the order along ``transition_id``; the caller saves the order.

        Raises :class:`WorkflowError` if the transition does not exist or
        cannot start from the current state.
        """
        transition = self.get_workflow().get_transition(transition_id)
        if transition is None:
            raise WorkflowError(f"Workflow {self.workflow} has no transition {transition_id!r}")
        if self.state not in transition.from_states:
            raise WorkflowError(
                f"Transition {transition_id!r} is not allowed from state {self.state!r} (order {self.pk})"
            )
        self.state = transition.to_state
        if transition.id == "place" and self.placed_at is None:
            self.placed_at = timezone.now()
        return transition

    def __str__(self):
        return f"Order#{self.pk} ({self.state})"
