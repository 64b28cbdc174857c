"""Order workflows.

A workflow is a fixed set of states plus named transitions between them.
Orders never write ``state`` directly once checkout has started; they go
through :meth:`orders.models.Order.apply_transition`.
"""

from dataclasses import dataclass


class WorkflowError(Exception): pass


@dataclass(frozen=True)
class Transition:
    id: str
    label: str
    from_states: tuple
    to_state: str


@dataclass(frozen=True)
class Workflow:
    id: str
    label: str
    states: tuple
    transitions: tuple

    def get_transition(self, transition_id: str):
        for transition in self.transitions:
            if transition.id == transition_id:
                return transition
        return None

    def allowed_transitions(self, state: str) -> list:
        return [t for t in self.transitions if state in t.from_states]


WORKFLOWS = {
    "order_default": Workflow(
        id="order_default",
        label="Default",
        states=("draft", "pending", "completed", "canceled"),
        transitions=(
            Transition("place", "Place order", ("draft", "pending"), "completed"),
            Transition("cancel", "Cancel order", ("draft", "pending"), "canceled"),
        ),
    ),
    "order_default_validation": Workflow(
        id="order_default_validation",
        label="Default, with validation",
        states=("draft", "pending", "validation", "completed", "canceled"),
        transitions=(
            Transition("place", "Place order", ("draft", "pending"), "validation"),
            Transition("validate", "Validate order", ("validation",), "completed"),
            Transition("cancel", "Cancel order", ("draft", "pending", "validation"), "canceled"),
        ),
    ),
}

DEFAULT_WORKFLOW = "order_default"


def get_workflow(workflow_id: str) -> Workflow:
    try:
        return WORKFLOWS[workflow_id]
    except KeyError:
        raise WorkflowError(f"Unknown order workflow: {workflow_id}")
