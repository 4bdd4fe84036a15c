"""Ordered steps with compensations for work spanning storage and database.

Blob storage and the database do not share a transaction. An operation
touching both is written as a list of steps, each paired with the action
that undoes it. When a step fails, compensations of the steps that
already completed run in reverse order, and a failing compensation is
logged without stopping the others.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, final

logger = logging.getLogger(__name__)


class SagaError(Exception):
    """Raised when a saga step fails, after compensations ran.

    The failing step's exception is available as ``__cause__``.
    """

    def __init__(self, step_name: str) -> None:
        """Initialize SagaError.

        Args:
            step_name: Name of the step that failed.
        """
        self.step_name = step_name
        super().__init__(f'Saga step failed: {step_name}')


@final
@dataclass(frozen=True, slots=True)
class SagaStep:
    """One forward action and the action undoing it."""

    name: str
    action: Callable[[], Any]
    compensation: Callable[[], None] | None = None


@final
@dataclass
class Saga:
    """Run steps in order and undo completed ones on failure.

    Example::

        saga = Saga('upload')
        saga.add_step('write blob', write_blob, compensation=delete_blob)
        saga.add_step('commit record', commit_record)
        results = saga.execute()
    """

    name: str
    steps: list[SagaStep] = field(default_factory=list)

    def add_step(
        self,
        name: str,
        action: Callable[[], Any],
        compensation: Callable[[], None] | None = None,
    ) -> 'Saga':
        """Append a step.

        Args:
            name: Step name used in logs and errors.
            action: Forward action, its return value is collected.
            compensation: Undo action, run only if a later step fails.

        Returns:
            The saga itself, for chaining.
        """
        self.steps.append(SagaStep(name, action, compensation))
        return self

    def execute(self) -> dict[str, Any]:
        """Run all steps.

        Returns:
            Step name to action result.

        Raises:
            SagaError: If a step raised; compensations have run by then.
        """
        results: dict[str, Any] = {}
        completed: list[SagaStep] = []
        for step in self.steps:
            try:
                results[step.name] = step.action()
            except Exception as exc:
                logger.exception(
                    'Saga %s failed at step %s',
                    self.name,
                    step.name,
                )
                self._compensate(completed)
                raise SagaError(step.name) from exc
            completed.append(step)
        return results

    def _compensate(self, completed: list[SagaStep]) -> None:
        for step in reversed(completed):
            if step.compensation is None:
                continue
            logger.warning('Saga %s compensating step %s', self.name, step.name)
            try:
                step.compensation()
            except Exception:
                logger.exception(
                    'Compensation of step %s failed in saga %s',
                    step.name,
                    self.name,
                )
