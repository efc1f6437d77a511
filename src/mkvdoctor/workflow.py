"""Doctor workflow: analysis followed by optional repair and verification.

The workflow walks a fixed sequence of states::

    INIT -> QUICK_CHECK | FULL_ANALYSIS | DEEP_ANALYSIS -> SUMMARIZE
         -> (REPAIR -> VERIFY) -> DONE

Repair only runs when it was requested, not suppressed by analyze-only,
and the report counts at least one issue. A requested repair on a healthy
file is reported as not necessary rather than silently skipped.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum

from mkvdoctor.analysis.controller import ModeController
from mkvdoctor.config.models import DoctorConfig, DoctorOptions
from mkvdoctor.domain.enums import AnalysisMode
from mkvdoctor.domain.media import MediaFile
from mkvdoctor.domain.models import (
    AnalysisReport,
    QuickCheckResult,
    RepairOutcome,
    RepairPlan,
)
from mkvdoctor.executor.remux import RepairExecutor
from mkvdoctor.introspector.interface import MediaIntrospector
from mkvdoctor.probes.base import ProbeContext

logger = logging.getLogger(__name__)


class WorkflowState(Enum):
    INIT = "init"
    QUICK_CHECK = "quick_check"
    FULL_ANALYSIS = "full_analysis"
    DEEP_ANALYSIS = "deep_analysis"
    SUMMARIZE = "summarize"
    REPAIR = "repair"
    VERIFY = "verify"
    DONE = "done"


_MODE_STATES = {
    AnalysisMode.QUICK: WorkflowState.QUICK_CHECK,
    AnalysisMode.FULL: WorkflowState.FULL_ANALYSIS,
    AnalysisMode.DEEP: WorkflowState.DEEP_ANALYSIS,
}


class RepairDecision(Enum):
    """Why repair did or did not run."""

    NOT_REQUESTED = "not_requested"
    SUPPRESSED = "suppressed"
    NOT_NECESSARY = "not_necessary"
    PERFORMED = "performed"


@dataclass
class WorkflowOutcome:
    """Everything a run produced, for rendering and the exit status."""

    media_file: MediaFile
    report: AnalysisReport | None = None
    quick_result: QuickCheckResult | None = None
    repair_decision: RepairDecision = RepairDecision.NOT_REQUESTED
    repair: RepairOutcome | None = None
    states: list[WorkflowState] = field(default_factory=list)

    @property
    def issue_count(self) -> int:
        """Issue count that becomes the process exit status."""
        if self.quick_result is not None:
            return self.quick_result.issue_count
        if self.report is not None:
            return self.report.total_issues
        return 0


class DoctorWorkflow:
    """Runs one doctor invocation against one file."""

    def __init__(
        self,
        introspector: MediaIntrospector,
        config: DoctorConfig | None = None,
        options: DoctorOptions | None = None,
        repair_executor: RepairExecutor | None = None,
    ) -> None:
        self.config = config or DoctorConfig()
        self.options = options or DoctorOptions()
        self.introspector = introspector
        self.controller = ModeController(
            ProbeContext(introspector=introspector, config=self.config)
        )
        self.repair_executor = repair_executor or RepairExecutor(
            introspector, self.config
        )

    def run(self, media: MediaFile) -> WorkflowOutcome:
        outcome = WorkflowOutcome(media_file=media)
        self._enter(outcome, WorkflowState.INIT)

        mode = self.options.mode
        self._enter(outcome, _MODE_STATES[mode])
        if mode == AnalysisMode.QUICK:
            outcome.quick_result = self.controller.quick_check(media)
        else:
            outcome.report = self.controller.analyze(media, mode)

        self._enter(outcome, WorkflowState.SUMMARIZE)
        if outcome.report is not None:
            self._maybe_repair(outcome, outcome.report)

        self._enter(outcome, WorkflowState.DONE)
        return outcome

    def _maybe_repair(self, outcome: WorkflowOutcome, report: AnalysisReport) -> None:
        options = self.options
        if not options.repair:
            return
        if report.total_issues == 0:
            logger.info("No issues detected, repair not necessary")
            outcome.repair_decision = RepairDecision.NOT_NECESSARY
            return
        if options.analyze_only:
            logger.warning("Repair requested but analyze-only mode is enabled")
            outcome.repair_decision = RepairDecision.SUPPRESSED
            return

        plan = RepairPlan(
            input_path=outcome.media_file.path,
            output_path=options.output,
            backup_requested=options.backup,
            force_mode=options.force,
        )
        self._enter(outcome, WorkflowState.REPAIR)
        outcome.repair = self.repair_executor.repair(plan)
        outcome.repair_decision = RepairDecision.PERFORMED
        if outcome.repair.execution_succeeded:
            # Verification ran inside the executor; the state is recorded here
            self._enter(outcome, WorkflowState.VERIFY)

    @staticmethod
    def _enter(outcome: WorkflowOutcome, state: WorkflowState) -> None:
        logger.debug("Workflow state: %s", state.value)
        outcome.states.append(state)
