"""Contract amortization schedules with an editable reconciliation workflow."""
from contract_amortization.application.store import EditableScheduleStore
from contract_amortization.application.use_cases import LoadScheduleUseCase, ScheduleContext
from contract_amortization.application.workflow import ReconciliationWorkflow, WorkflowState
from contract_amortization.domain.services import ScenarioClassifier, ScheduleGenerator, ScheduleValidator
from contract_amortization.infrastructure.factory import build_data_source

__all__ = [
    "EditableScheduleStore",
    "LoadScheduleUseCase",
    "ScheduleContext",
    "ReconciliationWorkflow",
    "WorkflowState",
    "ScenarioClassifier",
    "ScheduleGenerator",
    "ScheduleValidator",
    "build_data_source",
]
