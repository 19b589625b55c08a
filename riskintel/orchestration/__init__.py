from riskintel.orchestration.orchestrator import AssessmentOrchestrator
from riskintel.orchestration.runtime import Runtime, build_runtime
from riskintel.orchestration.service import AssessmentService

__all__ = ["AssessmentOrchestrator", "AssessmentService", "Runtime", "build_runtime"]
