"""Access resolution use cases."""

from authzcore.application.use_cases.access.bulk_evaluate import BulkEvaluateUseCase
from authzcore.application.use_cases.access.enumerate_permissions import (
    EnumeratePermissionsUseCase,
)
from authzcore.application.use_cases.access.evaluate_access import EvaluateAccessUseCase
from authzcore.application.use_cases.access.simulate_access import (
    SimulateAccessUseCase,
    SimulateDocumentUseCase,
)

__all__ = [
    "BulkEvaluateUseCase",
    "EnumeratePermissionsUseCase",
    "EvaluateAccessUseCase",
    "SimulateAccessUseCase",
    "SimulateDocumentUseCase",
]
