"""Policy administration use cases."""

from authzcore.application.use_cases.policy.attach_policy import AttachPolicyUseCase
from authzcore.application.use_cases.policy.delete_policy import DeletePolicyUseCase
from authzcore.application.use_cases.policy.detach_policy import DetachPolicyUseCase
from authzcore.application.use_cases.policy.update_policy import UpdatePolicyDocumentUseCase
from authzcore.application.use_cases.policy.validate_policy import ValidatePolicyUseCase

__all__ = [
    "AttachPolicyUseCase",
    "DeletePolicyUseCase",
    "DetachPolicyUseCase",
    "UpdatePolicyDocumentUseCase",
    "ValidatePolicyUseCase",
]
