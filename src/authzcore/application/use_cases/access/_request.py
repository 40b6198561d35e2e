"""Request checks shared by the access use cases."""

from authzcore.domain.exceptions import ValidationError


def require_action_and_resource(action: str, resource_id: str) -> None:
    if not action:
        raise ValidationError("action is required")
    if not resource_id:
        raise ValidationError("resource is required")
