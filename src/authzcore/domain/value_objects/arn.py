"""Structured resource identifiers."""

from dataclasses import dataclass

from authzcore.domain.exceptions import ValidationError

ARN_PREFIX = "arn"


@dataclass(frozen=True)
class Arn:
    """Resource identifier.

    Full form is ``arn:<namespace>:<service>:<organization>:<type>/<id>``.
    The short form ``<type>/<id>`` is also accepted; it carries no namespace,
    service or organization.
    """

    resource_type: str
    resource_id: str
    namespace: str | None = None
    service: str | None = None
    organization_id: str | None = None

    @classmethod
    def parse(cls, value: str) -> "Arn":
        """Parse a full or short resource identifier."""
        if not value:
            raise ValidationError("Resource identifier must not be empty")
        if value.startswith(f"{ARN_PREFIX}:"):
            parts = value.split(":", 4)
            if len(parts) != 5:
                raise ValidationError(f"Malformed ARN: {value}")
            _, namespace, service, organization, path = parts
            resource_type, resource_id = _split_path(path, value)
            return cls(
                resource_type=resource_type,
                resource_id=resource_id,
                namespace=namespace,
                service=service,
                organization_id=organization or None,
            )
        resource_type, resource_id = _split_path(value, value)
        return cls(resource_type=resource_type, resource_id=resource_id)

    @property
    def is_full(self) -> bool:
        return self.namespace is not None

    def __str__(self) -> str:
        path = f"{self.resource_type}/{self.resource_id}"
        if not self.is_full:
            return path
        return ":".join(
            [ARN_PREFIX, self.namespace or "", self.service or "", self.organization_id or "", path]
        )


def _split_path(path: str, original: str) -> tuple[str, str]:
    resource_type, sep, resource_id = path.partition("/")
    if not sep or not resource_type or not resource_id:
        raise ValidationError(f"Resource identifier must be <type>/<id>: {original}")
    return resource_type, resource_id
