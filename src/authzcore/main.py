"""Application entry point and composition root."""

import logging

from authzcore import __version__
from authzcore.application.use_cases.access import (
    BulkEvaluateUseCase,
    EnumeratePermissionsUseCase,
    EvaluateAccessUseCase,
    SimulateAccessUseCase,
    SimulateDocumentUseCase,
)
from authzcore.application.use_cases.policy import (
    AttachPolicyUseCase,
    DeletePolicyUseCase,
    DetachPolicyUseCase,
    UpdatePolicyDocumentUseCase,
    ValidatePolicyUseCase,
)
from authzcore.config import Settings, get_settings
from authzcore.infrastructure.cache import CachingGrantStore, GrantCache
from authzcore.infrastructure.persistence.postgres.connection import create_pool
from authzcore.infrastructure.persistence.postgres.unit_of_work import create_uow_factory
from authzcore.interfaces.api.app import Resources, create_app
from authzcore.interfaces.api.middleware.pool_lifespan import PoolLifespanMiddleware
from authzcore.interfaces.api.resources.authz import (
    BulkCheckResource,
    CheckResource,
    EffectivePermissionsResource,
    SimulateDocumentResource,
    SimulateResource,
)
from authzcore.interfaces.api.resources.health import HealthResource
from authzcore.interfaces.api.resources.policies import (
    PolicyResource,
    PolicyValidateResource,
    RolePolicyResource,
)

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    level = logging.DEBUG if settings.debug else settings.log_level.upper()
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def create_authz_app(settings: Settings | None = None):
    """Composition root - build Falcon app with all dependencies."""
    settings = settings or get_settings()
    pool = create_pool(
        settings.database_url,
        settings.pool_min_size,
        settings.pool_max_size,
        settings.statement_timeout_ms,
    )

    wrap_grants = None
    if settings.grant_cache_ttl_seconds > 0:
        cache = GrantCache(
            settings.grant_cache_ttl_seconds,
            max_entries=settings.grant_cache_max_entries,
        )

        def wrap_grants(store):
            return CachingGrantStore(store, cache)

    uow_factory = create_uow_factory(pool, wrap_grants)
    content_type = settings.content_resource_type

    evaluate_access = EvaluateAccessUseCase(uow_factory, content_resource_type=content_type)
    simulate_access = SimulateAccessUseCase(uow_factory, content_resource_type=content_type)
    enumerate_permissions = EnumeratePermissionsUseCase(
        uow_factory,
        action_catalog=settings.action_catalog,
        content_resource_type=content_type,
    )
    bulk_evaluate = BulkEvaluateUseCase(uow_factory, content_resource_type=content_type)

    resources = Resources(
        health=HealthResource(pool),
        check=CheckResource(evaluate_access),
        simulate=SimulateResource(simulate_access),
        simulate_document=SimulateDocumentResource(SimulateDocumentUseCase()),
        bulk_check=BulkCheckResource(bulk_evaluate),
        effective_permissions=EffectivePermissionsResource(enumerate_permissions),
        policy_validate=PolicyValidateResource(ValidatePolicyUseCase()),
        policy=PolicyResource(
            UpdatePolicyDocumentUseCase(uow_factory),
            DeletePolicyUseCase(uow_factory),
        ),
        role_policy=RolePolicyResource(
            AttachPolicyUseCase(uow_factory),
            DetachPolicyUseCase(uow_factory),
        ),
    )
    logger.info(
        "authzcore v%s (%s), grant cache ttl=%ss",
        __version__,
        settings.environment,
        settings.grant_cache_ttl_seconds,
    )
    return create_app(resources, middleware=[PoolLifespanMiddleware(pool)])


def main() -> None:
    """CLI entry point - run the API with uvicorn."""
    import uvicorn

    settings = get_settings()
    configure_logging(settings)
    app = create_authz_app(settings)
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
