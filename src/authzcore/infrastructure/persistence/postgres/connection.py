"""PostgreSQL async connection pool for the grant store."""

from psycopg_pool import AsyncConnectionPool

APPLICATION_NAME = "authzcore"


def create_pool(
    conninfo: str,
    min_size: int = 2,
    max_size: int = 10,
    statement_timeout_ms: int = 5000,
) -> AsyncConnectionPool:
    """Create a closed pool; PoolLifespanMiddleware opens it on ASGI startup.

    Every connection carries a statement timeout so that a slow grant query
    fails the check (and degrades it to Deny) instead of holding the request.
    """
    kwargs = {"application_name": APPLICATION_NAME}
    if statement_timeout_ms > 0:
        kwargs["options"] = f"-c statement_timeout={statement_timeout_ms}"
    return AsyncConnectionPool(
        conninfo=conninfo,
        min_size=min_size,
        max_size=max_size,
        kwargs=kwargs,
        open=False,
    )
