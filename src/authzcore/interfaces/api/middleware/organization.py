"""Organization middleware - tenant scope from the X-Organization-Id header."""

import falcon.asgi

ORGANIZATION_HEADER = "X-Organization-Id"


class OrganizationMiddleware:
    """Sets req.context.organization_id (None when the header is absent)."""

    async def process_request(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        value = req.get_header(ORGANIZATION_HEADER)
        req.context.organization_id = value.strip() if value and value.strip() else None
