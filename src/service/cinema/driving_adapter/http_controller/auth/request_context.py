"""
Caller identity for the booking API.

Authentication is done by the gateway in front of this service; it forwards the
verified user id and role as headers, which are trusted here as-is.
"""

from typing import Optional

from fastapi import Depends, Header
from opentelemetry import trace

from src.platform.exception.exceptions import AuthenticationError, ForbiddenError
from src.service.cinema.domain.value_object.request_context import RequestContext, UserRole


USER_ID_HEADER = 'X-User-Id'
USER_ROLE_HEADER = 'X-User-Role'


async def get_request_context(
    x_user_id: Optional[str] = Header(default=None),
    x_user_role: Optional[str] = Header(default=None),
) -> RequestContext:
    if not x_user_id:
        raise AuthenticationError(f'Missing {USER_ID_HEADER} header')
    try:
        user_id = int(x_user_id)
    except ValueError:
        raise AuthenticationError(f'Invalid {USER_ID_HEADER} header')

    role_value = (x_user_role or UserRole.CUSTOMER.value).lower()
    try:
        role = UserRole(role_value)
    except ValueError:
        raise AuthenticationError(f'Unknown role: {x_user_role}')

    return RequestContext(user_id=user_id, role=role)


async def require_staff(context: RequestContext = Depends(get_request_context)) -> RequestContext:
    tracer = trace.get_tracer(__name__)
    with tracer.start_as_current_span(
        'auth.require_staff',
        attributes={'user.id': context.user_id, 'user.role': context.role.value},
    ):
        if not context.is_staff:
            raise ForbiddenError('Only staff can perform this action')
        return context
