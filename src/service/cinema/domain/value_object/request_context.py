from enum import StrEnum

import attrs


class UserRole(StrEnum):
    CUSTOMER = 'customer'
    STAFF = 'staff'


@attrs.frozen
class RequestContext:
    """Authenticated caller, supplied by the auth gateway and trusted as-is."""

    user_id: int
    role: UserRole = UserRole.CUSTOMER

    @property
    def is_staff(self) -> bool:
        return self.role == UserRole.STAFF
