"""Bearer headers for simulated users, signed with the server's JWT secret."""

from storefront.api.auth import ADMIN_ROLE, CUSTOMER_ROLE, create_access_token


def bearer(user_id: str, role: str = CUSTOMER_ROLE) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user_id, role)}"}


def admin_bearer(user_id: str = "loadtest-admin") -> dict:
    return bearer(user_id, ADMIN_ROLE)
