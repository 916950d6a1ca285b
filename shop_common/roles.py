"""Role names seeded in the credential store and referenced by every service."""

ADMIN = "Admin"
MANAGER = "Manager"
USER = "User"

DEFAULT_ROLE = USER

# name -> description, in seed order
SEEDED_ROLES = {
    ADMIN: "Administrator role",
    MANAGER: "Manager role",
    USER: "Regular user role",
}
