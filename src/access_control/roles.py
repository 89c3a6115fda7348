"""Portal roles and the privileged subset."""

from django.db import models


class Role(models.TextChoices):
    """Role attached to every user and copied into its access tokens."""

    READER = "pengguna", "Pengguna"
    JOURNALIST = "jurnalis", "Jurnalis"
    INSTITUTION = "instansi", "Instansi"
    ADMIN = "admin", "Admin"


# Roles granted the editorial capability set.
PRIVILEGED_ROLES: frozenset[str] = frozenset({Role.ADMIN.value, Role.JOURNALIST.value})

# Roles a visitor may pick for themselves when registering.
SELF_REGISTERABLE_ROLES: frozenset[str] = frozenset(
    {Role.READER.value, Role.JOURNALIST.value, Role.INSTITUTION.value}
)


__all__ = ["Role", "PRIVILEGED_ROLES", "SELF_REGISTERABLE_ROLES"]
