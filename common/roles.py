"""Role lookups shared by the permission classes of all apps.

A missing profile is treated as "no role" so permission checks fail closed.
"""

from profiles.models import Profile


def user_profile(user):
    if not user or not user.is_authenticated:
        return None
    try:
        return user.profile
    except Profile.DoesNotExist:
        return None


def user_role(user) -> str:
    prof = user_profile(user)
    return prof.role if prof else ""


def is_customer(user) -> bool:
    prof = user_profile(user)
    return bool(prof and prof.is_customer)


def is_tasker(user) -> bool:
    prof = user_profile(user)
    return bool(prof and prof.is_tasker)


def display_name(user) -> str:
    """Full name from the profile, falling back to the username."""
    if user is None:
        return ""
    prof = user_profile(user)
    if prof:
        return prof.display_name
    return user.get_full_name() or user.username
