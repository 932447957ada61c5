from typing import Optional

from fastapi import Header


ANONYMOUS_ACTOR = "unknown"


def get_actor_email(x_user_email: Optional[str] = Header(None)) -> str:
    """
    Email of the signed-in user, supplied by the identity provider in front
    of this service. Stamped on every transaction as userEmail.
    """
    if x_user_email and x_user_email.strip():
        return x_user_email.strip().lower()
    return ANONYMOUS_ACTOR
