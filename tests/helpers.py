"""Small helpers shared by fixtures and test modules."""

from libs.auth.tokens import create_access_token


def auth_headers(user) -> dict[str, str]:
    """Bearer header carrying a session token for ``user``."""
    token = create_access_token(str(user.id), user.role.value, email=user.email)
    return {"Authorization": f"Bearer {token}"}


async def persist(db_session, *objects):
    """Add, commit and refresh ``objects``; returns the first one."""
    db_session.add_all(objects)
    await db_session.commit()
    for obj in objects:
        await db_session.refresh(obj)
    return objects[0]
