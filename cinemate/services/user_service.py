import logging
from sqlalchemy.orm import Session

from ..db import models
from ..events import UserCreated, UserDeleted, UserUpdated

logger = logging.getLogger(__name__)


def create_user(session: Session, event: UserCreated) -> models.User:
    user = session.get(models.User, event.user_id)
    if user:
        logger.info("User '%s' already exists", event.user_id)
        return update_user(
            session,
            UserUpdated(
                user_id=event.user_id,
                email=event.email,
                full_name=event.full_name,
                image=event.image,
            ),
        )
    user = models.User(
        id=event.user_id,
        email=event.email,
        name=event.full_name,
        image=event.image,
    )
    session.add(user)
    session.commit()
    logger.info("Created user '%s'", event.user_id)
    return user


def update_user(session: Session, event: UserUpdated) -> models.User | None:
    user = session.get(models.User, event.user_id)
    if not user:
        logger.warning("Cannot update unknown user '%s'", event.user_id)
        return None
    user.email = event.email
    user.name = event.full_name
    user.image = event.image
    session.commit()
    logger.info("Updated user '%s'", event.user_id)
    return user


def delete_user(session: Session, event: UserDeleted) -> bool:
    user = session.get(models.User, event.user_id)
    if not user:
        logger.info("User '%s' already deleted", event.user_id)
        return False
    session.delete(user)
    session.commit()
    logger.info("Deleted user '%s'", event.user_id)
    return True
