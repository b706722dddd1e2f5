from contextlib import contextmanager

from flask import current_app

from website_admin.extensions import db


@contextmanager
def transactional():
    """
    Unit of work around one use case.
    Commits when the block exits cleanly; otherwise rolls back and re-raises
    so the error handlers can map domain errors to responses.
    """
    session = db.session
    try:
        yield session
        session.commit()
    except Exception as exc:
        session.rollback()
        current_app.logger.debug(f"Rolled back content transaction: {exc.__class__.__name__}: {exc}")
        raise
