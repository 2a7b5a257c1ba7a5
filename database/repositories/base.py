import contextlib

from sqlalchemy.orm import sessionmaker

from database.database import db_session_scope


class BaseRepository:
    """
    SQL repositories open one session per call, so a single repository
    instance is safe to share between threads. In-memory SQLite shares one
    connection, so its sessions run one at a time (see db_session_scope).
    """

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    @contextlib.contextmanager
    def session_scope(self):
        with db_session_scope(self.session_factory) as session:
            yield session
