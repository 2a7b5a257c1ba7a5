import contextlib
import math
import threading

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool


# Re-entrant so a repository call may open a nested scope on the same thread
_shared_connection_lock = threading.RLock()


def _clamp(value, low, high):
    return max(low, min(high, value))


def _null_safe(fn):
    def wrapper(*args):
        if any(arg is None for arg in args):
            return None
        return fn(*args)
    return wrapper


# Functions the discovery distance expression needs; SQLite builds may lack them
_SQLITE_MATH_FUNCTIONS = {
    'radians': (1, math.radians),
    'sin': (1, math.sin),
    'cos': (1, math.cos),
    'asin': (1, lambda x: math.asin(_clamp(x, -1.0, 1.0))),
    'sqrt': (1, lambda x: math.sqrt(max(x, 0.0))),
    'power': (2, math.pow),
}


def _register_sqlite_math(dbapi_connection, connection_record):
    for name, (n_args, fn) in _SQLITE_MATH_FUNCTIONS.items():
        dbapi_connection.create_function(name, n_args, _null_safe(fn), deterministic=True)


def build_engine(url: str, echo: bool = False) -> Engine:
    """Create an engine; SQLite engines get the math functions registered."""
    kwargs = {'echo': echo}
    if url.startswith('sqlite'):
        kwargs['connect_args'] = {'check_same_thread': False}
        if url in ('sqlite://', 'sqlite:///:memory:'):
            # One shared connection, otherwise every session sees an empty database
            kwargs['poolclass'] = StaticPool

    engine = create_engine(url, **kwargs)
    if engine.dialect.name == 'sqlite':
        event.listen(engine, 'connect', _register_sqlite_math)
    return engine


def build_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine, expire_on_commit=False)


def uses_shared_connection(session_factory: sessionmaker) -> bool:
    """True when every session of the factory runs on one StaticPool connection."""
    bind = session_factory.kw.get('bind')
    return bind is not None and isinstance(bind.pool, StaticPool)


@contextlib.contextmanager
def db_session_scope(session_factory: sessionmaker):
    """Provide a transactional scope around a series of operations.

    Sessions on a shared connection are serialized for their whole scope;
    otherwise one thread's commit or rollback would end another's transaction.
    """
    guard = _shared_connection_lock if uses_shared_connection(session_factory) else contextlib.nullcontext()
    with guard:
        session: Session = session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()
