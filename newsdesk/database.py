from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.orm import DeclarativeBase

from newsdesk.config import settings

# Module-level engine variable allows tests to override with a test engine.
engine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.DEBUG,
    pool_pre_ping=True,
)

async_session = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)

_AFTER_COMMIT = "newsdesk.after_commit"


class Base(DeclarativeBase):
    pass


def run_after_commit(session: AsyncSession, callback) -> None:
    """
    Queue the coroutine function *callback* to run once *session* commits.

    Cache purges go through here: purging while the transaction is still
    open lets a concurrent reader cache the old row again.
    """
    session.info.setdefault(_AFTER_COMMIT, []).append(callback)


async def commit(session: AsyncSession) -> None:
    """Commit *session*, then run the callbacks queued on it, in order."""
    await session.commit()
    for callback in session.info.pop(_AFTER_COMMIT, []):
        await callback()


async def rollback(session: AsyncSession) -> None:
    """Roll back *session* and drop its queued callbacks."""
    session.info.pop(_AFTER_COMMIT, None)
    await session.rollback()


async def get_db():
    """
    Yield one session per request.  Stores flush their writes; the commit
    (or rollback on error) happens here, once, at the end of the request.
    """
    async with async_session() as session:
        try:
            yield session
            await commit(session)
        except Exception:
            await rollback(session)
            raise
