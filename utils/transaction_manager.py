import logging
from typing import Any, Awaitable, Callable

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)


class TransactionManager:
    """
    Savepoint helper for partial rollback inside an open transaction.
    """

    @staticmethod
    async def execute_with_savepoint(session: AsyncSession,
                                     operation: Callable[[AsyncSession], Awaitable[Any]],
                                     savepoint_name: str = "sp1") -> Any:
        """
        Run one operation inside a savepoint of the already open transaction.

        On failure only the work done by the operation is rolled back; the
        enclosing transaction stays usable and the exception is re-raised.

        Args:
            session: Database session with an open transaction
            operation: Async callable receiving the session
            savepoint_name: Name for the savepoint (must be a plain identifier)
        """
        await session.execute(text(f"SAVEPOINT {savepoint_name}"))
        logger.debug(f"Savepoint {savepoint_name} created")

        try:
            result = await operation(session)
        except Exception as e:
            try:
                await session.execute(text(f"ROLLBACK TO SAVEPOINT {savepoint_name}"))
                await session.execute(text(f"RELEASE SAVEPOINT {savepoint_name}"))
                logger.info(f"Rolled back to savepoint {savepoint_name}: {str(e)}")
            except Exception as rollback_error:
                logger.critical(f"Failed to rollback to savepoint {savepoint_name}: {str(rollback_error)}")
            raise

        await session.execute(text(f"RELEASE SAVEPOINT {savepoint_name}"))
        logger.debug(f"Savepoint {savepoint_name} released")
        return result
