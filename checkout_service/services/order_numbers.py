"""Человекочитаемые номера заказов (YB-4K7Q2Z).

Номер генерируется случайно, уникальность гарантирует unique-индекс в БД.
allocate() повторяет вставку со свежим номером при коллизии и сразу
сдаётся на любой другой ошибке.
"""
import logging
import secrets
import string
from dataclasses import dataclass
from typing import Any, Callable, Optional

from ..exceptions import OrderCreationFailed

logger = logging.getLogger(__name__)

ALPHABET = string.digits + string.ascii_uppercase

OK = "ok"
COLLISION = "collision"
FATAL = "fatal"


@dataclass(frozen=True)
class InsertOutcome:
    """Результат одной попытки вставки: ok, collision или fatal"""
    kind: str
    value: Any = None
    error: Optional[BaseException] = None

    @classmethod
    def ok(cls, value: Any) -> "InsertOutcome":
        return cls(OK, value=value)

    @classmethod
    def collision(cls, error: Optional[BaseException] = None) -> "InsertOutcome":
        return cls(COLLISION, error=error)

    @classmethod
    def fatal(cls, error: BaseException) -> "InsertOutcome":
        return cls(FATAL, error=error)


def generate_order_number(prefix: str = "YB", length: int = 6) -> str:
    suffix = "".join(secrets.choice(ALPHABET) for _ in range(length))
    return f"{prefix}-{suffix}"


def allocate(
        attempt_insert: Callable[[str], InsertOutcome],
        generate: Callable[[], str] = generate_order_number,
        max_attempts: int = 5
) -> Any:
    """Вставить запись под свежим номером, повторяя при коллизии до max_attempts раз"""
    last_error = None

    for attempt in range(1, max_attempts + 1):
        candidate = generate()
        outcome = attempt_insert(candidate)

        if outcome.kind == OK:
            return outcome.value

        if outcome.kind == COLLISION:
            last_error = outcome.error
            logger.warning(f"⚠️ Order number {candidate} already taken (attempt {attempt}/{max_attempts})")
            continue

        logger.error(f"❌ Order insert failed for number {candidate}: {outcome.error}")
        raise OrderCreationFailed() from outcome.error

    logger.error(f"❌ Could not allocate a unique order number after {max_attempts} attempts")
    raise OrderCreationFailed() from last_error
