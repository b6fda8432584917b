# directsource/services/local_cart_store.py
from typing import List

import redis
from pydantic import TypeAdapter, ValidationError

from directsource.domain.schemas import CartLine
from directsource.utils.retry import redis_retry
from directsource.utils.settings import REDIS_URL, GUEST_CART_NAMESPACE
from directsource.utils.logging import get_logger

logger = get_logger(__name__)

_LINES = TypeAdapter(List[CartLine])


class LocalCartStore:
    """
    Koszyk goscia trzymany w Redis.
    -jeden klucz na goscia: "<namespace>:<guest_id>"
    -wartosc to JSON z lista CartLine
    -zepsuty wpis traktujemy jak pusty koszyk i kasujemy
    """

    def __init__(self, client: redis.Redis | None = None, namespace: str | None = None):
        # surowe bajty, dekodujemy sami w read()
        self.redis = client if client is not None else redis.Redis.from_url(REDIS_URL)
        self.namespace = namespace or GUEST_CART_NAMESPACE

    def key(self, guest_id: str) -> str:
        return f"{self.namespace}:{guest_id}"

    @redis_retry()
    def _get_raw(self, guest_id: str) -> bytes | str | None:
        return self.redis.get(self.key(guest_id))

    def read(self, guest_id: str) -> List[CartLine]:
        try:
            raw = self._get_raw(guest_id)
            if not raw:
                return []
            if isinstance(raw, bytes):
                raw = raw.decode("utf-8")
            return _LINES.validate_json(raw)
        except UnicodeDecodeError as e:
            logger.warning(f"Guest cart {self.key(guest_id)} is not valid UTF-8, clearing it: {e.reason}")
        except ValidationError as e:
            logger.warning(f"Corrupt guest cart {self.key(guest_id)}, clearing it: {e.error_count()} errors")
        self.clear(guest_id)
        return []

    @redis_retry()
    def write(self, guest_id: str, lines: List[CartLine]) -> None:
        if not lines:
            self.redis.delete(self.key(guest_id))
            return
        self.redis.set(self.key(guest_id), _LINES.dump_json(lines).decode())

    @redis_retry()
    def clear(self, guest_id: str) -> None:
        self.redis.delete(self.key(guest_id))
