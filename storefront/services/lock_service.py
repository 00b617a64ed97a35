# storefront/services/lock_service.py
from contextlib import contextmanager
import uuid

import redis

from storefront.domain.errors import CheckoutInProgressError
from storefront.utils.retry import redis_retry
from storefront.utils.settings import REDIS_URL, CHECKOUT_LOCK_TTL_SECONDS
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

#compare-and-delete in one Lua call, redis runs scripts atomically
#so nobody can slip in between GET and DEL and lose someone else's lock
_RELEASE_LUA = """
if redis.call('GET', KEYS[1]) == ARGV[1] then
    return redis.call('DEL', KEYS[1])
else
    return 0
end
"""


class LockService:
    """
    -per-user submit guard for checkout and payment completion
    -a second request while one is in flight is refused, not queued
    -locks expire on their own (EX) if the holder dies
    """

    def __init__(self, url: str | None = None, client: redis.Redis | None = None):
        self.redis = client or redis.Redis.from_url(
            url or REDIS_URL,
            decode_responses=True,
        )

    @staticmethod
    def _key(user_id: int) -> str:
        return f"checkout:{user_id}:lock"

    @redis_retry()
    def acquire_user_lock(self, user_id: int, token: str, ttl: int) -> bool:
        key = self._key(user_id)
        logger.info(f"Acquire lock {key} ({token})")
        #SET checkout:1:lock "<token>" NX EX 30
        return bool(self.redis.set(name=key, value=token, nx=True, ex=ttl))

    @redis_retry()
    def release_user_lock(self, user_id: int, token: str) -> bool:
        key = self._key(user_id)
        logger.info(f"Release lock {key} ({token})")
        res = self.redis.eval(_RELEASE_LUA, 1, key, token)
        return bool(res)

    @contextmanager
    def guard(self, user_id: int, action: str, ttl: int = CHECKOUT_LOCK_TTL_SECONDS):
        token = f"{action}:{uuid.uuid4().hex}"
        if not self.acquire_user_lock(user_id, token, ttl):
            logger.warning(f"User {user_id} already has a request in flight, refusing {action}")
            raise CheckoutInProgressError()
        try:
            yield
        finally:
            self.release_user_lock(user_id, token)
