import redis

from medistore.utils.retry import redis_retry
from medistore.utils.settings import REDIS_URL
from medistore.utils.logging import get_logger

logger = get_logger(__name__)

#compare and delete in one step: only the holder's token releases the lock
_RELEASE_LUA = """
if redis.call('GET', KEYS[1]) == ARGV[1] then
    return redis.call('DEL', KEYS[1])
else
    return 0
end
"""

#redis runs the script atomically (single threaded), nothing can slip between GET and DEL


class LockService:
    """
    Per-user checkout lock.
    -acquire: SET NX EX, False if another checkout for this user is running
    -release: Lua compare-and-delete with the holder's token
    Stock correctness never depends on this lock, it only stops a double
    submit from doing the checkout work twice.
    """

    def __init__(self, url: str | None = None):
        self.redis = redis.Redis.from_url(
            url or REDIS_URL,
            decode_responses=True,
        )

    @staticmethod
    def _key(user_id: int) -> str:
        return f"checkout:{user_id}:lock"

    @redis_retry()
    def acquire_checkout_lock(self, user_id: int, token: str, ttl: int) -> bool:
        key = self._key(user_id)
        #SET checkout:7:lock "<token>" NX EX 30
        acquired = bool(
            self.redis.set(
                name=key,
                value=token,
                nx=True,  #only if the key does not exist yet
                ex=ttl,  #expires on its own if the worker dies mid-checkout
            )
        )
        if not acquired:
            logger.warning(
                f"Checkout lock {key} already held, refusing concurrent checkout",
                extra={"user_id": user_id, "operation": "acquire_checkout_lock"},
            )
        else:
            logger.debug(f"Acquired lock {key}", extra={"user_id": user_id})
        return acquired

    @redis_retry()
    def release_checkout_lock(self, user_id: int, token: str) -> bool:
        key = self._key(user_id)
        released = bool(self.redis.eval(_RELEASE_LUA, 1, key, token))
        if not released:
            #TTL already expired, or another checkout took the key over
            logger.warning(
                f"Checkout lock {key} was not held by this token",
                extra={"user_id": user_id, "operation": "release_checkout_lock"},
            )
        return released
