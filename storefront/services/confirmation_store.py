# storefront/services/confirmation_store.py
import redis

from storefront.domain.payment import PaymentConfirmation
from storefront.utils.retry import redis_retry
from storefront.utils.settings import REDIS_URL, PAYMENT_SESSION_TTL_SECONDS
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class ConfirmationStore:
    """
    Keeps the in-progress payment confirmation per order in redis.
    Sessions expire on their own, a user who walks away leaves only the pending order behind.
    """

    def __init__(
        self,
        url: str | None = None,
        client: redis.Redis | None = None,
        ttl: int = PAYMENT_SESSION_TTL_SECONDS,
    ):
        self.redis = client or redis.Redis.from_url(
            url or REDIS_URL,
            decode_responses=True,
        )
        self.ttl = ttl

    @staticmethod
    def _key(order_id: int) -> str:
        return f"payment:{order_id}:confirmation"

    @redis_retry()
    def load(self, order_id: int) -> PaymentConfirmation | None:
        raw = self.redis.get(self._key(order_id))
        if raw is None:
            return None
        return PaymentConfirmation.model_validate_json(raw)

    @redis_retry()
    def save(self, session: PaymentConfirmation) -> None:
        key = self._key(session.order_id)
        logger.info(f"Save {key} state={session.state.value}")
        self.redis.set(name=key, value=session.model_dump_json(), ex=self.ttl)

    @redis_retry()
    def delete(self, order_id: int) -> None:
        self.redis.delete(self._key(order_id))
