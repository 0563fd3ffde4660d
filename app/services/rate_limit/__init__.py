from __future__ import annotations
from typing import Iterator, Optional

import redis
from fastapi import Depends, Request

from app.connections.redis import get_redis
from app.schemas import Identity
from app.services.auth import get_current_identity
from app.services.errors import Conflict, RateLimited
from app.utils.config import settings


def limit_route(seconds: int):
    """Return a FastAPI dependency that rate-limits a user on a route for N seconds.

    Uses a Redis TTL key per user and path. The window only starts once the
    route has completed successfully, so rejected requests can be retried
    right away. A window of 0 disables the limit.
    """

    def _dependency(request: Request, identity: Identity = Depends(get_current_identity)) -> Iterator[None]:
        if seconds <= 0:
            yield
            return
        client = get_redis()
        key = f"rl:{identity.user_id}:{request.url.path}"

        # If a TTL exists, the user must wait
        ttl = client.ttl(key)
        if ttl and ttl > 0:
            raise RateLimited(f"Rate limited. Try again in {ttl}s")
        # Endpoint errors are raised at the yield and skip the window
        yield
        client.setex(name=key, time=seconds, value="1")

    return _dependency


create_test_rate_limit = limit_route(settings.create_test_rate_limit_seconds)


class SubmissionGuard:
    """Redis marker of recently accepted (student, test) pairs.

    A repeat submission for a marked pair is answered with the same `Conflict`
    the ledger would give, without a datastore round-trip. The datastore
    stays authoritative: an unmarked pair always goes through the ledger.
    """

    def __init__(self, seconds: int, client: Optional[redis.Redis] = None):
        self.seconds = seconds
        self.client = client

    def _key(self, identity: Identity, test_id: int) -> str:
        return f"submitted:{identity.user_id}:{test_id}"

    def _redis(self) -> redis.Redis:
        return self.client if self.client is not None else get_redis()

    def check(self, identity: Identity, test_id: int) -> None:
        if self.seconds <= 0:
            return
        if self._redis().exists(self._key(identity, test_id)):
            raise Conflict()

    def record(self, identity: Identity, test_id: int) -> None:
        if self.seconds <= 0:
            return
        self._redis().setex(name=self._key(identity, test_id), time=self.seconds, value="1")


def get_submission_guard() -> SubmissionGuard:
    return SubmissionGuard(settings.recent_submission_seconds)
