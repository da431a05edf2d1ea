"""Authorization context passed into every core operation."""

import logging
from dataclasses import dataclass
from typing import Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthContext:
    """Identity of the caller, as forwarded by the gateway.

    There is no ownership model yet: every caller may read and write every
    collection. Operations still call ``authorize_collection`` so that one can
    be added here without changing their signatures.
    """
    user_id: Optional[str] = None

    def authorize_collection(self, collection_id: int) -> None:
        logger.debug(f"User {self.user_id} granted access to collection {collection_id}")


SYSTEM_CONTEXT = AuthContext(user_id="system")
