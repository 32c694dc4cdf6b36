import logging
import secrets
import argon2
import argon2.exceptions
import tracker_auth.config

logger = logging.getLogger(__name__)


class PasswordHasher:
    """Argon2id password verifiers in PHC string form.

    The verifier carries the algorithm tag, cost parameters, salt and derived
    key, so ``verify`` needs nothing but the stored string.
    """

    def __init__(self, time_cost: int, memory_cost: int, parallelism: int):
        self._hasher = argon2.PasswordHasher(
            time_cost=time_cost,
            memory_cost=memory_cost,
            parallelism=parallelism,
            type=argon2.Type.ID
        )
        self._dummy_verifier = self._hasher.hash(secrets.token_urlsafe(32))

    @classmethod
    def from_settings(cls, settings: tracker_auth.config.Settings) -> "PasswordHasher":
        return cls(
            time_cost=settings.argon2_time_cost,
            memory_cost=settings.argon2_memory_cost,
            parallelism=settings.argon2_parallelism
        )

    def hash(self, password: str) -> str:
        return self._hasher.hash(password)

    def verify(self, password: str, verifier: str) -> bool:
        if not verifier:
            return False
        try:
            return self._hasher.verify(verifier, password)
        except argon2.exceptions.VerifyMismatchError:
            return False
        except (argon2.exceptions.VerificationError, argon2.exceptions.InvalidHashError) as e:
            logger.warning(f"Unusable password verifier: {e}")
            return False

    def verify_dummy(self, password: str) -> bool:
        """Spend the same KDF work as ``verify`` when there is no account.

        Keeps login latency independent of whether the email is registered.
        Always returns ``False``.
        """
        self.verify(password, self._dummy_verifier)
        return False
