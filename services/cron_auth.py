"""
Cron endpoint authorization.

The outcome of comparing the configured CRON_SECRET with what a caller sent
is one of four cases; ``is_allowed`` decides which of them pass. The default
(lenient) policy only rejects a caller that sends the wrong secret. Strict
mode (CRON_REQUIRE_SECRET) only accepts a caller that sends the right one.
"""
import enum
import hmac


class CronAuthOutcome(str, enum.Enum):
    NO_SECRET_CONFIGURED = "no_secret_configured"
    NO_CREDENTIALS = "no_credentials"
    MATCH = "match"
    MISMATCH = "mismatch"


def extract_credentials(query_secret: str | None, authorization: str | None) -> str | None:
    if query_secret:
        return query_secret
    if authorization:
        parts = authorization.split(" ", 1)
        if len(parts) == 2 and parts[0].lower() == "bearer":
            return parts[1].strip() or None
        return authorization.strip() or None
    return None


def evaluate(configured: str | None, supplied: str | None) -> CronAuthOutcome:
    if not configured:
        return CronAuthOutcome.NO_SECRET_CONFIGURED
    if not supplied:
        return CronAuthOutcome.NO_CREDENTIALS
    if hmac.compare_digest(configured.encode(), supplied.encode()):
        return CronAuthOutcome.MATCH
    return CronAuthOutcome.MISMATCH


def is_allowed(outcome: CronAuthOutcome, strict: bool = False) -> bool:
    if strict:
        return outcome is CronAuthOutcome.MATCH
    return outcome is not CronAuthOutcome.MISMATCH
