import pytest

from services.cron_auth import CronAuthOutcome, evaluate, extract_credentials, is_allowed


@pytest.mark.parametrize("configured, supplied, outcome", [
    (None, None, CronAuthOutcome.NO_SECRET_CONFIGURED),
    (None, "anything", CronAuthOutcome.NO_SECRET_CONFIGURED),
    ("s3cret", None, CronAuthOutcome.NO_CREDENTIALS),
    ("s3cret", "s3cret", CronAuthOutcome.MATCH),
    ("s3cret", "guess", CronAuthOutcome.MISMATCH),
])
def test_evaluate(configured, supplied, outcome):
    assert evaluate(configured, supplied) is outcome


@pytest.mark.parametrize("outcome, lenient, strict", [
    (CronAuthOutcome.NO_SECRET_CONFIGURED, True, False),
    (CronAuthOutcome.NO_CREDENTIALS, True, False),
    (CronAuthOutcome.MATCH, True, True),
    (CronAuthOutcome.MISMATCH, False, False),
])
def test_policy(outcome, lenient, strict):
    assert is_allowed(outcome) is lenient
    assert is_allowed(outcome, strict=True) is strict


def test_extract_credentials():
    assert extract_credentials("from-query", "Bearer from-header") == "from-query"
    assert extract_credentials(None, "Bearer abc") == "abc"
    assert extract_credentials(None, "bearer abc") == "abc"
    assert extract_credentials(None, "abc") == "abc"
    assert extract_credentials(None, "Bearer ") is None
    assert extract_credentials(None, None) is None
