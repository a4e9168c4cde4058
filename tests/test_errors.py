"""Tests for the error envelope."""

from traveltrek.errors import ConflictError, RateLimitedError, TravelTrekError


def test_extra_fields_follow_the_message():
    error = ConflictError("You already have a pending membership request.", membership={"id": "m-1"})

    assert error.status_code == 400
    assert error.to_dict() == {
        "error": "You already have a pending membership request.",
        "membership": {"id": "m-1"},
    }


def test_message_is_accepted_as_an_extra_field():
    error = RateLimitedError("Rate limit exceeded", message="Please wait 5 seconds", retry_after_seconds=5)

    assert error.status_code == 429
    assert error.to_dict() == {
        "error": "Rate limit exceeded",
        "message": "Please wait 5 seconds",
        "retry_after_seconds": 5,
    }


def test_base_error_is_a_server_error():
    assert TravelTrekError("boom").status_code == 500
