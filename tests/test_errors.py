import pytest

from bookstore.errors import BookstoreError, Conflict, Internal, NotFound, ValidationError, status_for


@pytest.mark.parametrize(
    "error, expected",
    [
        (ValidationError(), 400),
        (NotFound("1234"), 404),
        (Conflict("1234"), 500),
        (Internal(), 500),
        (BookstoreError(), 500),
    ],
)
def test_status_mapping(error, expected):
    assert status_for(error) == expected


def test_subclasses_inherit_mapping():
    class MissingIsbn(NotFound):
        pass

    assert status_for(MissingIsbn("1")) == 404


def test_payload_includes_details_only_when_present():
    assert NotFound("1").to_payload(404) == {
        "error": {"message": "There is no book with an isbn of '1'", "status": 404}
    }
    details = [{"field": "pages", "type": "greater_than_equal", "message": "too small"}]
    payload = ValidationError(details=details).to_payload(400)
    assert payload["error"]["details"] == details
    assert payload["error"]["message"] == "Invalid book payload"
