import pytest

from errors import (
    BatchImportError, DuplicateNameError, NotFoundError, ParseError, PreconditionError, ScoringError,
    SessionClosedError, SubmissionError, ValidationError
)


@pytest.mark.parametrize('error_class,status_code', [
    (ValidationError, 400),
    (ParseError, 400),
    (PreconditionError, 400),
    (SessionClosedError, 403),
    (NotFoundError, 404),
    (DuplicateNameError, 409),
    (SubmissionError, 500),
    (BatchImportError, 500),
])
def test_status_codes(error_class, status_code):
    error = error_class('boom')
    assert isinstance(error, ScoringError)
    assert error.status_code == status_code
    assert error.to_dict() == {'success': False, 'message': 'boom'}


def test_status_code_override():
    assert ValidationError('bad', status_code=422).status_code == 422
    assert ValidationError('bad').status_code == 400
