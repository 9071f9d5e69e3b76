"""Live session controller tests."""

import pytest

from errors import NotFoundError, PreconditionError, ValidationError
from live import LiveSession, live_session
from roster import create_contestant, delete_contestant, delete_rubric_set


def test_starts_with_nothing_active():
    session = LiveSession()
    assert session.snapshot() == {
        'active_rubric_set_id': None, 'active_contestant_id': None,
        'active_set_at': None, 'scoring_started_at': None,
    }


def test_process_wide_session_exists():
    assert isinstance(live_session, LiveSession)


def test_start_requires_active_rubric_set(live, contestant_id):
    with pytest.raises(PreconditionError):
        live.start_scoring(contestant_id)
    assert live.active_contestant_id is None


def test_start_succeeds_after_activation(live, rubric, contestant_id):
    live.activate_rubric_set(rubric[0])
    result = live.start_scoring(contestant_id)

    assert result['success'] is True
    snapshot = live.snapshot()
    assert snapshot['active_rubric_set_id'] == rubric[0]
    assert snapshot['active_contestant_id'] == contestant_id
    assert snapshot['active_set_at'] == live.active_set_at.isoformat()
    assert snapshot['scoring_started_at'] == live.scoring_started_at.isoformat()


def test_activation_of_unknown_set(live):
    with pytest.raises(NotFoundError):
        live.activate_rubric_set(404)
    assert live.active_rubric_set_id is None


def test_activation_with_malformed_id(live):
    with pytest.raises(ValidationError):
        live.activate_rubric_set('round-one')


def test_activation_accepts_numeric_string(live, rubric):
    live.activate_rubric_set(str(rubric[0]))
    assert live.active_rubric_set_id == rubric[0]


def test_start_overwrites_previous_contestant(open_session):
    bob_id = create_contestant('Bob').id
    open_session.start_scoring(bob_id)
    assert open_session.active_contestant_id == bob_id


def test_stop_keeps_rubric_set(open_session, rubric):
    result = open_session.stop_scoring()

    assert result['success'] is True
    assert open_session.active_contestant_id is None
    assert open_session.active_rubric_set_id == rubric[0]
    assert open_session.snapshot()['scoring_started_at'] is None
    assert open_session.snapshot()['active_set_at'] is not None


def test_stop_when_idle(live):
    live.stop_scoring()
    assert live.active_contestant_id is None


def test_current_when_idle(live, rubric):
    assert live.get_current() == {'contestant': None, 'rubric_items': []}
    live.activate_rubric_set(rubric[0])
    assert live.get_current() == {'contestant': None, 'rubric_items': []}


def test_current_contestant_and_items(open_session, rubric, contestant_id):
    current = open_session.get_current()

    assert current['contestant'].id == contestant_id
    assert current['contestant'].name == 'Alice'
    assert [item.id for item in current['rubric_items']] == rubric[1]


def test_current_with_deleted_contestant(open_session, contestant_id):
    delete_contestant(contestant_id)
    with pytest.raises(NotFoundError):
        open_session.get_current()


def test_current_after_active_set_deleted(open_session, rubric):
    delete_rubric_set(rubric[0])
    assert open_session.get_current()['rubric_items'] == []


def test_is_open_for(open_session, contestant_id):
    assert open_session.is_open_for(contestant_id)
    assert open_session.is_open_for(str(contestant_id))
    assert not open_session.is_open_for(contestant_id + 1)
    assert not open_session.is_open_for(None)
