"""Audit trail and realtime broadcast tests."""

from app import socketio
from events import log_event, recent_audit_entries
from models import AuditLog
from scoring import reset_contestant, submit_scores


def test_log_event(app):
    log_event('scores_reset', 'contestant_id=4 deleted_count=2', actor='judge7')

    entry = AuditLog.query.one()
    assert (entry.actor, entry.action, entry.details) == ('judge7', 'scores_reset', 'contestant_id=4 deleted_count=2')
    assert entry.created_at is not None


def test_log_event_defaults_to_admin(app):
    log_event('scoring_stopped')
    assert AuditLog.query.one().actor == 'admin'


def test_live_actions_are_audited(open_session, rubric, contestant_id):
    submit_scores(open_session, contestant_id, 'judge1', [(rubric[1][0], 8)])
    open_session.stop_scoring()

    actions = [entry.action for entry in recent_audit_entries()]
    assert actions == ['scoring_stopped', 'scores_submitted', 'scoring_started', 'rubric_set_activated']

    submitted = recent_audit_entries(action='scores_submitted')[0]
    assert submitted.actor == 'judge1'
    assert f'contestant_id={contestant_id}' in submitted.details


def test_audit_filters(app):
    log_event('scores_submitted', 'contestant_id=1', actor='judge1')
    log_event('scores_submitted', 'contestant_id=2', actor='judge2')
    log_event('scoring_stopped')

    assert len(recent_audit_entries(actor='judge2')) == 1
    assert len(recent_audit_entries(search='contestant_id=1')) == 1
    assert len(recent_audit_entries(limit=2)) == 2


def test_empty_reset_is_not_audited(contestant_id):
    reset_contestant(contestant_id)
    assert recent_audit_entries(action='scores_reset') == []


def test_live_changes_are_broadcast(app, live, rubric, contestant_id):
    client = socketio.test_client(app)
    client.get_received()

    live.activate_rubric_set(rubric[0])
    live.start_scoring(contestant_id)
    submit_scores(live, contestant_id, 'judge1', [(rubric[1][0], 8)])

    received = client.get_received()
    assert [message['name'] for message in received] == ['live_update', 'live_update', 'scores_update']
    assert received[1]['args'][0] == live.snapshot()
    assert received[1]['args'][0]['active_contestant_id'] == contestant_id
    assert received[2]['args'][0] == {'contestant_id': contestant_id}
    client.disconnect()
