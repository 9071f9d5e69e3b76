"""Live scoring session: which rubric set is in force and who is being scored.

The state lives in memory only, so a restart always comes back with nothing
active. Operations that depend on it take a ``LiveSession`` explicitly; the
request layer shares the process-wide ``live_session`` instance.
"""
from datetime import datetime

from flask import current_app

from errors import NotFoundError, PreconditionError
from events import emit_realtime_update, log_event
from models import RubricItem
from roster import get_contestant, get_rubric_set, parse_id


class LiveSession:

    def __init__(self):
        self.active_rubric_set_id = None
        self.active_contestant_id = None
        self.active_set_at = None
        self.scoring_started_at = None

    def activate_rubric_set(self, set_id):
        rubric_set = get_rubric_set(set_id)
        self.active_rubric_set_id = rubric_set.id
        self.active_set_at = datetime.utcnow()

        current_app.logger.info('Active rubric set switched to %s (%s)', rubric_set.id, rubric_set.name)
        log_event('rubric_set_activated', f'rubric_set_id={rubric_set.id} name={rubric_set.name}')
        emit_realtime_update('live_update', self.snapshot())
        return {'success': True, 'message': f'Rubric set "{rubric_set.name}" is now active.',
                'rubric_set_id': rubric_set.id}

    def start_scoring(self, contestant_id):
        if self.active_rubric_set_id is None:
            raise PreconditionError('Activate a rubric set before starting to score.')

        contestant_id = parse_id(contestant_id, 'contestant id')
        previous = self.active_contestant_id
        self.active_contestant_id = contestant_id
        self.scoring_started_at = datetime.utcnow()

        if previous is not None and previous != contestant_id:
            current_app.logger.info('Scoring moved from contestant %s to %s', previous, contestant_id)
        current_app.logger.info('Scoring opened for contestant %s with rubric set %s',
                                contestant_id, self.active_rubric_set_id)
        log_event('scoring_started', f'contestant_id={contestant_id} rubric_set_id={self.active_rubric_set_id}')
        emit_realtime_update('live_update', self.snapshot())
        return {'success': True, 'message': f'Scoring is open for contestant {contestant_id}.',
                'contestant_id': contestant_id}

    def stop_scoring(self):
        self.active_contestant_id = None
        self.scoring_started_at = None

        current_app.logger.info('Scoring stopped')
        log_event('scoring_stopped')
        emit_realtime_update('live_update', self.snapshot())
        return {'success': True, 'message': 'Scoring is closed.'}

    def get_current(self):
        if self.active_contestant_id is None or self.active_rubric_set_id is None:
            return {'contestant': None, 'rubric_items': []}

        try:
            contestant = get_contestant(self.active_contestant_id)
        except NotFoundError:
            current_app.logger.warning('Active contestant %s no longer exists', self.active_contestant_id)
            raise
        items = RubricItem.query.filter_by(rubric_set_id=self.active_rubric_set_id) \
            .order_by(RubricItem.id.asc()).all()
        return {'contestant': contestant, 'rubric_items': items}

    def is_open_for(self, contestant_id):
        if self.active_contestant_id is None or contestant_id is None:
            return False
        return str(contestant_id).strip() == str(self.active_contestant_id)

    def snapshot(self):
        return {
            'active_rubric_set_id': self.active_rubric_set_id,
            'active_contestant_id': self.active_contestant_id,
            'active_set_at': self.active_set_at.isoformat() if self.active_set_at else None,
            'scoring_started_at': self.scoring_started_at.isoformat() if self.scoring_started_at else None,
        }


live_session = LiveSession()
