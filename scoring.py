from collections.abc import Mapping
from datetime import datetime

from flask import current_app
from sqlalchemy import func, insert
from sqlalchemy.dialects import postgresql, sqlite

from app import db
from errors import SessionClosedError, SubmissionError, ValidationError
from events import emit_realtime_update, log_event
from models import Contestant, Score
from roster import INTEGER_LIMIT, is_blank, parse_id

SHEET_KEY = ('contestant_id', 'rubric_item_id', 'judge_id')

UPSERT_INSERTS = {
    'sqlite': sqlite.insert,
    'postgresql': postgresql.insert,
}

def parse_score_value(value):
    if value is None or isinstance(value, bool):
        raise ValidationError('Every score needs a value.')
    if isinstance(value, float):
        if not value.is_integer():
            raise ValidationError(f'Score {value} must be a whole number.')
        value = int(value)
    try:
        score = int(str(value).strip())
    except (TypeError, ValueError):
        raise ValidationError(f'Invalid score value: {value!r}.')
    if score < 0:
        raise ValidationError('Scores cannot be negative.')
    if score > INTEGER_LIMIT:
        raise ValidationError(f'Score {score} is out of range.')
    return score

def normalize_sheet(items):
    """Turn submitted items into ``(rubric_item_id, value)`` pairs.

    Items may be pairs or mappings using either ``rubric_item_id``/``value``
    or the ``itemId``/``score`` keys sent by judge screens.
    """
    entries = []
    seen = set()
    for entry in items:
        if isinstance(entry, Mapping):
            item_id = entry.get('rubric_item_id', entry.get('itemId'))
            value = entry.get('value', entry.get('score'))
        else:
            try:
                item_id, value = entry
            except (TypeError, ValueError):
                raise ValidationError('Each score must name a rubric item and a value.')

        item_id = parse_id(item_id, 'rubric item id')
        if item_id in seen:
            raise ValidationError(f'Rubric item {item_id} is scored more than once.')
        seen.add(item_id)
        entries.append((item_id, parse_score_value(value)))
    return entries

def _write_sheet(contestant_id, judge_id, entries):
    item_ids = [item_id for item_id, _ in entries]
    sheet = Score.query.filter(Score.contestant_id == contestant_id, Score.judge_id == judge_id)
    submitted_at = datetime.utcnow()
    rows = [
        {
            'contestant_id': contestant_id,
            'rubric_item_id': item_id,
            'judge_id': judge_id,
            'value': value,
            'submitted_at': submitted_at
        }
        for item_id, value in entries
    ]

    dialect_insert = UPSERT_INSERTS.get(db.engine.dialect.name)
    if dialect_insert is None:
        sheet.delete(synchronize_session=False)
        db.session.execute(insert(Score), rows)
        return

    # Items dropped from the sheet go; the rest are upserted on the sheet key
    sheet.filter(Score.rubric_item_id.not_in(item_ids)).delete(synchronize_session=False)
    stmt = dialect_insert(Score).values(rows)
    stmt = stmt.on_conflict_do_update(
        index_elements=list(SHEET_KEY),
        set_={'value': stmt.excluded['value'], 'submitted_at': stmt.excluded['submitted_at']}
    )
    db.session.execute(stmt)

def submit_scores(live, contestant_id, judge_id, items):
    """Store one judge's full score sheet for the contestant being scored.

    The new sheet replaces anything the judge submitted earlier for the same
    contestant. Either the whole sheet is stored or nothing changes.
    """
    if not items or is_blank(judge_id) or is_blank(contestant_id):
        raise ValidationError('A contestant, a judge and at least one score are required.')
    entries = normalize_sheet(items)
    judge_id = str(judge_id).strip()

    if not live.is_open_for(contestant_id):
        raise SessionClosedError('Scoring is closed for this contestant.')
    contestant_id = parse_id(contestant_id, 'contestant id')

    try:
        _write_sheet(contestant_id, judge_id, entries)
        db.session.commit()
    except Exception as exc:
        # Driver errors such as OverflowError are not wrapped by SQLAlchemy
        db.session.rollback()
        current_app.logger.error('Score sheet from judge %s for contestant %s rolled back: %s',
                                 judge_id, contestant_id, exc)
        raise SubmissionError('Scores could not be saved, please try again.') from exc

    current_app.logger.info('Judge %s submitted %s scores for contestant %s', judge_id, len(entries), contestant_id)
    log_event(
        'scores_submitted',
        f'contestant_id={contestant_id} judge_id={judge_id} scores_count={len(entries)}',
        actor=judge_id
    )
    emit_realtime_update('scores_update', {'contestant_id': contestant_id})
    return {'success': True, 'message': 'Scores saved successfully', 'scores_count': len(entries)}

def get_score_sheet(contestant_id, judge_id):
    return Score.query.filter_by(
        contestant_id=parse_id(contestant_id, 'contestant id'),
        judge_id=str(judge_id).strip()
    ).order_by(Score.rubric_item_id.asc()).all()

def compute_results():
    judge_count = func.count(func.distinct(Score.judge_id))
    total_score = func.coalesce(func.sum(Score.value), 0)

    rows = db.session.query(Contestant, judge_count, total_score) \
        .outerjoin(Score, Score.contestant_id == Contestant.id) \
        .group_by(Contestant.id) \
        .order_by(total_score.desc(), Contestant.id.asc()) \
        .all()

    results = []
    for rank, (contestant, judges, total) in enumerate(rows, 1):
        total = int(total or 0)
        results.append({
            'rank': rank,
            'id': contestant.id,
            'name': contestant.name,
            'info': contestant.info or '',
            'judge_count': judges,
            'total_score': total,
            'final_average': round(total / judges, 2) if judges > 0 else 0
        })
    return results

def reset_contestant(contestant_id):
    if is_blank(contestant_id):
        raise ValidationError('A contestant id is required.')
    contestant_id = parse_id(contestant_id, 'contestant id')

    deleted_count = Score.query.filter_by(contestant_id=contestant_id).delete(synchronize_session=False)
    db.session.commit()

    if deleted_count == 0:
        current_app.logger.info('Reset requested for contestant %s, who has no scores', contestant_id)
    else:
        current_app.logger.info('Reset %s scores for contestant %s', deleted_count, contestant_id)
        log_event('scores_reset', f'contestant_id={contestant_id} deleted_count={deleted_count}')
        emit_realtime_update('scores_update', {'contestant_id': contestant_id, 'reset': True})
    return {'success': True, 'deleted_count': deleted_count}
