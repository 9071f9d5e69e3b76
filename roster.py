from flask import current_app
from sqlalchemy.exc import IntegrityError

from app import db
from errors import DuplicateNameError, NotFoundError, ValidationError
from models import Contestant, RubricItem, RubricSet

# Largest value a 32-bit INTEGER column holds
INTEGER_LIMIT = 2147483647

def parse_id(value, label='id'):
    """Return ``value`` as an integer id, accepting numeric strings."""
    if value is None or isinstance(value, bool):
        raise ValidationError(f'A {label} is required.')
    if isinstance(value, str):
        value = value.strip()
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f'Invalid {label}: {value!r}.')

def parse_max_score(value):
    if isinstance(value, bool):
        raise ValidationError('Max score must be a whole number.')
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    try:
        max_score = int(str(value).strip())
    except (TypeError, ValueError):
        raise ValidationError('Max score must be a whole number.')
    if max_score <= 0:
        raise ValidationError('Max score must be greater than zero.')
    if max_score > INTEGER_LIMIT:
        raise ValidationError(f'Max score cannot exceed {INTEGER_LIMIT}.')
    return max_score

def is_blank(value):
    return value is None or str(value).strip() == ''

# Contestants
def list_contestants():
    return Contestant.query.order_by(Contestant.id.asc()).all()

def get_contestant(contestant_id):
    contestant = db.session.get(Contestant, parse_id(contestant_id, 'contestant id'))
    if contestant is None:
        raise NotFoundError(f'Contestant {contestant_id} not found.')
    return contestant

def create_contestant(name, info=None):
    if is_blank(name):
        raise ValidationError('Contestant name is required.')
    contestant = Contestant(name=str(name).strip(), info=info or '')
    db.session.add(contestant)
    db.session.commit()
    current_app.logger.info('Contestant %s added: %s', contestant.id, contestant.name)
    return contestant

def update_contestant(contestant_id, name, info):
    if is_blank(name):
        raise ValidationError('Contestant name is required.')
    changes = Contestant.query.filter_by(id=parse_id(contestant_id, 'contestant id')).update(
        {'name': str(name).strip(), 'info': info or ''}
    )
    db.session.commit()
    return changes

def delete_contestant(contestant_id):
    contestant = db.session.get(Contestant, parse_id(contestant_id, 'contestant id'))
    if contestant is None:
        raise NotFoundError(f'Contestant {contestant_id} not found.')

    score_count = len(contestant.scores)
    db.session.delete(contestant)
    db.session.commit()
    if score_count:
        current_app.logger.warning('Deleted contestant %s who had %s scores', contestant_id, score_count)
    return 1

# Rubric sets
def list_rubric_sets():
    return RubricSet.query.order_by(RubricSet.id.asc()).all()

def get_rubric_set(set_id):
    rubric_set = db.session.get(RubricSet, parse_id(set_id, 'rubric set id'))
    if rubric_set is None:
        raise NotFoundError(f'Rubric set {set_id} not found.')
    return rubric_set

def create_rubric_set(name):
    if is_blank(name):
        raise ValidationError('A rubric set name is required.')
    rubric_set = RubricSet(name=str(name).strip())
    db.session.add(rubric_set)
    try:
        db.session.commit()
    except IntegrityError as exc:
        db.session.rollback()
        raise DuplicateNameError(f'Rubric set "{name}" already exists.') from exc
    return rubric_set

def delete_rubric_set(set_id):
    rubric_set = get_rubric_set(set_id)
    set_name = rubric_set.name
    db.session.delete(rubric_set)
    db.session.commit()
    current_app.logger.info('Rubric set "%s" deleted with its items', set_name)
    return 1

# Rubric items
def list_rubric_items(set_id):
    return RubricItem.query.filter_by(rubric_set_id=parse_id(set_id, 'rubric set id')) \
        .order_by(RubricItem.id.asc()).all()

def create_rubric_item(set_id, name, description=None, max_score=None):
    if is_blank(name) or not max_score:
        raise ValidationError('A rubric item name and max score are required.')
    max_score = parse_max_score(max_score)
    rubric_set = get_rubric_set(set_id)

    item = RubricItem(
        rubric_set_id=rubric_set.id,
        name=str(name).strip(),
        description=description or '',
        max_score=max_score
    )
    db.session.add(item)
    db.session.commit()
    return item

def update_rubric_item(item_id, name, description, max_score):
    if is_blank(name):
        raise ValidationError('A rubric item name is required.')
    values = {'name': str(name).strip(), 'description': description or ''}
    # a missing max score leaves the stored one in place
    if max_score is not None:
        values['max_score'] = parse_max_score(max_score)
    changes = RubricItem.query.filter_by(id=parse_id(item_id, 'rubric item id')).update(values)
    db.session.commit()
    return changes

def delete_rubric_item(item_id):
    item = db.session.get(RubricItem, parse_id(item_id, 'rubric item id'))
    if item is None:
        raise NotFoundError(f'Rubric item {item_id} not found.')
    db.session.delete(item)
    db.session.commit()
    return 1
