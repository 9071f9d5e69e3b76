from datetime import datetime

from app import app, db, DEFAULT_MAX_SCORE

# Models
class Contestant(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False)
    info = db.Column(db.Text, nullable=True, default='')
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    scores = db.relationship('Score', backref='contestant', lazy=True, cascade='all, delete-orphan')

class RubricSet(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), unique=True, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    items = db.relationship('RubricItem', backref='rubric_set', lazy=True, cascade='all, delete-orphan',
                            order_by='RubricItem.id')

class RubricItem(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    rubric_set_id = db.Column(db.Integer, db.ForeignKey('rubric_set.id', ondelete='CASCADE'), nullable=False)
    name = db.Column(db.String(100), nullable=False)
    description = db.Column(db.Text, nullable=True, default='')
    max_score = db.Column(db.Integer, nullable=False, default=DEFAULT_MAX_SCORE)
    scores = db.relationship('Score', backref='rubric_item', lazy=True, cascade='all, delete-orphan')

class Score(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    contestant_id = db.Column(db.Integer, db.ForeignKey('contestant.id', ondelete='CASCADE'), nullable=False)
    rubric_item_id = db.Column(db.Integer, db.ForeignKey('rubric_item.id', ondelete='CASCADE'), nullable=False)
    judge_id = db.Column(db.String(80), nullable=False)
    value = db.Column(db.Integer, nullable=False)
    submitted_at = db.Column(db.DateTime, default=datetime.utcnow)

    __table_args__ = (
        db.UniqueConstraint('contestant_id', 'rubric_item_id', 'judge_id', name='uq_score_sheet_entry'),
    )

class AuditLog(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    actor = db.Column(db.String(80), nullable=False, default='admin')
    action = db.Column(db.String(120), nullable=False)
    details = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

class Settings(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    competition_title = db.Column(db.String(200), nullable=False, default='Live Scoring')
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


def get_settings():
    settings = Settings.query.first()
    if not settings:
        settings = Settings(competition_title=app.config['COMPETITION_TITLE'])
        db.session.add(settings)
        db.session.commit()
    return settings

def init_db():
    db.create_all()
    get_settings()
