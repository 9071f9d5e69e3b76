from flask import current_app
from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError

from app import db, socketio
from models import AuditLog

def log_event(action, details=None, actor=None):
    try:
        entry = AuditLog(
            actor=str(actor) if actor else 'admin',
            action=action,
            details=details
        )
        db.session.add(entry)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception('Could not write audit entry %s', action)

def emit_realtime_update(event_name, payload=None):
    try:
        socketio.emit(event_name, payload or {})
    except Exception:
        current_app.logger.warning('Realtime update %s was not delivered', event_name, exc_info=True)

def build_log_query(actor=None, action=None, search=None):
    query = AuditLog.query

    if actor:
        query = query.filter(AuditLog.actor == actor)
    if action:
        query = query.filter(AuditLog.action == action)
    if search:
        like_term = f"%{search}%"
        query = query.filter(or_(
            AuditLog.actor.ilike(like_term),
            AuditLog.action.ilike(like_term),
            AuditLog.details.ilike(like_term)
        ))

    return query

def recent_audit_entries(limit=200, **filters):
    return build_log_query(**filters).order_by(AuditLog.created_at.desc(), AuditLog.id.desc()).limit(limit).all()
