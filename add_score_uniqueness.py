"""
Migration script to add the one-score-per-judge-per-item index to the score table.
Run this on databases created before score sheets were upserted; duplicate
rows are collapsed to the most recent one first.
"""

from sqlalchemy import inspect, text
from sqlalchemy.exc import SQLAlchemyError

from app import app, db

SHEET_COLUMNS = {'contestant_id', 'rubric_item_id', 'judge_id'}

def has_sheet_constraint():
    inspector = inspect(db.engine)
    for constraint in inspector.get_unique_constraints('score'):
        if set(constraint['column_names']) == SHEET_COLUMNS:
            return True
    for index in inspector.get_indexes('score'):
        if index['unique'] and set(index['column_names']) == SHEET_COLUMNS:
            return True
    return False

def migrate():
    with app.app_context():
        if has_sheet_constraint():
            print("✓ Score uniqueness already enforced. No migration needed.")
            return False

        print("Removing duplicate score rows...")
        try:
            removed = db.session.execute(text(
                "DELETE FROM score WHERE id NOT IN ("
                "SELECT MAX(id) FROM score GROUP BY contestant_id, rubric_item_id, judge_id)"
            )).rowcount
            db.session.execute(text(
                "CREATE UNIQUE INDEX uq_score_sheet_entry "
                "ON score (contestant_id, rubric_item_id, judge_id)"
            ))
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            print(f"Error during migration: {e}")
            raise
        print(f"✓ Index added successfully! {removed} duplicate rows removed.")
        return True

if __name__ == '__main__':
    migrate()
