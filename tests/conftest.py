"""Shared fixtures: an in-memory database per test and a fresh live session."""

import os

os.environ['DATABASE_URL'] = 'sqlite://'

import pytest

from app import app as flask_app, db
from live import LiveSession
from models import init_db
from roster import create_contestant, create_rubric_item, create_rubric_set


@pytest.fixture
def app():
    flask_app.config['TESTING'] = True
    with flask_app.app_context():
        init_db()
        yield flask_app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def live(app):
    return LiveSession()


@pytest.fixture
def rubric(app):
    """Round1 with two items, returned as ``(set_id, [style_id, technique_id])``."""
    rubric_set = create_rubric_set('Round1')
    style = create_rubric_item(rubric_set.id, 'Style', 'Overall presentation', 10)
    technique = create_rubric_item(rubric_set.id, 'Technique', None, 10)
    return rubric_set.id, [style.id, technique.id]


@pytest.fixture
def contestant_id(app):
    return create_contestant('Alice', 'Team Blue').id


@pytest.fixture
def open_session(live, rubric, contestant_id):
    """A live session scoring ``contestant_id`` against the Round1 rubric."""
    live.activate_rubric_set(rubric[0])
    live.start_scoring(contestant_id)
    return live
