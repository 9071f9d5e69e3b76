"""Bulk imports of rubric sets and contestants.

Spreadsheets are read elsewhere; these adapters take rows that were already
parsed, or a plain headerless CSV payload, and write them in one transaction.
Rows without the required fields are skipped and reported back, they never
abort the batch. Any failure while writing rolls the whole import back.
"""
import csv
from dataclasses import dataclass, field
from io import StringIO

from flask import current_app

from app import db
from errors import BatchImportError, ParseError, ValidationError
from events import log_event
from models import Contestant, RubricItem, RubricSet
from roster import is_blank, parse_max_score

RUBRIC_COLUMNS = ['setName', 'itemName', 'description', 'maxScore']
CONTESTANT_COLUMNS = ['name', 'info']


@dataclass
class SkippedRow:
    row_number: int
    reason: str


@dataclass
class ImportReport:
    processed: int = 0
    imported: int = 0
    skipped: list = field(default_factory=list)

    def skip(self, row_number, reason):
        self.skipped.append(SkippedRow(row_number, reason))

    def to_dict(self):
        return {
            'count': self.processed,
            'imported': self.imported,
            'skipped': [{'row': row.row_number, 'reason': row.reason} for row in self.skipped]
        }


def _first(row, *keys):
    for key in keys:
        value = row.get(key)
        if value is not None:
            return value
    return None

def _read_payload(payload):
    if hasattr(payload, 'read'):
        payload = payload.read()
    if isinstance(payload, bytes):
        try:
            payload = payload.decode('utf-8-sig')
        except UnicodeDecodeError as exc:
            raise ParseError('The import file is not UTF-8 encoded CSV.') from exc
    if not isinstance(payload, str):
        raise ParseError('The import file could not be read.')
    return payload.lstrip('\ufeff')

def parse_rows(payload, columns):
    """Read a headerless CSV payload into dicts keyed by ``columns``.

    A leading row that just repeats the column names is dropped.
    """
    text = _read_payload(payload)
    if not text.strip():
        raise ParseError('The import file is empty.')

    try:
        records = list(csv.reader(StringIO(text), strict=True))
    except csv.Error as exc:
        raise ParseError(f'Could not parse the import file: {exc}') from exc

    header = [column.lower() for column in columns]
    if records and [cell.strip().lower() for cell in records[0][:len(columns)]] == header:
        records = records[1:]

    rows = []
    for record in records:
        if not any(cell.strip() for cell in record):
            continue
        if len(record) > len(columns):
            raise ParseError(f'Expected at most {len(columns)} columns, found {len(record)}.')
        cells = [cell.strip() or None for cell in record]
        cells += [None] * (len(columns) - len(cells))
        rows.append(dict(zip(columns, cells)))
    return rows

def parse_rubric_rows(payload):
    return parse_rows(payload, RUBRIC_COLUMNS)

def parse_contestant_rows(payload):
    return parse_rows(payload, CONTESTANT_COLUMNS)

def import_rubric_sets(rows):
    report = ImportReport()
    set_ids = {}

    def resolve_set_id(name):
        if name in set_ids:
            return set_ids[name]
        rubric_set = RubricSet.query.filter_by(name=name).first()
        if rubric_set is None:
            rubric_set = RubricSet(name=name)
            db.session.add(rubric_set)
            db.session.flush()
        set_ids[name] = rubric_set.id
        return rubric_set.id

    try:
        for row_number, row in enumerate(rows, 1):
            report.processed += 1
            set_name = _first(row, 'setName', 'set_name')
            item_name = _first(row, 'itemName', 'item_name')
            max_score = _first(row, 'maxScore', 'max_score')
            if is_blank(set_name) or is_blank(item_name) or not max_score:
                report.skip(row_number, 'set name, item name and max score are required')
                continue
            try:
                max_score = parse_max_score(max_score)
            except ValidationError as exc:
                report.skip(row_number, exc.message)
                continue

            db.session.add(RubricItem(
                rubric_set_id=resolve_set_id(str(set_name).strip()),
                name=str(item_name).strip(),
                description=row.get('description') or '',
                max_score=max_score
            ))
            report.imported += 1
        db.session.commit()
    except Exception as exc:
        db.session.rollback()
        current_app.logger.error('Rubric import rolled back at row %s: %s', report.processed, exc)
        raise BatchImportError('Import failed, please check the file contents.') from exc

    current_app.logger.info('Rubric import processed %s rows, %s items added, %s skipped',
                            report.processed, report.imported, len(report.skipped))
    log_event('rubric_import', f'rows={report.processed} items={report.imported} sets={len(set_ids)}')
    return report

def import_contestants(rows):
    report = ImportReport()

    try:
        for row_number, row in enumerate(rows, 1):
            report.processed += 1
            name = row.get('name')
            if is_blank(name):
                report.skip(row_number, 'contestant name is blank')
                continue
            db.session.add(Contestant(name=str(name).strip(), info=row.get('info') or ''))
            report.imported += 1
        db.session.commit()
    except Exception as exc:
        db.session.rollback()
        current_app.logger.error('Contestant import rolled back: %s', exc)
        raise BatchImportError('Import failed, please check the file contents.') from exc

    current_app.logger.info('Contestant import processed %s rows, %s added', report.processed, report.imported)
    log_event('contestant_import', f'rows={report.processed} contestants={report.imported}')
    return report

def import_rubric_file(payload):
    return import_rubric_sets(parse_rubric_rows(payload))

def import_contestant_file(payload):
    return import_contestants(parse_contestant_rows(payload))
