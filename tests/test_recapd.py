#!/usr/bin/env python3
# /// script
# requires-python = ">=3.11"
# dependencies = [
#     "pytest>=8.0.0",
#     "flask>=3.0.0",
#     "pyyaml>=6.0.0",
#     "requests>=2.31.0",
# ]
# ///
"""
Tests for recapd.py

Covers:
- Health check
- /extract and /overview request validation and output
- /weeks/<week>/overview against a mocked Notion store

Run with: uv run pytest tests/test_recapd.py -v
"""

import sys
from pathlib import Path
from unittest import mock

import pytest

# Add parent directory to path so we can import recapd
sys.path.insert(0, str(Path(__file__).parent.parent))

import recapd
from notion_store import NotionError
from recap_config import load_config


@pytest.fixture
def config():
    return load_config(str(Path(__file__).parent.parent / 'recap_config.yaml'))


@pytest.fixture
def client(config):
    app = recapd.create_app(config)
    app.config['TESTING'] = True
    return app.test_client()


@pytest.fixture
def store():
    store = mock.Mock()
    store.read_field.side_effect = lambda page, field: page['fields'].get(field, '')
    store.write_fields.return_value = (True, 'updated Personal - Overview?')
    return store


@pytest.fixture
def store_client(config, store):
    app = recapd.create_app(config, store)
    app.config['TESTING'] = True
    return app.test_client()


def _week_page(good='', bad=''):
    return {
        'id': 'page-7',
        'fields': {
            'Personal - What went well?': good,
            "Personal - What didn't go so well?": bad,
        },
    }


# ============================================================================
# Health check
# ============================================================================

class TestHealthCheck:
    """Tests for GET /."""

    def test_health(self, client):
        resp = client.get('/')

        assert resp.status_code == 200
        data = resp.get_json()
        assert data['status'] == 'ok'
        assert data['service'] == 'recapd'
        assert data['notion']['configured'] is False
        assert '/overview' in data['endpoints'].values()

    def test_health_with_store(self, store_client):
        assert store_client.get('/').get_json()['notion']['configured'] is True


# ============================================================================
# /extract
# ============================================================================

class TestExtract:
    """Tests for POST /extract."""

    def test_both_documents(self, client):
        resp = client.post('/extract', json={
            'task_summary': "===== EVENTS =====\nMon call with Alice\nSat 😔 skipped the party",
            'cal_summary': '',
        })

        assert resp.status_code == 200
        data = resp.get_json()
        assert data['status'] == 'success'
        assert "Mon call with Alice" in data['good']
        assert "skipped the party" not in data['good']
        assert data['bad'] == "===== EVENTS =====\nSat 😔 skipped the party"

    def test_single_mode(self, client):
        resp = client.post('/extract', json={
            'task_summary': "===== TRIPS =====\nBeach",
            'mode': 'good',
        })

        data = resp.get_json()
        assert resp.status_code == 200
        assert 'bad' not in data
        assert data['good'].startswith("===== TRIPS =====\nBeach")

    def test_invalid_mode(self, client):
        resp = client.post('/extract', json={'task_summary': 'x', 'mode': 'meh'})

        assert resp.status_code == 400
        assert resp.get_json()['status'] == 'error'

    def test_empty_summaries(self, client):
        resp = client.post('/extract', json={'task_summary': ' ', 'cal_summary': ''})

        assert resp.status_code == 400

    def test_non_string_field(self, client):
        resp = client.post('/extract', json={'task_summary': ['not', 'text']})

        assert resp.status_code == 400
        assert 'task_summary' in resp.get_json()['message']

    def test_requires_json(self, client):
        resp = client.post('/extract', data='task_summary=x', content_type='text/plain')

        assert resp.status_code == 400
        assert 'application/json' in resp.get_json()['message']

    def test_unexpected_error_is_500(self, client):
        with mock.patch('recapd.build_retro_document', side_effect=RuntimeError('kaput')):
            resp = client.post('/extract', json={'task_summary': 'x'})

        assert resp.status_code == 500
        assert 'kaput' in resp.get_json()['message']


# ============================================================================
# /overview
# ============================================================================

class TestOverview:
    """Tests for POST /overview."""

    def test_combines_documents(self, client):
        resp = client.post('/overview', json={
            'good': "===== EVENTS =====\nWed dinner with Bob",
            'bad': "===== EVENTS =====\nMon call with Alice",
        })

        assert resp.status_code == 200
        assert resp.get_json()['overview'] == "===== EVENTS =====\nMon call with Alice\nWed dinner with Bob"

    def test_missing_fields_are_empty(self, client):
        resp = client.post('/overview', json={})

        assert resp.status_code == 200
        assert resp.get_json()['overview'] == ''

    def test_body_must_be_object(self, client):
        resp = client.post('/overview', json=['good', 'bad'])

        assert resp.status_code == 400


# ============================================================================
# /weeks/<week>/overview
# ============================================================================

class TestWeekOverview:
    """Tests for POST /weeks/<week>/overview."""

    def test_without_store_is_503(self, client):
        resp = client.post('/weeks/7/overview')

        assert resp.status_code == 503

    def test_missing_week_is_404(self, store_client, store):
        store.find_week_page.return_value = None

        resp = store_client.post('/weeks/7/overview')

        assert resp.status_code == 404
        store.find_week_page.assert_called_once_with(7)

    def test_writes_overview(self, store_client, store):
        store.find_week_page.return_value = _week_page(
            good="===== TRIPS =====\nBeach",
            bad="===== TRIPS =====\nRain",
        )

        resp = store_client.post('/weeks/7/overview')

        data = resp.get_json()
        assert resp.status_code == 200
        assert data['written'] is True
        assert data['overview'] == "===== TRIPS =====\nBeach\nRain"
        store.write_fields.assert_called_once_with('page-7', {'Personal - Overview?': data['overview']})

    def test_dry_run_does_not_write(self, store_client, store):
        store.find_week_page.return_value = _week_page(good="===== TRIPS =====\nBeach")

        resp = store_client.post('/weeks/7/overview', json={'dry_run': True})

        assert resp.status_code == 200
        assert resp.get_json()['written'] is False
        store.write_fields.assert_not_called()

    def test_empty_columns_are_skipped(self, store_client, store):
        store.find_week_page.return_value = _week_page()

        resp = store_client.post('/weeks/7/overview')

        assert resp.get_json()['status'] == 'skipped'
        store.write_fields.assert_not_called()

    def test_notion_failure_is_502(self, store_client, store):
        store.find_week_page.side_effect = NotionError('database query failed (500)')

        resp = store_client.post('/weeks/7/overview')

        assert resp.status_code == 502

    def test_write_failure_is_502(self, store_client, store):
        store.find_week_page.return_value = _week_page(good="===== TRIPS =====\nBeach")
        store.write_fields.return_value = (False, 'page update failed (400)')

        resp = store_client.post('/weeks/7/overview')

        assert resp.status_code == 502
        assert resp.get_json()['message'] == 'page update failed (400)'

    def test_non_numeric_week_is_404(self, store_client):
        assert store_client.post('/weeks/seven/overview').status_code == 404
