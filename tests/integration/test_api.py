"""
Integration tests for the JSON API.
"""

import pytest

from r2dice import __version__
from r2dice.dice.schemas import validate_roll_payload
from r2dice.web.server import create_app


@pytest.fixture
def client(config):
    """Flask test client backed by a default-config engine."""
    app = create_app(config)
    app.config['TESTING'] = True
    return app.test_client()


class TestRollEndpoint:
    """Test POST /api/roll."""

    def test_roll(self, client):
        """Test a successful roll returns the serialized result."""
        response = client.post('/api/roll', json={'expression': '4d6k3', 'seed': 7})
        assert response.status_code == 200

        data = response.get_json()
        assert data['success'] is True
        assert data['expression'] == '4d6k3'
        assert data['normalized'] == '4d6k3'
        assert data['result']['kind'] == 'generic'
        assert 3 <= data['result']['value'] <= 18
        assert len(data['result']['dice']) == 4
        assert len(data['result']['kept_dice']) == 3
        assert validate_roll_payload(data['result'])

    def test_seed_is_repeatable(self, client):
        """Test that the same seed gives the same dice."""
        first = client.post('/api/roll', json={'expression': '10d20!', 'seed': 1234}).get_json()
        second = client.post('/api/roll', json={'expression': '10d20!', 'seed': 1234}).get_json()
        assert first['result'] == second['result']

    def test_normalizes_by_default(self, client):
        """Test that suffixes are reordered before parsing."""
        data = client.post('/api/roll', json={'expression': 's8+2t4', 'seed': 3}).get_json()
        assert data['success'] is True
        assert data['normalized'] == 's8t4+2'
        assert data['result']['kind'] == 'savage_wild'
        assert validate_roll_payload(data['result'])

    def test_normalize_disabled(self, client):
        """Test that normalize=false parses the text as typed."""
        response = client.post('/api/roll', json={'expression': 's8+2t4', 'normalize': False})
        assert response.status_code == 400

        data = response.get_json()
        assert data['success'] is False
        assert data['error_code'] == 'syntax_error'
        assert data['position'] == 4

    def test_sequence(self, client):
        """Test multi-statement input."""
        data = client.post('/api/roll', json={'expression': '@hp := 2d6+10; @hp*2', 'seed': 5}).get_json()
        result = data['result']
        assert result['kind'] == 'sequence'
        assert result['value'] == result['results'][-1]['value']
        assert result['results'][-1]['value'] == 2 * result['results'][0]['value']
        assert validate_roll_payload(result)

    def test_syntax_error(self, client):
        """Test that syntax errors report their position."""
        response = client.post('/api/roll', json={'expression': '2d6+'})
        assert response.status_code == 400

        data = response.get_json()
        assert data['error_code'] == 'syntax_error'
        assert data['position'] == 4
        assert 'position 4' in data['error']

    def test_division_by_zero(self, client):
        """Test evaluation errors map to their codes."""
        data = client.post('/api/roll', json={'expression': '2d6/0'}).get_json()
        assert data['success'] is False
        assert data['error_code'] == 'division_by_zero'
        assert 'position' not in data

    def test_limit_exceeded(self, client):
        """Test that oversized pools are refused."""
        data = client.post('/api/roll', json={'expression': '1000d6'}).get_json()
        assert data['error_code'] == 'limit_exceeded'

    @pytest.mark.parametrize("expression", [
        "(" * 200 + "1" + ")" * 200,
        "1" * 500,
    ])
    def test_oversized_expression(self, client, expression):
        """Test that deep nesting and huge literals are client errors."""
        response = client.post('/api/roll', json={'expression': expression})
        assert response.status_code == 400

        data = response.get_json()
        assert data['error_code'] == 'syntax_error'
        assert 'position' in data

    @pytest.mark.parametrize("body", [
        {},
        {'expression': ''},
        {'expression': 5},
        {'expression': '2d6', 'seed': 'abc'},
        {'expression': '2d6', 'colour': 'red'},
    ])
    def test_invalid_request(self, client, body):
        """Test that bodies failing the request schema are rejected."""
        response = client.post('/api/roll', json=body)
        assert response.status_code == 400

        data = response.get_json()
        assert data['error_code'] == 'invalid_input'
        assert data['error'].startswith('Invalid request:')

    def test_non_object_body(self, client):
        """Test that the body must be a JSON object."""
        response = client.post('/api/roll', data='2d6', content_type='text/plain')
        assert response.status_code == 400
        assert response.get_json()['error_code'] == 'invalid_input'

        response = client.post('/api/roll', json=['2d6'])
        assert response.status_code == 400

    def test_unexpected_error(self, client, monkeypatch):
        """Test that unexpected failures return 500."""
        engine = client.application.dice_engine

        def explode(*args, **kwargs):
            raise RuntimeError("storage offline")

        monkeypatch.setattr(engine, 'roll', explode)
        response = client.post('/api/roll', json={'expression': '2d6'})
        assert response.status_code == 500
        assert response.get_json()['error_code'] == 'unexpected_error'


class TestNormalizeEndpoint:
    """Test GET /api/normalize."""

    def test_normalize(self, client):
        """Test suffix reordering over HTTP."""
        response = client.get('/api/normalize', query_string={'expression': '5d20!+3k2'})
        assert response.status_code == 200
        assert response.get_json() == {
            'success': True,
            'expression': '5d20!+3k2',
            'normalized': '5d20!k2+3'
        }

    def test_missing_expression(self, client):
        """Test that the expression parameter is required."""
        response = client.get('/api/normalize')
        assert response.status_code == 400
        assert response.get_json()['error_code'] == 'invalid_input'


class TestHealthEndpoint:
    """Test GET /api/health."""

    def test_health(self, client):
        """Test the liveness check."""
        data = client.get('/api/health').get_json()
        assert data == {'success': True, 'status': 'ok', 'version': __version__}
