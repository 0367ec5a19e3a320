from freightbid import __version__
from freightbid.app import create_app
from freightbid.config import get_config_name
from freightbid.models import db, User
from freightbid.services.seed import seed_default_users


def test_health_reports_database(client):
    response = client.get('/api/health')

    assert response.status_code == 200
    body = response.get_json()
    assert body['status'] == 'healthy'
    assert body['checks']['database'] == {'status': 'healthy', 'type': 'SQLite', 'connected': True}
    assert body['checks']['mail'] == {'configured': False}


def test_root_describes_api(client):
    body = client.get('/').get_json()

    assert body['status'] == 'running'
    assert body['version'] == __version__
    assert body['environment'] == 'testing'


def test_unknown_endpoint_returns_json_404(client):
    response = client.get('/api/nothing-here')

    assert response.status_code == 404
    assert response.get_json()['error'] == 'Not Found'


def test_wrong_method_returns_json_405(client):
    response = client.patch('/api/lanes')

    assert response.status_code == 405
    assert response.get_json()['error'] == 'Method Not Allowed'


def test_testing_config_does_not_seed_users(app):
    assert User.query.count() == 0


def test_seeding_creates_default_accounts_once(monkeypatch):
    monkeypatch.setattr('freightbid.config.TestingConfig.SEED_DEFAULT_USERS', True)

    app = create_app('testing')
    with app.app_context():
        accounts = {user.username: user for user in User.query.all()}
        assert set(accounts) == {'admin', 'user'}
        assert accounts['admin'].role == 'admin'
        assert accounts['user'].role == 'forwarder'

        assert seed_default_users() == 0
        assert User.query.count() == 2
        db.session.remove()


def test_config_name_from_environment(monkeypatch):
    monkeypatch.delenv('TESTING', raising=False)
    monkeypatch.delenv('CI', raising=False)
    monkeypatch.setenv('FLASK_ENV', 'production')
    assert get_config_name() == 'production'

    monkeypatch.delenv('FLASK_ENV')
    assert get_config_name() == 'development'

    monkeypatch.setenv('TESTING', 'true')
    assert get_config_name() == 'testing'
