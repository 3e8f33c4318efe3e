"""
Functional tests for the account service (no HTTP layer).

Covers:
1. Registration validation and handle uniqueness
2. Credential checks with uniform failure
3. Session resolution and logout
"""
import threading
from datetime import timedelta

import pytest

from bloglist_api import account_auth, errors, models
from bloglist_api.database import db
from bloglist_api.models import Account, ActivityLog, UserSession, hash_session_token, utcnow


class TestRegistration:
    """Test account creation rules."""

    def test_register_then_authenticate(self, app):
        """Test the same credentials log in after registration."""
        with app.app_context():
            result = account_auth.register_account('root', 'Rooty', 'root')
            assert result.success
            assert result.account.username == 'root'
            assert result.account.name == 'Rooty'

            login = account_auth.authenticate('root', 'root')
            assert login.success
            assert login.token
            assert login.account.id == result.account.id

    def test_password_is_stored_hashed(self, app):
        with app.app_context():
            account_auth.register_account('root', 'Rooty', 'root')
            account = Account.query.filter_by(username='root').first()

            assert account.password_hash != 'root'
            assert account.verify_password('root')
            assert not account.verify_password('wrong')

    def test_duplicate_handle_rejected(self, app):
        with app.app_context():
            assert account_auth.register_account('root', 'Rooty', 'root').success

            result = account_auth.register_account('root', 'Other', 'another')
            assert not result.success
            assert result.error_code == errors.DUPLICATE_HANDLE
            assert result.field == 'username'
            assert Account.query.count() == 1

    def test_display_name_need_not_be_unique(self, app):
        """Both e2e users are called Rooty."""
        with app.app_context():
            assert account_auth.register_account('root', 'Rooty', 'root').success
            assert account_auth.register_account('second', 'Rooty', 'second').success

    @pytest.mark.parametrize('username,name,password,field', [
        (None, 'Rooty', 'root', 'username'),
        ('', 'Rooty', 'root', 'username'),
        ('ro', 'Rooty', 'root', 'username'),
        ('has space', 'Rooty', 'root', 'username'),
        ('root', None, 'root', 'name'),
        ('root', '   ', 'root', 'name'),
        ('root', 'Rooty', None, 'password'),
        ('root', 'Rooty', '', 'password'),
        ('root', 'Rooty', 'pw', 'password'),
        ('root', 'Rooty', 'x' * 73, 'password'),
    ])
    def test_invalid_input(self, app, username, name, password, field):
        with app.app_context():
            result = account_auth.register_account(username, name, password)

            assert not result.success
            assert result.error_code == errors.INVALID_INPUT
            assert result.field == field
            assert Account.query.count() == 0

    def test_concurrent_registration_single_winner(self, app):
        """Test racing registrations of one handle produce exactly one account."""
        outcomes = []
        lock = threading.Lock()
        start = threading.Barrier(6)

        def worker(index):
            start.wait()
            with app.app_context():
                result = account_auth.register_account('racer', f'Racer {index}', 'password')
                with lock:
                    outcomes.append(result.error_code if not result.success else 'ok')

        threads = [threading.Thread(target=worker, args=(i,)) for i in range(6)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert outcomes.count('ok') == 1
        assert outcomes.count(errors.DUPLICATE_HANDLE) == 5
        with app.app_context():
            assert Account.query.filter_by(username='racer').count() == 1


class TestAuthentication:
    """Test login failure is uniform and sessions are created."""

    def test_wrong_password_and_unknown_user_fail_identically(self, app):
        with app.app_context():
            account_auth.register_account('root', 'Rooty', 'root')

            wrong_password = account_auth.authenticate('root', 'wrongpass')
            unknown_user = account_auth.authenticate('nobody', 'root')

            assert not wrong_password.success
            assert not unknown_user.success
            assert wrong_password.error_code == unknown_user.error_code == errors.INVALID_CREDENTIALS
            assert wrong_password.error == unknown_user.error
            assert UserSession.query.count() == 0

    def test_unknown_user_pays_the_same_bcrypt_check(self, app, monkeypatch):
        checks = []
        real_checkpw = models.bcrypt.checkpw

        def counting_checkpw(password, hashed):
            checks.append(hashed)
            return real_checkpw(password, hashed)

        monkeypatch.setattr(models.bcrypt, 'checkpw', counting_checkpw)

        with app.app_context():
            account_auth.register_account('root', 'Rooty', 'root')

            account_auth.authenticate('root', 'wrongpass')
            assert len(checks) == 1

            account_auth.authenticate('nobody', 'wrongpass')
            assert len(checks) == 2
            assert checks[1] != checks[0]

    def test_missing_credentials(self, app):
        with app.app_context():
            result = account_auth.authenticate('root', None)
            assert result.error_code == errors.INVALID_INPUT

    def test_only_token_hash_is_stored(self, app):
        with app.app_context():
            account_auth.register_account('root', 'Rooty', 'root')
            login = account_auth.authenticate('root', 'root')

            stored = UserSession.query.one()
            assert stored.token_hash == hash_session_token(login.token)
            assert stored.token_hash != login.token

    def test_each_login_gets_its_own_token(self, app):
        with app.app_context():
            account_auth.register_account('root', 'Rooty', 'root')
            first = account_auth.authenticate('root', 'root').token
            second = account_auth.authenticate('root', 'root').token

            assert first != second
            assert account_auth.resolve_caller(first).username == 'root'
            assert account_auth.resolve_caller(second).username == 'root'

    def test_login_attempts_are_audited(self, app):
        with app.app_context():
            account_auth.register_account('root', 'Rooty', 'root')
            account_auth.authenticate('root', 'wrongpass')
            account_auth.authenticate('root', 'root')

            logins = ActivityLog.query.filter_by(action='login').order_by(ActivityLog.id).all()
            assert [entry.status for entry in logins] == ['denied', 'success']
            assert logins[0].error_code == errors.INVALID_CREDENTIALS


class TestSessions:
    """Test caller resolution and logout."""

    def test_resolve_missing_or_unknown_token_is_anonymous(self, app):
        with app.app_context():
            assert account_auth.resolve_caller(None) is None
            assert account_auth.resolve_caller('') is None
            assert account_auth.resolve_caller('not-a-real-token') is None

    def test_expired_session_is_anonymous(self, app):
        with app.app_context():
            account_auth.register_account('root', 'Rooty', 'root')
            token = account_auth.authenticate('root', 'root').token

            stored = UserSession.query.one()
            stored.expires_at = utcnow() - timedelta(seconds=1)
            db.session.commit()

            assert account_auth.resolve_caller(token) is None
            # resolution is read-only
            assert UserSession.query.count() == 1

    def test_expired_sessions_are_purged_on_next_login(self, app):
        with app.app_context():
            account_auth.register_account('root', 'Rooty', 'root')
            account_auth.register_account('second', 'Rooty', 'second')
            stale = account_auth.authenticate('root', 'root').token
            live = account_auth.authenticate('root', 'root').token

            stale_row = UserSession.query.filter_by(token_hash=hash_session_token(stale)).one()
            stale_row.expires_at = utcnow() - timedelta(seconds=1)
            db.session.commit()

            fresh = account_auth.authenticate('second', 'second').token

            remaining = {row.token_hash for row in UserSession.query.all()}
            assert remaining == {hash_session_token(live), hash_session_token(fresh)}
            assert account_auth.resolve_caller(live).username == 'root'

    def test_end_session(self, app):
        with app.app_context():
            account_auth.register_account('root', 'Rooty', 'root')
            token = account_auth.authenticate('root', 'root').token

            assert account_auth.end_session(token).success
            assert account_auth.resolve_caller(token) is None

            again = account_auth.end_session(token)
            assert not again.success
            assert again.error_code == errors.NO_SUCH_SESSION

    def test_end_session_without_token(self, app):
        with app.app_context():
            result = account_auth.end_session(None)
            assert result.error_code == errors.NO_SUCH_SESSION

    @pytest.mark.parametrize('header,expected', [
        (None, None),
        ('', None),
        ('Bearer abc', 'abc'),
        ('bearer  abc ', 'abc'),
        ('Basic abc', None),
        ('Bearer', None),
        ('Bearer ', None),
    ])
    def test_extract_bearer_token(self, header, expected):
        assert account_auth.extract_bearer_token(header) == expected
