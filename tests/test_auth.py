import pytest

from bookstore.auth import (
    FORBIDDEN_MESSAGES,
    StaticTokenResolver,
    authorize,
    extract_token,
    is_allowed,
    parse_token_table,
)
from bookstore.errors import Forbidden, Unauthorized
from bookstore.models import CallerIdentity, Role


class TestRole:

    @pytest.mark.parametrize("value", ["admin", "ADMIN", " admin ", 1, "1"])
    def test_admin_values(self, value):
        assert Role.parse(value) is Role.ADMIN

    @pytest.mark.parametrize("value", ["standard", 0, "0"])
    def test_standard_values(self, value):
        assert Role.parse(value) is Role.STANDARD

    @pytest.mark.parametrize("value", [2, -1, "7", "root", "", True])
    def test_unknown_values_are_rejected(self, value):
        with pytest.raises(ValueError):
            Role.parse(value)


class TestIdentityResolution:

    def test_parse_token_table(self):
        table = parse_token_table("t1:alice:admin, t2:bob:0 ,")
        assert table == {
            "t1": CallerIdentity(user_id="alice", role=Role.ADMIN),
            "t2": CallerIdentity(user_id="bob", role=Role.STANDARD),
        }

    def test_empty_token_table(self):
        assert parse_token_table("") == {}

    @pytest.mark.parametrize("raw", ["t1:alice", ":alice:admin", "t1:alice:superuser", "t1:alice:5"])
    def test_malformed_token_table(self, raw):
        with pytest.raises(ValueError):
            parse_token_table(raw)

    def test_resolver(self, admin):
        resolver = StaticTokenResolver({"secret": admin})
        assert resolver.resolve("secret") == admin
        assert resolver.resolve("secret2") is None
        assert resolver.resolve("") is None
        assert resolver.resolve(None) is None

    @pytest.mark.parametrize(
        "authorization, x_auth_token, expected",
        [
            ("Bearer abc", None, "abc"),
            ("bearer  abc ", None, "abc"),
            ("Basic abc", None, None),
            ("Bearer ", None, None),
            (None, "xyz", "xyz"),
            ("Basic abc", "xyz", "xyz"),
            (None, None, None),
        ],
    )
    def test_extract_token(self, authorization, x_auth_token, expected):
        assert extract_token(authorization, x_auth_token) == expected


class TestAuthorizationGate:

    @pytest.mark.parametrize("action", ["create", "update", "delete"])
    def test_admin_is_allowed(self, admin, action):
        assert is_allowed(admin, action)
        assert authorize(admin, action) is admin

    @pytest.mark.parametrize("action", ["create", "update", "delete"])
    def test_standard_is_forbidden(self, user, action):
        assert not is_allowed(user, action)
        with pytest.raises(Forbidden) as excinfo:
            authorize(user, action)
        assert excinfo.value.message == FORBIDDEN_MESSAGES[action]

    @pytest.mark.parametrize("action", ["create", "update", "delete"])
    def test_missing_identity_is_unauthorized(self, action):
        assert not is_allowed(None, action)
        with pytest.raises(Unauthorized):
            authorize(None, action)

    def test_unknown_action(self, admin):
        with pytest.raises(ValueError):
            is_allowed(admin, "publish")

    def test_gate_follows_admin_flag(self, admin, user):
        assert admin.is_admin
        assert not user.is_admin
        promoted = user.model_copy(update={"role": Role.ADMIN})
        assert promoted.is_admin
        assert is_allowed(promoted, "delete")
