import pytest
from flask import g, request

from api.config import AuthSettings
from services.errors import Unauthorized
from utils.guards import AuthPolicy, AuthType, ConditionGuard, GuardComposer
from utils.tokens import TokenService


@pytest.fixture
def token_service(app):
    return TokenService(AuthSettings.from_mapping(app.config))


@pytest.fixture
def composer(app, token_service, api_key):
    return GuardComposer(token_service, api_key)


def bearer(token):
    return {"Authorization": f"Bearer {token}"}


BEARER_THEN_KEY = [AuthType.BEARER, AuthType.API_KEY]


def test_default_policy_lets_anyone_through(app, composer):
    with app.test_request_context("/"):
        composer.authenticate(request, AuthPolicy())


def test_policy_requires_an_auth_type():
    with pytest.raises(ValueError):
        AuthPolicy([])


def test_policy_accepts_plain_values():
    policy = AuthPolicy(["Bearer", "ApiKey"], "or")
    assert policy.auth_types == (AuthType.BEARER, AuthType.API_KEY)
    assert policy.condition is ConditionGuard.OR


def test_bearer_sets_current_user(app, composer, token_service):
    token = token_service.sign_access_token("user-42")
    with app.test_request_context("/", headers=bearer(token)):
        composer.authenticate(request, AuthPolicy([AuthType.BEARER]))
        assert g.current_user_id == "user-42"
        assert g.token_payload.user_id == "user-42"


def test_bearer_rejects_refresh_token(app, composer, token_service):
    token = token_service.sign_refresh_token("user-42")
    with app.test_request_context("/", headers=bearer(token)):
        with pytest.raises(Unauthorized):
            composer.authenticate(request, AuthPolicy([AuthType.BEARER]))


def test_and_fails_fast_on_first_failure(app, composer, api_key):
    seen = []
    composer._strategies[AuthType.API_KEY] = lambda req: seen.append("api_key") or True

    with app.test_request_context("/", headers={"x-api-key": api_key}):
        with pytest.raises(Unauthorized) as exc:
            composer.authenticate(request, AuthPolicy(BEARER_THEN_KEY, ConditionGuard.AND))

    assert exc.value.message == "Missing or invalid Authorization header"
    assert seen == []


def test_or_succeeds_when_any_strategy_passes(app, composer, api_key):
    with app.test_request_context("/", headers={"x-api-key": api_key}):
        composer.authenticate(request, AuthPolicy(BEARER_THEN_KEY, ConditionGuard.OR))


def test_or_short_circuits_on_first_success(app, composer, token_service):
    seen = []
    composer._strategies[AuthType.API_KEY] = lambda req: seen.append("api_key") or True
    token = token_service.sign_access_token("user-1")

    with app.test_request_context("/", headers=bearer(token)):
        composer.authenticate(request, AuthPolicy(BEARER_THEN_KEY, ConditionGuard.OR))

    assert seen == []


def test_or_raises_last_failure_when_all_fail(app, composer):
    with app.test_request_context("/", headers={"x-api-key": "wrong"}):
        with pytest.raises(Unauthorized) as exc:
            composer.authenticate(request, AuthPolicy(BEARER_THEN_KEY, ConditionGuard.OR))

    assert exc.value.message == "Invalid API key"


def test_and_passes_when_all_pass(app, composer, token_service, api_key):
    token = token_service.sign_access_token("user-7")
    headers = {**bearer(token), "x-api-key": api_key}
    with app.test_request_context("/", headers=headers):
        composer.authenticate(request, AuthPolicy(BEARER_THEN_KEY, ConditionGuard.AND))
        assert g.current_user_id == "user-7"


def test_api_key_must_match_exactly(app, composer, api_key):
    with app.test_request_context("/", headers={"x-api-key": api_key + "x"}):
        with pytest.raises(Unauthorized):
            composer.authenticate(request, AuthPolicy([AuthType.API_KEY]))
