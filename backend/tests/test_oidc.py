import time
from urllib.parse import parse_qs, urlparse

import httpx
import pytest
import respx
from jose import jwt
from jose.utils import base64url_encode

from penguin_nurse.core.settings import OidcConfig
from penguin_nurse.services.oidc import (
    OidcClient,
    OidcError,
    discovery_document_url,
    get_oidc_client,
    refresh_oidc_client,
    set_oidc_client,
)
from penguin_nurse.services.users import OidcUserInfo, get_user_by_username, upsert_oidc_user

ISSUER = "https://auth.example.com"
SECRET = "a-shared-secret-long-enough-for-hs256"
CLIENT_ID = "penguin-nurse"

METADATA = {
    "issuer": ISSUER,
    "authorization_endpoint": f"{ISSUER}/authorize",
    "token_endpoint": f"{ISSUER}/token",
    "userinfo_endpoint": f"{ISSUER}/userinfo",
    "jwks_uri": f"{ISSUER}/jwks",
    "id_token_signing_alg_values_supported": ["HS256"],
}
JWKS = {"keys": [{"kty": "oct", "kid": "test", "alg": "HS256", "k": base64url_encode(SECRET.encode()).decode()}]}


def oidc_config(**overrides) -> OidcConfig:
    values = {
        "discovery_url": ISSUER,
        "client_id": CLIENT_ID,
        "client_secret": "fish",
        "base_url": "https://nurse.example.com",
    }
    values.update(overrides)
    return OidcConfig(**values)


def make_client(**overrides) -> OidcClient:
    return OidcClient(config=oidc_config(**overrides), metadata=dict(METADATA), jwks=JWKS)


def id_token(sub="abc-123", aud=CLIENT_ID, groups=("admin",)):
    claims = {
        "iss": ISSUER,
        "aud": aud,
        "sub": sub,
        "exp": int(time.time()) + 300,
        "iat": int(time.time()),
        "groups": list(groups),
    }
    return jwt.encode(claims, SECRET, algorithm="HS256", headers={"kid": "test"})


def mock_provider(mock, token=None, userinfo=None):
    token_body = {"access_token": "access-1", "token_type": "Bearer"}
    if token is not None:
        token_body["id_token"] = token
    mock.post(f"{ISSUER}/token").mock(return_value=httpx.Response(200, json=token_body))
    mock.get(f"{ISSUER}/userinfo").mock(
        return_value=httpx.Response(
            200,
            json=userinfo
            if userinfo is not None
            else {"sub": "abc-123", "name": "emperor", "email": "emperor@example.com"},
        )
    )


def test_discovery_document_url():
    assert discovery_document_url(ISSUER) == f"{ISSUER}/.well-known/openid-configuration"
    assert discovery_document_url(f"{ISSUER}/") == f"{ISSUER}/.well-known/openid-configuration"
    full = f"{ISSUER}/.well-known/openid-configuration"
    assert discovery_document_url(full) == full


@respx.mock
async def test_discover():
    respx.get(f"{ISSUER}/.well-known/openid-configuration").mock(
        return_value=httpx.Response(200, json=METADATA)
    )
    jwks_route = respx.get(f"{ISSUER}/jwks").mock(return_value=httpx.Response(200, json=JWKS))

    client = await OidcClient.discover(oidc_config())
    assert jwks_route.called
    assert client.metadata["issuer"] == ISSUER
    assert client.jwks == JWKS
    assert client.is_stale() is False


@respx.mock
async def test_discover_rejects_incomplete_metadata():
    metadata = {key: value for key, value in METADATA.items() if key != "jwks_uri"}
    respx.get(f"{ISSUER}/.well-known/openid-configuration").mock(
        return_value=httpx.Response(200, json=metadata)
    )
    with pytest.raises(OidcError, match="jwks_uri"):
        await OidcClient.discover(oidc_config())


@respx.mock
async def test_discover_http_failure():
    respx.get(f"{ISSUER}/.well-known/openid-configuration").mock(return_value=httpx.Response(500))
    with pytest.raises(OidcError, match="Discovery failed"):
        await OidcClient.discover(oidc_config())


def test_auth_url():
    url = make_client().auth_url("/timeline/2025-02-03")
    parsed = urlparse(url)
    assert f"{parsed.scheme}://{parsed.netloc}{parsed.path}" == f"{ISSUER}/authorize"
    query = parse_qs(parsed.query)
    assert query["client_id"] == [CLIENT_ID]
    assert query["response_type"] == ["code"]
    assert query["redirect_uri"] == ["https://nurse.example.com/openid_connect_redirect_uri"]
    assert query["scope"] == ["openid email profile"]
    assert query["state"] == ["/timeline/2025-02-03"]


async def test_login_success():
    with respx.mock(assert_all_called=False) as mock:
        mock_provider(mock, token=id_token())
        info = await make_client().login("code-1")
    assert info == OidcUserInfo(sub="abc-123", name="emperor", email="emperor@example.com", is_admin=True)


async def test_login_without_admin_group():
    with respx.mock(assert_all_called=False) as mock:
        mock_provider(mock, token=id_token(groups=("users",)))
        info = await make_client().login("code-1")
    assert info.is_admin is False


async def test_login_without_id_token():
    with respx.mock(assert_all_called=False) as mock:
        mock_provider(mock)
        with pytest.raises(OidcError, match="No token"):
            await make_client().login("code-1")


async def test_login_rejects_wrong_audience():
    with respx.mock(assert_all_called=False) as mock:
        mock_provider(mock, token=id_token(aud="someone-else"))
        with pytest.raises(OidcError, match="Invalid ID token"):
            await make_client().login("code-1")


async def test_login_rejects_bad_signature():
    forged = jwt.encode(
        {"iss": ISSUER, "aud": CLIENT_ID, "sub": "abc-123", "exp": int(time.time()) + 300},
        "not-the-shared-secret-at-all-nope",
        algorithm="HS256",
    )
    with respx.mock(assert_all_called=False) as mock:
        mock_provider(mock, token=forged)
        with pytest.raises(OidcError, match="Invalid ID token"):
            await make_client().login("code-1")


async def test_login_requires_user_info_fields():
    with respx.mock(assert_all_called=False) as mock:
        mock_provider(mock, token=id_token(), userinfo={"sub": "abc-123", "name": "emperor"})
        with pytest.raises(OidcError, match="User info missing email"):
            await make_client().login("code-1")


async def test_login_rejects_mismatched_subject():
    userinfo = {"sub": "someone-else", "name": "emperor", "email": "emperor@example.com"}
    with respx.mock(assert_all_called=False) as mock:
        mock_provider(mock, token=id_token(), userinfo=userinfo)
        with pytest.raises(OidcError, match="subject"):
            await make_client().login("code-1")


async def test_login_token_endpoint_error():
    with respx.mock(assert_all_called=False) as mock:
        mock.post(f"{ISSUER}/token").mock(return_value=httpx.Response(400, json={"error": "invalid_grant"}))
        with pytest.raises(OidcError, match="400"):
            await make_client().login("code-1")


async def test_refresh_keeps_client_on_failure():
    existing = make_client()
    set_oidc_client(existing)
    with respx.mock(assert_all_called=False) as mock:
        mock.get(f"{ISSUER}/.well-known/openid-configuration").mock(return_value=httpx.Response(503))
        result = await refresh_oidc_client(oidc_config(), force=True)
    assert result is existing
    assert get_oidc_client() is existing


async def test_refresh_skips_fresh_client():
    existing = make_client()
    set_oidc_client(existing)
    assert await refresh_oidc_client(oidc_config()) is existing


async def test_refresh_disabled_clears_client():
    set_oidc_client(make_client())
    assert await refresh_oidc_client(OidcConfig()) is None
    assert get_oidc_client() is None


async def test_upsert_links_existing_user_by_email(db, normal_user):
    info = OidcUserInfo(sub="sub-1", name="someone", email="penguin@example.com", is_admin=True)
    user = await upsert_oidc_user(db, info)
    assert user.id == normal_user.id
    assert user.oidc_id == "sub-1"
    assert user.is_admin is True
    assert user.username == "penguin"

    again = await upsert_oidc_user(db, OidcUserInfo(sub="sub-1", name="x", email="other@example.com", is_admin=False))
    assert again.id == normal_user.id
    assert again.is_admin is False


async def test_upsert_creates_user(db):
    info = OidcUserInfo(sub="sub-2", name="chinstrap", email="chinstrap@example.com", is_admin=False)
    user = await upsert_oidc_user(db, info)
    assert user.username == "chinstrap"
    assert user.password == ""
    assert (await get_user_by_username(db, "chinstrap")).oidc_id == "sub-2"


def test_oidc_endpoints_with_client(client):
    set_oidc_client(make_client())
    assert client.get("/api/auth/oidc").json() == {"enabled": True}

    response = client.get("/api/auth/oidc/login", params={"origin": "https://evil.example.com"})
    assert response.status_code == 200
    state = parse_qs(urlparse(response.json()["url"]).query)["state"]
    assert state == ["/"]


def test_redirect_logs_user_in(client):
    set_oidc_client(make_client())
    with respx.mock(assert_all_called=False) as mock:
        mock_provider(mock, token=id_token())
        response = client.get(
            "/openid_connect_redirect_uri",
            params={"code": "code-1", "state": "/timeline/2025-02-03"},
            follow_redirects=False,
        )
    assert response.status_code == 303
    assert response.headers["location"] == "/timeline/2025-02-03"

    me = client.get("/api/auth/me").json()
    assert me["username"] == "emperor"
    assert me["oidc_id"] == "abc-123"
    assert me["is_admin"] is True

    # no usable password for OIDC created accounts
    login = client.post("/api/auth/login", json={"username": "emperor", "password": ""})
    assert login.status_code == 401


def test_redirect_ignores_offsite_state(client):
    set_oidc_client(make_client())
    with respx.mock(assert_all_called=False) as mock:
        mock_provider(mock, token=id_token())
        response = client.get(
            "/openid_connect_redirect_uri",
            params={"code": "code-1", "state": "//evil.example.com"},
            follow_redirects=False,
        )
    assert response.status_code == 303
    assert response.headers["location"] == "/"


def test_redirect_rejects_failed_login(client):
    set_oidc_client(make_client())
    with respx.mock(assert_all_called=False) as mock:
        mock_provider(mock)
        response = client.get("/openid_connect_redirect_uri", params={"code": "code-1"}, follow_redirects=False)
    assert response.status_code == 401
    assert client.get("/api/auth/me").json() is None


def test_redirect_username_conflict(client, normal_user):
    set_oidc_client(make_client())
    userinfo = {"sub": "abc-123", "name": "penguin", "email": "different@example.com"}
    with respx.mock(assert_all_called=False) as mock:
        mock_provider(mock, token=id_token(), userinfo=userinfo)
        response = client.get("/openid_connect_redirect_uri", params={"code": "code-1"}, follow_redirects=False)
    assert response.status_code == 409


def test_redirect_without_client(client):
    response = client.get("/openid_connect_redirect_uri", params={"code": "code-1"}, follow_redirects=False)
    assert response.status_code == 503
