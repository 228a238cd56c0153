import pytest
import requests

import scripts.opal_request as opal_request
from connector.core.signature import SIGNATURE_HEADER, TIMESTAMP_HEADER, verify_signature


class FlaskBackedResponse:
    def __init__(self, resp):
        self.status_code = resp.status_code
        self.text = resp.get_data(as_text=True)


@pytest.fixture
def routed_to_app(monkeypatch, client):
    """Send the script's requests to the Flask test client instead of the network."""
    sent = []

    def fake_request(method, url, data=None, params=None, headers=None, timeout=None):
        path = url.split("http://connector.test", 1)[1]
        sent.append({"method": method, "path": path, "data": data, "params": params, "headers": headers})
        resp = client.open(path, method=method, data=data, query_string=params, headers=headers)
        return FlaskBackedResponse(resp)

    monkeypatch.setattr(requests, "request", fake_request)
    return sent


def test_build_signed_headers_verifies():
    headers = opal_request.build_signed_headers("shh", b'{"user_id":"42"}', timestamp="1700000000")

    assert headers[TIMESTAMP_HEADER] == "1700000000"
    assert headers["Content-Type"] == "application/json"
    assert verify_signature("shh", "1700000000", b'{"user_id":"42"}', headers[SIGNATURE_HEADER])


def test_build_signed_headers_for_empty_body_has_no_content_type():
    headers = opal_request.build_signed_headers("shh", b"", timestamp="1")
    assert "Content-Type" not in headers


def test_main_signed_request_accepted(routed_to_app, capsys):
    code = opal_request.main(["GET", "/status", "--base-url", "http://connector.test", "--secret", "shh"])

    assert code == 0
    assert '"status":"ok"' in capsys.readouterr().out.replace(" ", "")


def test_main_wrong_secret_exits_1(routed_to_app):
    code = opal_request.main(["GET", "/status", "--base-url", "http://connector.test", "--secret", "nope"])
    assert code == 1


def test_main_posts_body_and_cursor(routed_to_app, fake_authentik):
    fake_authentik.add("POST", "/core/groups/g1/add_user/", None, 204)

    code = opal_request.main([
        "post", "/groups/g1/users",
        "--base-url", "http://connector.test",
        "--secret", "shh",
        "--data", '{"user_id": "42"}',
    ])

    assert code == 0
    assert routed_to_app[0]["method"] == "POST"
    assert fake_authentik.calls[0].json == {"pk": 42}


def test_main_rejects_invalid_json_data():
    with pytest.raises(SystemExit):
        opal_request.main(["POST", "/groups/g1/users", "--secret", "shh", "--data", "{nope"])


def test_main_requires_secret(monkeypatch):
    monkeypatch.delenv("OPAL_SIGNING_SECRET", raising=False)
    with pytest.raises(SystemExit):
        opal_request.main(["GET", "/status"])


def test_main_connection_error_exits_2(monkeypatch, capsys):
    def refuse(*args, **kwargs):
        raise requests.ConnectionError("refused")

    monkeypatch.setattr(requests, "request", refuse)

    code = opal_request.main(["GET", "/status", "--secret", "shh"])

    assert code == 2
    assert "Request failed" in capsys.readouterr().err
