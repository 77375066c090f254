import json
import threading
import urllib.request
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer

import pytest

from glueagents.telegram_api import (
    TelegramAPI,
    TelegramError,
    Update,
    redact_error,
)
from glueagents.telegram_config import TELEGRAM_MESSAGE_LIMIT


class FakeServer:
    def __init__(self):
        self.status = 200
        self.payload = b'{"ok": true, "result": {}}'
        self.paths = []
        self.bodies = []
        fake = self

        class Handler(BaseHTTPRequestHandler):
            def do_POST(self):
                length = int(self.headers.get("Content-Length", "0"))
                body = self.rfile.read(length)
                fake.paths.append(self.path)
                fake.bodies.append(body)
                self.send_response(fake.status)
                self.send_header("Content-Type", "application/json")
                self.send_header("Content-Length", str(len(fake.payload)))
                self.end_headers()
                self.wfile.write(fake.payload)

            def log_message(self, *args):
                pass

        self.server = ThreadingHTTPServer(("127.0.0.1", 0), Handler)
        self.thread = threading.Thread(target=self.server.serve_forever, daemon=True)
        self.thread.start()

    @property
    def url(self):
        host, port = self.server.server_address[:2]
        return f"http://{host}:{port}"

    def close(self):
        self.server.shutdown()
        self.server.server_close()


@pytest.fixture
def server():
    fake = FakeServer()
    yield fake
    fake.close()


def _opener():
    return urllib.request.build_opener(urllib.request.ProxyHandler({}))


def test_get_updates_parses_canned_response(server):
    server.payload = json.dumps(
        {
            "ok": True,
            "result": [
                {"update_id": 1, "message": {"message_id": 100, "chat": {"id": 555, "type": "private"}, "date": 1700000000, "text": "hello"}},
                {"update_id": 2, "message": {"message_id": 101, "chat": {"id": 555, "type": "private"}, "date": 1700000001, "text": "hi again"}},
            ],
        }
    ).encode()
    api = TelegramAPI(server.url, "token", opener=_opener())
    updates = api.get_updates(0, 30)
    assert len(updates) == 2
    assert updates[0].message.text == "hello"
    assert updates[1].message.text == "hi again"
    assert updates[0].message.chat.id == 555
    assert server.paths[0].endswith("/getUpdates")


def test_get_updates_sends_offset_and_timeout(server):
    server.payload = b'{"ok": true, "result": []}'
    api = TelegramAPI(server.url, "token", opener=_opener())
    assert api.get_updates(7, 30) == []
    assert json.loads(server.bodies[0]) == {"offset": 7, "timeout": 30}
    assert server.paths[0] == "/bottoken/getUpdates"


def test_get_updates_null_result_is_empty(server):
    server.payload = b'{"ok": true, "result": null}'
    api = TelegramAPI(server.url, "token", opener=_opener())
    assert api.get_updates(0, 1) == []


def test_send_message_posts_correct_shape(server):
    api = TelegramAPI(server.url, "token", opener=_opener())
    api.send_message(555, "hello")
    assert server.paths[0].endswith("/sendMessage")
    body = json.loads(server.bodies[0])
    assert body["chat_id"] == 555
    assert body["text"] == "hello"


def test_send_message_truncates(server):
    api = TelegramAPI(server.url, "token", opener=_opener())
    api.send_message(1, "x" * (TELEGRAM_MESSAGE_LIMIT + 1000))
    got = json.loads(server.bodies[0])["text"]
    assert len(got.encode("utf-8")) <= TELEGRAM_MESSAGE_LIMIT
    assert got.endswith("[truncated]")


def test_send_message_truncates_multibyte_cleanly(server):
    api = TelegramAPI(server.url, "token", opener=_opener())
    api.send_message(1, "é" * 3000)
    got = json.loads(server.bodies[0])["text"]
    assert len(got.encode("utf-8")) <= TELEGRAM_MESSAGE_LIMIT
    assert got.startswith("éé")
    assert got.endswith("[truncated]")


def test_short_message_untouched(server):
    api = TelegramAPI(server.url, "token", opener=_opener())
    api.send_message(1, "short")
    assert json.loads(server.bodies[0])["text"] == "short"


def test_not_ok_response_surfaces_error(server):
    server.payload = b'{"ok": false, "error_code": 401, "description": "Unauthorized"}'
    api = TelegramAPI(server.url, "token", opener=_opener())
    with pytest.raises(TelegramError, match="Unauthorized"):
        api.get_updates(0, 30)


def test_http_error_status_body_is_decoded(server):
    server.status = 401
    server.payload = b'{"ok": false, "error_code": 401, "description": "Unauthorized"}'
    api = TelegramAPI(server.url, "token", opener=_opener())
    with pytest.raises(TelegramError, match="code=401"):
        api.send_message(1, "hi")


def test_garbage_envelope_errors(server):
    server.payload = b"not json"
    api = TelegramAPI(server.url, "token", opener=_opener())
    with pytest.raises(TelegramError, match="decode envelope"):
        api.get_updates(0, 1)


def test_empty_token_errors():
    api = TelegramAPI("http://example", "")
    with pytest.raises(TelegramError, match="token is required"):
        api.get_updates(0, 30)


def test_transport_error_does_not_leak_token():
    probe = ThreadingHTTPServer(("127.0.0.1", 0), BaseHTTPRequestHandler)
    port = probe.server_address[1]
    probe.server_close()
    api = TelegramAPI(f"http://127.0.0.1:{port}", "secret", opener=_opener())
    with pytest.raises(TelegramError) as info:
        api.get_updates(0, 1)
    assert "transport" in str(info.value)
    assert "secret" not in str(info.value)


def test_redact_error_strips_token():
    message = "Get https://api.telegram.org/botsecret/getUpdates: dial tcp: no route to host"
    red = redact_error(message, "secret")
    assert "secret" not in red
    assert "<redacted>" in red


def test_redact_error_without_token_is_identity():
    assert redact_error(ValueError("boom"), "") == "boom"


def test_update_from_dict_optional_fields():
    update = Update.from_dict(
        {
            "update_id": 5,
            "message": {
                "message_id": 9,
                "from": {"id": 3, "username": "example_user"},
                "chat": {"id": 42, "type": "group", "title": "Team"},
                "text": "yo",
            },
        }
    )
    assert update.message.from_user.username == "example_user"
    assert update.message.chat.title == "Team"
    assert Update.from_dict({"update_id": 6}).message is None


def test_update_from_dict_rejects_bad_types():
    with pytest.raises(TelegramError):
        Update.from_dict({"update_id": "one"})