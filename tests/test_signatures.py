"""Webhook signature helpers and the employee token store."""
import hashlib
import hmac

from desktown.core.token_store import KEY_PREFIX, MemoryTokenStore, RedisTokenStore
from desktown.services.webhooks.base import verify_sha256_signature
from desktown.services.webhooks.payments import verify_payment_signature

BODY = b'{"id": "evt_1"}'


def _hex(secret: str, message: bytes) -> str:
    return hmac.new(secret.encode(), message, hashlib.sha256).hexdigest()


def test_sha256_signature_accepts_any_configured_secret():
    header = f"sha256={_hex('second', BODY)}"
    assert verify_sha256_signature(BODY, header, ["first", "second"])
    assert not verify_sha256_signature(BODY, header, ["first"])
    assert not verify_sha256_signature(BODY, _hex("second", BODY), ["second"])
    assert not verify_sha256_signature(BODY, header, [""])


def test_payment_signature_checks_timestamp_window():
    ts = 1_700_000_000
    sig = _hex("whsec", f"{ts}.".encode() + BODY)
    header = f"t={ts},v1={sig}"

    assert verify_payment_signature(BODY, header, "whsec", now=ts + 10)
    assert not verify_payment_signature(BODY, header, "whsec", now=ts + 301)
    assert not verify_payment_signature(BODY, header, "other", now=ts)
    assert not verify_payment_signature(BODY + b" ", header, "whsec", now=ts)


def test_payment_signature_accepts_rotated_secret_list():
    ts = 1_700_000_000
    header = f"t={ts},v1=deadbeef,v1={_hex('whsec', f'{ts}.'.encode() + BODY)}"
    assert verify_payment_signature(BODY, header, "whsec", now=ts)


def test_payment_signature_malformed_headers():
    assert not verify_payment_signature(BODY, "", "whsec")
    assert not verify_payment_signature(BODY, "v1=abc", "whsec")
    assert not verify_payment_signature(BODY, "t=soon,v1=abc", "whsec")


def test_memory_store_expires():
    now = [100.0]
    store = MemoryTokenStore(clock=lambda: now[0])
    store.set("tok", "user-1", ttl_seconds=60)
    assert store.get("tok") == "user-1"
    now[0] = 160.0
    assert store.get("tok") is None


def test_memory_store_delete():
    store = MemoryTokenStore()
    store.set("tok", "user-1", ttl_seconds=60)
    store.delete("tok")
    store.delete("tok")
    assert store.get("tok") is None


class FakeRedis:
    def __init__(self):
        self.calls = []
        self.data = {}

    def setex(self, key, ttl, value):
        self.calls.append(("setex", key, ttl))
        self.data[key] = value.encode()

    def get(self, key):
        return self.data.get(key)

    def delete(self, key):
        self.data.pop(key, None)


def test_redis_store_uses_prefixed_setex():
    client = FakeRedis()
    store = RedisTokenStore(client)
    store.set("tok", "user-1", ttl_seconds=3600)
    assert client.calls == [("setex", KEY_PREFIX + "tok", 3600)]
    assert store.get("tok") == "user-1"
    store.delete("tok")
    assert store.get("tok") is None
