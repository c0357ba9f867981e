import base64
import hashlib

from fastapi.testclient import TestClient
from ctcleaner.main import app

client = TestClient(app)

TABLE = (
    '<?xml version="1.0" encoding="windows-1252"?>\n'
    "<CheatTable>\n"
    "  <CheatEntries>\n"
    "    <CheatEntry><ID>40</ID><Description>\"Montréal\"</Description><LastState/></CheatEntry>\n"
    "  </CheatEntries>\n"
    "  <LuaScript>a = 1\nb = 2</LuaScript>\n"
    "  <Signature>abc</Signature>\n"
    "</CheatTable>\n"
)

def test_health():
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"ok": True}

def test_clean_returns_utf8_without_bom():
    # Latin-1 character to force non-ASCII handling
    raw = TABLE.encode("latin-1")

    files = {"file": ("game.CT", raw, "application/xml")}
    r = client.post("/clean", files=files, params={"full": "true"})
    assert r.status_code == 200

    data = r.json()
    assert data["cleaned_table"]["encoding"] == "utf-8"

    out_bytes = base64.b64decode(data["cleaned_table"]["content_b64"])
    assert not out_bytes.startswith(b"\xef\xbb\xbf")
    assert hashlib.sha256(out_bytes).hexdigest() == data["cleaned_table"]["sha256"]

    out_text = out_bytes.decode("utf-8")
    assert "Montréal" in out_text
    assert "<ID>1</ID>" in out_text
    assert "<LastState" not in out_text
    assert "<LuaScript>a = 1 b = 2</LuaScript>" in out_text
    assert "<Signature>abc</Signature>" in out_text

    summary = data["report"]["summary"]
    assert summary["scripts_linearized"] == 1
    assert summary["deterministic"] is True

def test_clean_flags_are_opt_in():
    files = {"file": ("game.ct", TABLE.encode("latin-1"), "application/xml")}
    r = client.post("/clean", files=files, params={"remove_signature": "true"})
    assert r.status_code == 200

    out_text = base64.b64decode(r.json()["cleaned_table"]["content_b64"]).decode("utf-8")
    assert "<Signature>" not in out_text
    assert "<LuaScript>a = 1\nb = 2</LuaScript>" in out_text

def test_rejects_other_file_types():
    files = {"file": ("test.csv", b"a,b\n", "text/csv")}
    r = client.post("/clean", files=files)
    assert r.status_code == 422

def test_rejects_unloadable_table():
    files = {"file": ("broken.CT", b"<CheatTable><ID>1</ID", "application/xml")}
    r = client.post("/clean", files=files)
    assert r.status_code == 422
    assert "could not be loaded" in r.json()["detail"]
