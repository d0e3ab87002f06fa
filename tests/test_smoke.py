import structlog
from fastapi.testclient import TestClient

from csvworkbench.main import app, log_renderer

client = TestClient(app)

def test_health():
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"ok": True}

def test_clean_decodes_latin1_upload():
    # Include a Latin-1 character to force non-ASCII handling
    raw = "name,city\nPaul,Montréal\n".encode("latin-1")

    files = {"file": ("test.csv", raw, "text/csv")}
    r = client.post("/clean", files=files)
    assert r.status_code == 200

    data = r.json()
    assert data["filename"] == "test_cleaned.csv"
    assert data["result"]["success"] is True
    assert data["result"]["data"] == "name,city\nPaul,Montréal"
    assert data["result"]["stats"]["rows"] == 2
    assert data["result"]["stats"]["columns"] == 2

def test_clean_crlf_and_output_delimiter():
    raw = b"a;b;;\r\n x ;y;;\r\n;;;\r\n"

    files = {"file": ("data.csv", raw, "text/csv")}
    r = client.post("/clean", files=files, data={"output_delimiter": "tab"})
    assert r.status_code == 200

    result = r.json()["result"]
    assert result["data"] == "a\tb\nx\ty"
    assert result["stats"]["original_size"] == len("a;b;;\n x ;y;;\n;;;\n")

def test_clean_options_disabled():
    raw = b"a, b\n\n"

    files = {"file": ("data.csv", raw, "text/csv")}
    form = {
        "remove_empty_rows": "false",
        "remove_empty_columns": "false",
        "trim_whitespace": "false",
    }
    r = client.post("/clean", files=files, data=form)
    assert r.status_code == 200
    assert r.json()["result"]["data"] == "a, b\n,\n,"

def test_clean_preview():
    raw = b"id,\n1,x\n2,y\n"

    files = {"file": ("data.csv", raw, "text/csv")}
    r = client.post("/clean", files=files)
    preview = r.json()["preview"]
    assert preview["header"] == ["id", "Column 2"]
    assert preview["rows"] == [["1", "x"], ["2", "y"]]
    assert preview["truncated"] is False

def test_clean_rejects_other_extensions():
    files = {"file": ("data.json", b"[]", "application/json")}
    r = client.post("/clean", files=files)
    assert r.status_code == 422

def test_clean_rejects_unknown_delimiter():
    files = {"file": ("data.csv", b"a,b", "text/csv")}
    r = client.post("/clean", files=files, data={"output_delimiter": "colon"})
    assert r.status_code == 422
    assert "Unknown delimiter option" in r.json()["detail"]

def test_view_with_explicit_delimiter():
    raw = b"a|b,c\n1|2,3\n"

    files = {"file": ("data.csv", raw, "text/csv")}
    r = client.post("/view", files=files, data={"delimiter": "pipe"})
    assert r.status_code == 200

    data = r.json()
    assert data["result"]["data"] == [["a", "b,c"], ["1", "2,3"], [""]]
    assert data["result"]["stats"] == {
        "rows": 3,
        "columns": 2,
        "original_size": None,
        "cleaned_size": None,
        "sheet": None,
        "pages": None,
    }
    assert data["file"]["name"] == "data.csv"
    assert data["file"]["size"] == "12 Bytes"

def test_convert_json():
    raw = b'[{"x": 1}, {"y": 2}]'

    files = {"file": ("records.json", raw, "application/json")}
    r = client.post("/convert/json", files=files)
    assert r.status_code == 200

    data = r.json()
    assert data["filename"] == "records.csv"
    assert data["result"]["data"] == "x,y\n1,\n,2"
    assert data["preview"]["rows"] == [["1", ""], ["", "2"]]

def test_convert_failure_is_a_result_not_an_http_error():
    files = {"file": ("broken.xml", b"<root><a>", "application/xml")}
    r = client.post("/convert/xml", files=files)
    assert r.status_code == 200

    result = r.json()["result"]
    assert result["success"] is False
    assert result["error"] == "XML parsing error: Invalid XML format"
    assert r.json()["preview"] is None

def test_convert_text():
    raw = b"Name    Age\nAlice   30\n"

    files = {"file": ("people.txt", raw, "text/plain")}
    r = client.post("/convert/text", files=files)
    assert r.json()["result"]["data"] == "Name,Age\nAlice,30"

def test_convert_unknown_format():
    files = {"file": ("a.pdf", b"%PDF", "application/pdf")}
    r = client.post("/convert/pdf", files=files)
    assert r.status_code == 404

def test_upload_limit():
    from csvworkbench.config import Settings, get_settings

    app.dependency_overrides[get_settings] = lambda: Settings(MAX_UPLOAD_BYTES=4)
    try:
        files = {"file": ("data.csv", b"a,b,c,d", "text/csv")}
        r = client.post("/clean", files=files)
        assert r.status_code == 413
    finally:
        app.dependency_overrides.clear()

def test_debug_picks_console_log_renderer():
    assert isinstance(log_renderer(True), structlog.dev.ConsoleRenderer)
    assert isinstance(log_renderer(False), structlog.processors.JSONRenderer)
