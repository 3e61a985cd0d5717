import pytest

from conftest import (
    FIXED_TS,
    FakeOpenAI,
    FakeStore,
    chat_response,
    make_client,
    make_settings,
    png_upload,
    sequence_clock,
)
from services.inference_service import MarkdownExtractor


def test_ocr_success_envelope(store, extractor):
    client = make_client(store=store, extractor=extractor)

    r = client.post("/api/ocr", files=png_upload())
    assert r.status_code == 200, r.text

    body = r.json()
    assert body["success"] is True
    assert body["message"] == "OCR processing completed successfully"
    assert body["data"] == {
        "inputFile": f"uploads/{FIXED_TS}-a.png",
        "outputFile": f"uploads/{FIXED_TS}-a.md",
        "markdown": "# Title",
        "bucket": "test-bucket",
        "processingTime": "2.00s",
    }
    assert "error" not in body


def test_ocr_writes_image_then_markdown(store, extractor):
    client = make_client(store=store, extractor=extractor)

    r = client.post("/api/ocr", files=png_upload(content=b"\x89PN"))
    assert r.status_code == 200, r.text

    assert len(store.puts) == 2
    image_put, markdown_put = store.puts
    assert image_put == ("test-bucket", f"uploads/{FIXED_TS}-a.png", b"\x89PN", "image/png")
    assert markdown_put == ("test-bucket", f"uploads/{FIXED_TS}-a.md", "# Title", "text/markdown")

    # Model received the uploaded bytes and declared type
    assert extractor.calls == [(b"\x89PN", "image/png")]


def test_markdown_key_replaces_only_final_extension(store):
    client = make_client(store=store)

    r = client.post("/api/ocr", files=png_upload(name="scan.v2.jpeg"))
    assert r.status_code == 200, r.text
    assert store.keys == [
        f"uploads/{FIXED_TS}-scan.v2.jpeg",
        f"uploads/{FIXED_TS}-scan.v2.md",
    ]


@pytest.mark.parametrize("content", [None, ""])
def test_empty_extraction_uses_placeholder_and_is_still_saved(content, store):
    fake = FakeOpenAI(response=chat_response(content))
    client = make_client(store=store, extractor=MarkdownExtractor(make_settings(), client=fake))

    r = client.post("/api/ocr", files=png_upload())
    assert r.status_code == 200, r.text
    assert r.json()["success"] is True
    assert r.json()["data"]["markdown"] == "No text extracted"
    assert len(fake.completions.calls) == 1
    assert store.puts[-1] == ("test-bucket", f"uploads/{FIXED_TS}-a.md", "No text extracted", "text/markdown")


def test_processing_time_follows_injected_clock(store):
    client = make_client(store=store, clock=sequence_clock(FIXED_TS, 1500, 1512))

    r = client.post("/api/ocr", files=png_upload())
    assert r.json()["data"]["processingTime"] == "0.01s"


def test_staged_mode_cleans_up_temp_file(tmp_path, store, extractor):
    settings = make_settings(OCR_IMAGE_MODE="staged", TEMP_DIR=str(tmp_path / "staging"))
    client = make_client(settings=settings, store=store, extractor=extractor, clock=sequence_clock(FIXED_TS))

    r = client.post("/api/ocr", files=png_upload(content=b"abc"))
    assert r.status_code == 200, r.text

    # Extractor read the bytes back from disk; nothing left behind
    assert extractor.calls == [(b"abc", "image/png")]
    assert list((tmp_path / "staging").iterdir()) == []


def test_concurrent_clients_share_one_pipeline():
    store = FakeStore()
    client = make_client(store=store, clock=sequence_clock(FIXED_TS))

    for name in ("a.png", "b.png"):
        assert client.post("/api/ocr", files=png_upload(name=name)).status_code == 200

    assert store.keys == [
        f"uploads/{FIXED_TS}-a.png",
        f"uploads/{FIXED_TS}-a.md",
        f"uploads/{FIXED_TS}-b.png",
        f"uploads/{FIXED_TS}-b.md",
    ]
