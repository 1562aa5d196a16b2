from __future__ import annotations

from PIL import Image

from docscrub.models import Strategy
from docscrub.replace import AtomicReplacer
from docscrub.scrubbers import ContainerScrubber, ImageScrubber, PdfScrubber
from docscrub.verify import VerifyStatus, verify_file, verify_paths
from docscrub.verify_cli import status_grid, to_json


def test_verify_image_detects_exif_then_clean_after_scrub(tmp_path):
    src = tmp_path / "in.jpg"

    img = Image.new("RGB", (20, 20), (10, 20, 30))
    exif = Image.Exif()
    exif[274] = 3
    img.save(src, exif=exif, quality=95, subsampling=0)

    assert verify_file(src).status == VerifyStatus.METADATA_FOUND

    ImageScrubber().scrub(src, AtomicReplacer(keep_backup=False))

    assert verify_file(src).status == VerifyStatus.CLEAN


def test_verify_openxml_reports_docprops_fields(tmp_path, make_zip, docx_entries):
    src = make_zip(tmp_path / "sample.docx", docx_entries)

    r1 = verify_file(src)
    assert r1.status == VerifyStatus.METADATA_FOUND
    assert r1.details["metadata_entries"] == ["docProps/core.xml", "docProps/app.xml"]

    ContainerScrubber(Strategy.OPENXML).scrub(src, AtomicReplacer(keep_backup=False))

    assert verify_file(src).status == VerifyStatus.CLEAN


def test_verify_opendocument(tmp_path, make_zip, odt_entries):
    src = make_zip(tmp_path / "letter.odt", odt_entries)

    assert verify_file(src).status == VerifyStatus.METADATA_FOUND

    ContainerScrubber(Strategy.OPENDOCUMENT).scrub(src, AtomicReplacer(keep_backup=False))

    assert verify_file(src).status == VerifyStatus.CLEAN


def test_verify_pdf_detects_docinfo_then_clean_after_scrub(tmp_path):
    from pypdf import PdfWriter

    src = tmp_path / "in.pdf"

    w = PdfWriter()
    w.add_blank_page(width=72, height=72)
    w.add_metadata({"/Author": "Alice", "/Title": "Secret"})
    with open(src, "wb") as f:
        w.write(f)

    assert verify_file(src).status == VerifyStatus.METADATA_FOUND

    PdfScrubber().scrub(src, AtomicReplacer(keep_backup=False))

    assert verify_file(src).status == VerifyStatus.CLEAN


def test_verify_handles_unsupported_and_broken_files(tmp_path):
    txt = tmp_path / "notes.txt"
    txt.write_text("hi")
    broken = tmp_path / "broken.docx"
    broken.write_bytes(b"nope")

    assert verify_file(txt).status == VerifyStatus.UNSUPPORTED
    assert verify_file(broken).status == VerifyStatus.ERROR
    assert [r.path.name for r in verify_paths([tmp_path])] == ["broken.docx"]


def test_results_group_by_strategy_and_status(tmp_path, make_zip, docx_entries, odt_entries):
    make_zip(tmp_path / "a.docx", docx_entries)
    make_zip(tmp_path / "b.docx", docx_entries)
    make_zip(tmp_path / "c.odt", odt_entries)
    (tmp_path / "d.xlsx").write_bytes(b"nope")
    (tmp_path / "notes.txt").write_text("hi")

    results = verify_paths([tmp_path])
    grid = status_grid(results)

    assert grid[(Strategy.OPENXML, VerifyStatus.METADATA_FOUND)] == 2
    assert grid[(Strategy.OPENXML, VerifyStatus.ERROR)] == 1
    assert grid[(Strategy.OPENDOCUMENT, VerifyStatus.METADATA_FOUND)] == 1
    assert grid[(Strategy.IMAGE, VerifyStatus.CLEAN)] == 0

    broken = next(r for r in results if r.path.name == "d.xlsx")
    payload = to_json(broken)
    assert payload["strategy"] == "openxml"
    assert payload["status"] == "error"
    assert to_json(verify_file(tmp_path / "notes.txt"))["strategy"] is None
