import asyncio
from pathlib import Path

from app.services.storage import FileBlob, LocalFileStorage


def test_upload_writes_every_blob_under_root(tmp_path: Path):
    storage = LocalFileStorage(tmp_path / "uploads")
    blobs = [
        FileBlob(filename="resume.PDF", content=b"%PDF-1.4 one", content_type="application/pdf"),
        FileBlob(filename="resume.png", content=b"\x89PNG two", content_type="image/png"),
    ]

    result = asyncio.run(storage.upload(blobs))

    assert result is not None
    assert len(result.paths) == 2
    assert result.path == result.paths[0]
    assert Path(result.paths[0]).suffix == ".pdf"
    assert Path(result.paths[0]).read_bytes() == b"%PDF-1.4 one"
    assert Path(result.paths[1]).read_bytes() == b"\x89PNG two"


def test_upload_of_nothing_returns_none(tmp_path: Path):
    assert asyncio.run(LocalFileStorage(tmp_path).upload([])) is None


def test_failed_write_leaves_no_partial_files(tmp_path: Path, monkeypatch):
    storage = LocalFileStorage(tmp_path)
    original_write = Path.write_bytes
    attempts = []

    def flaky_write(self, data):
        attempts.append(self)
        if len(attempts) == 2:
            raise OSError("disk full")
        return original_write(self, data)

    monkeypatch.setattr(Path, "write_bytes", flaky_write)

    result = asyncio.run(
        storage.upload([FileBlob(filename="a.pdf", content=b"a"), FileBlob(filename="b.png", content=b"b")])
    )

    assert result is None
    assert list(tmp_path.iterdir()) == []
