import io
import json

import pytest

from scorecard import config
from scorecard.normalize.outlets import clear_registry_cache


class FakeS3:
    """Stands in for the boto3 S3 client R2 is reached through."""

    def __init__(self):
        self.objects = {}
        self.puts = []

    def get_object(self, Bucket, Key):
        if Key not in self.objects:
            raise KeyError(Key)
        return {"Body": io.BytesIO(self.objects[Key])}

    def put_object(self, Bucket, Key, Body, ContentType):
        self.puts.append(Key)
        self.objects[Key] = Body


@pytest.fixture
def data_dir(tmp_path, monkeypatch):
    """Point every data path at a temp directory with R2 switched off."""
    original = config.DATA_DIR
    monkeypatch.setattr(config, "R2_ACCOUNT_ID", None)
    config.use_data_dir(tmp_path)
    clear_registry_cache()
    yield tmp_path
    config.use_data_dir(original)
    clear_registry_cache()


@pytest.fixture
def fake_r2(data_dir, monkeypatch):
    """R2 credentials set, with boto3 handing out an in-memory client."""
    from scorecard.pipeline import r2

    fake = FakeS3()
    monkeypatch.setattr(config, "R2_ACCOUNT_ID", "acct")
    monkeypatch.setattr(config, "R2_ACCESS_KEY_ID", "key")
    monkeypatch.setattr(config, "R2_SECRET_ACCESS_KEY", "secret")
    monkeypatch.setattr(r2.boto3, "client", lambda *args, **kwargs: fake)
    return fake


@pytest.fixture
def write_review(data_dir):
    def _write(show_id, file_name, record):
        path = data_dir / "review-texts" / show_id / file_name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(record))
        return path
    return _write
