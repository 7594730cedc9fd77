import pytest

from looksim.storage.s3_upload import S3Uploader


class _FakeS3:
    def __init__(self):
        self.puts = []

    def put_object(self, **kwargs):
        self.puts.append(kwargs)
        return {"ETag": '"abc"'}


def test_upload_writes_prefixed_key_with_cache_header():
    s3 = _FakeS3()
    uploader = S3Uploader("hairstyle-ai-references", prefix="references", region="ap-northeast-2", client=s3)

    url = uploader.upload("bob.png", b"png-bytes")

    assert url == "https://hairstyle-ai-references.s3.ap-northeast-2.amazonaws.com/references/bob.png"
    assert s3.puts == [{
        "Bucket": "hairstyle-ai-references",
        "Key": "references/bob.png",
        "Body": b"png-bytes",
        "ContentType": "image/png",
        "CacheControl": "max-age=31536000",
    }]


def test_upload_keeps_explicit_content_type():
    s3 = _FakeS3()
    S3Uploader("bucket", prefix="", region="us-east-1", client=s3).upload("/a.webp", b"x", "image/webp")
    assert s3.puts[0]["Key"] == "a.webp"
    assert s3.puts[0]["ContentType"] == "image/webp"


def test_bucket_is_required():
    with pytest.raises(RuntimeError):
        S3Uploader("  ")


def test_from_env_defaults():
    uploader = S3Uploader.from_env()
    assert uploader.prefix.endswith("/")
    assert uploader.bucket
