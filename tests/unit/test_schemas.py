"""
Unit Tests for Schemas
======================

Validation of request descriptors, payloads and response metadata.
"""

from pathlib import Path

import pytest
from pydantic import ValidationError

from urlqueue.models.schemas import (
    DataRequest,
    DataUpload,
    FileUpload,
    HttpRequest,
    PayloadKind,
    QueueStats,
    ResponseMetadata,
)


class TestHttpRequest:
    """Test request descriptor validation."""

    def test_defaults(self):
        request = HttpRequest(url="https://example.com/items")
        assert request.method == "GET"
        assert request.headers == {}
        assert request.params == {}
        assert request.body is None
        assert request.timeout is None

    def test_method_is_normalized(self):
        assert HttpRequest(url="http://example.com", method=" post ").method == "POST"

    @pytest.mark.parametrize("method", ["", "GE T", "G3T"])
    def test_invalid_method(self, method):
        with pytest.raises(ValidationError):
            HttpRequest(url="http://example.com", method=method)

    @pytest.mark.parametrize("url", ["ftp://example.com", "example.com", "/relative"])
    def test_invalid_url(self, url):
        with pytest.raises(ValidationError):
            HttpRequest(url=url)

    def test_non_positive_timeout(self):
        with pytest.raises(ValidationError):
            HttpRequest(url="http://example.com", timeout=0)

    def test_frozen(self):
        request = HttpRequest(url="http://example.com")
        with pytest.raises(ValidationError):
            request.url = "http://other.example.com"


class TestPayloads:
    """Test the three payload shapes."""

    def test_kinds(self):
        request = HttpRequest(url="http://example.com")
        assert DataRequest(request=request).kind is PayloadKind.DATA_REQUEST
        assert FileUpload(request=request, file_path="/tmp/x").kind is PayloadKind.FILE_UPLOAD
        assert DataUpload(request=request, data=b"x").kind is PayloadKind.DATA_UPLOAD

    def test_file_path_coerced(self):
        upload = FileUpload(request=HttpRequest(url="http://example.com"), file_path="/tmp/x.bin")
        assert upload.file_path == Path("/tmp/x.bin")

    def test_payload_frozen(self):
        upload = DataUpload(request=HttpRequest(url="http://example.com"), data=b"x")
        with pytest.raises(ValidationError):
            upload.data = b"y"


class TestResponseMetadata:
    """Test response metadata helpers."""

    @pytest.mark.parametrize("status,ok", [(200, True), (204, True), (302, True), (404, False), (500, False)])
    def test_ok(self, status, ok):
        assert ResponseMetadata(status=status, url="http://example.com").ok is ok


class TestQueueStats:
    """Test queue snapshot model."""

    def test_pending(self):
        stats = QueueStats(name="q", concurrency_limit=2, active=2, backlog=3, completed=4, total=9)
        assert stats.pending == 5
        assert stats.taken_at.tzinfo is not None
