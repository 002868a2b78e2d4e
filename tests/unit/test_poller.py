"""Tests for the job status poller and transcript parsing."""

from unittest.mock import AsyncMock

import pytest

from src.core.exceptions import (
    ExternalServiceError,
    ResultFetchError,
    TranscriptionJobNotFoundError,
)
from src.core.status import ProcessingStatus
from src.services.transcription.base import BaseTranscriptionService
from src.services.transcription.poller import (
    JobStatusPoller,
    map_job_status,
    parse_transcript_document,
)

DOCUMENT = {
    "jobName": "transcription-r1-1",
    "results": {
        "transcripts": [{"transcript": "こんにちは 世界"}],
        "items": [
            {
                "start_time": "0.0",
                "end_time": "0.6",
                "alternatives": [{"content": "こんにちは", "confidence": "0.98"}],
                "type": "pronunciation",
            },
            {
                "start_time": "0.7",
                "end_time": "1.1",
                "alternatives": [{"content": "世界", "confidence": "0.91"}],
                "type": "pronunciation",
            },
            {"alternatives": [{"content": "。"}], "type": "punctuation"},
        ],
    },
}


@pytest.fixture
def service():
    return AsyncMock(spec=BaseTranscriptionService)


class TestMapJobStatus:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("COMPLETED", ProcessingStatus.COMPLETED),
            ("FAILED", ProcessingStatus.FAILED),
            ("QUEUED", ProcessingStatus.IN_PROGRESS),
            ("IN_PROGRESS", ProcessingStatus.IN_PROGRESS),
            ("completed", ProcessingStatus.COMPLETED),
        ],
    )
    def test_known_statuses(self, raw, expected):
        assert map_job_status(raw) is expected

    @pytest.mark.parametrize("raw", ["PAUSED", "SOMETHING_NEW", "", None])
    def test_unknown_statuses_are_still_running(self, raw):
        assert map_job_status(raw) is ProcessingStatus.IN_PROGRESS


class TestParseTranscriptDocument:
    def test_text_and_items(self):
        result = parse_transcript_document(DOCUMENT)

        assert result.text == "こんにちは 世界"
        assert [i.text for i in result.items] == ["こんにちは", "世界", "。"]
        assert result.items[0].end_time == pytest.approx(0.6)
        assert result.items[1].confidence == pytest.approx(0.91)
        # punctuation carries no timing
        assert result.items[2].start_time == 0.0

    @pytest.mark.parametrize(
        "document",
        [
            [],
            {},
            {"results": None},
            {"results": {"transcripts": []}},
            {"results": {"transcripts": ["oops"]}},
            {"results": {"transcripts": [{"transcript": 42}]}},
            {"results": {"transcripts": [{"transcript": "hi"}], "items": "words"}},
            {"results": {"transcripts": [{"transcript": "hi"}], "items": ["word"]}},
            {
                "results": {
                    "transcripts": [{"transcript": "hi"}],
                    "items": [{"alternatives": ["hi"]}],
                }
            },
        ],
    )
    def test_malformed_documents(self, document):
        with pytest.raises(ResultFetchError):
            parse_transcript_document(document)


class TestJobStatusPoller:
    async def test_get_status_running(self, service):
        service.get_job_status.return_value = {"status": "QUEUED", "error_message": None}

        result = await JobStatusPoller(service).get_status("j1")

        assert result.status is ProcessingStatus.IN_PROGRESS
        assert result.raw_status == "QUEUED"
        service.get_job_status.assert_awaited_once_with("j1")

    async def test_get_status_failed_with_message(self, service):
        service.get_job_status.return_value = {
            "status": "FAILED",
            "error_message": "Unsupported media format",
        }

        result = await JobStatusPoller(service).get_status("j1")

        assert result.status is ProcessingStatus.FAILED
        assert result.error_message == "Unsupported media format"

    async def test_missing_job_is_not_found(self, service):
        service.get_job_status.return_value = {
            "status": "NOT_FOUND",
            "error_message": "Job not found",
        }

        with pytest.raises(TranscriptionJobNotFoundError) as exc_info:
            await JobStatusPoller(service).get_status("gone")

        assert exc_info.value.status_code == 404
        assert "gone" in exc_info.value.detail

    async def test_transport_errors_propagate(self, service):
        service.get_job_status.side_effect = ExternalServiceError("timeout")

        with pytest.raises(ExternalServiceError):
            await JobStatusPoller(service).get_status("j1")

    async def test_get_result(self, service):
        service.get_job_output.return_value = DOCUMENT

        result = await JobStatusPoller(service).get_result("j1")

        assert result.text == "こんにちは 世界"
        assert len(result.items) == 3

    async def test_get_result_unparsable(self, service):
        service.get_job_output.return_value = {"results": {}}

        with pytest.raises(ResultFetchError):
            await JobStatusPoller(service).get_result("j1")
