"""
Tests for the entity model.
"""

import pytest
from jobboard.models import (
    Comment,
    Job,
    JobStatus,
    UserInfo,
    is_temporary,
    make_temp_comment,
    make_temp_reply,
)


class TestIsTemporary:
    """Test the temporary-id predicate."""

    def test_temp_ids(self):
        assert is_temporary("temp-1")
        assert is_temporary("temp-reply-7")

    def test_server_ids(self):
        assert not is_temporary("42")
        assert not is_temporary("c-101")
        assert not is_temporary("template-1")

    def test_non_string(self):
        assert not is_temporary(None)
        assert not is_temporary(12)


class TestJobFromDict:
    """Test decoding of backend payloads."""

    def test_missing_comments_become_empty(self):
        job = Job.from_dict({"id": "1", "title": "t", "budget": 10})
        assert job.comments == ()

    def test_null_comments_become_empty(self):
        job = Job.from_dict({"id": "1", "title": "t", "comments": None})
        assert job.comments == ()

    def test_missing_replies_become_empty(self):
        job = Job.from_dict({"id": "1", "comments": [{"id": "c1", "text": "hi"}]})
        assert job.comments[0].replies == ()

    def test_content_is_accepted_as_text(self):
        comment = Comment.from_dict({"id": "c1", "content": "hello"})
        assert comment.text == "hello"

    def test_status_parsing(self):
        assert JobStatus.parse("in progress") is JobStatus.IN_PROGRESS
        assert JobStatus.parse("in-progress") is JobStatus.IN_PROGRESS
        assert JobStatus.parse("COMPLETED") is JobStatus.COMPLETED
        assert JobStatus.parse("archived") is JobStatus.OPEN

    def test_to_dict_uses_wire_keys(self):
        job = Job.from_dict({
            "id": "1",
            "title": "Site",
            "budget": "250",
            "status": "completed",
            "userId": "u9",
            "comments": [{"id": "c1", "jobId": "1", "userId": "u2", "text": "nice", "replies": []}],
        })
        data = job.to_dict()
        assert data["userId"] == "u9"
        assert data["status"] == "completed"
        assert data["budget"] == 250.0
        assert data["comments"][0]["jobId"] == "1"


class TestTemporaryEntities:
    """Test synthesis of temporary comments and replies."""

    def test_temp_comment_fields(self):
        user = UserInfo(id="u1", name="Ana", photo_url="p.png")
        c = make_temp_comment("job-1", "hello", user)
        assert is_temporary(c.id)
        assert c.id.startswith("temp-")
        assert c.user_id == "u1"
        assert c.user_name == "Ana"
        assert c.user_photo == "p.png"
        assert c.replies == ()
        assert c.timestamp > 0

    def test_temp_ids_are_unique(self):
        user = UserInfo(id="u1")
        ids = {make_temp_comment("j", "same", user).id for _ in range(50)}
        ids |= {make_temp_reply("c", "same", user).id for _ in range(50)}
        assert len(ids) == 100

    def test_temp_reply_prefix(self):
        r = make_temp_reply("c1", "hi", UserInfo(id="u1"))
        assert r.id.startswith("temp-reply-")
        assert r.comment_id == "c1"

    def test_entities_are_immutable(self):
        c = make_temp_comment("j", "x", UserInfo(id="u1"))
        with pytest.raises(AttributeError):
            c.text = "changed"
