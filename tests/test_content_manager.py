"""
Tests for practice content lookup (built-in catalog and Firestore).
"""

from unittest.mock import MagicMock

import pytest

from speech_practice.managers.content_manager import ContentManager
from speech_practice.models.catalog import DEFAULT_TOPICS


@pytest.fixture
def content_manager(tmp_path):
    return ContentManager(str(tmp_path / "missing-credentials.json"))


def _doc(doc_id, data):
    doc = MagicMock()
    doc.id = doc_id
    doc.to_dict.return_value = dict(data)
    return doc


class TestBuiltInContent:

    def test_source(self, content_manager):
        assert content_manager.db is None
        assert content_manager.source == "built_in"

    async def test_categories(self, content_manager):
        categories = await content_manager.get_categories()
        assert [c["id"] for c in categories] == ["interview", "elevator-pitch", "presentation", "networking"]

    async def test_categories_are_copies(self, content_manager):
        categories = await content_manager.get_categories()
        categories[0]["name"] = "changed"
        assert (await content_manager.get_categories())[0]["name"] == "Interview Practice"

    async def test_questions_carry_category(self, content_manager):
        questions = await content_manager.get_questions("interview")

        assert len(questions) == 4
        assert questions[0]["id"] == "tell-me-about-yourself"
        assert all(q["categoryId"] == "interview" for q in questions)

    async def test_unknown_category_has_no_questions(self, content_manager):
        assert await content_manager.get_questions("does-not-exist") == []

    async def test_get_question(self, content_manager):
        question = await content_manager.get_question("networking", "ice-breaker")
        assert question["id"] == "ice-breaker"

        assert await content_manager.get_question(None, "ice-breaker") is None
        assert await content_manager.get_question("networking", "missing") is None

    async def test_topics(self, content_manager):
        topics = await content_manager.get_topics()
        assert [t["id"] for t in topics] == [t["id"] for t in DEFAULT_TOPICS]

        topic = await content_manager.get_topic("coffee-chat")
        assert topic["openingLine"]
        assert await content_manager.get_topic("missing") is None


class TestFirestoreContent:

    async def test_categories_sorted_by_order(self, content_manager):
        content_manager.db = MagicMock()
        content_manager.db.collection.return_value.stream.return_value = [
            _doc("b", {"name": "B", "description": "", "icon": "", "order": 1}),
            _doc("a", {"name": "A", "description": "", "icon": "", "order": 0}),
        ]

        categories = await content_manager.get_categories()

        assert [c["id"] for c in categories] == ["a", "b"]
        assert "order" not in categories[0]
        content_manager.db.collection.assert_called_with("categories")

    async def test_questions_filtered_by_category(self, content_manager):
        content_manager.db = MagicMock()
        query = content_manager.db.collection.return_value.where
        query.return_value.stream.return_value = [
            _doc("custom-q", {"question": "Why us?", "categoryId": "interview", "order": 0}),
        ]

        questions = await content_manager.get_questions("interview")

        assert questions == [{"id": "custom-q", "question": "Why us?", "categoryId": "interview"}]
        query.assert_called_with("categoryId", "==", "interview")

    async def test_empty_collection_falls_back(self, content_manager):
        content_manager.db = MagicMock()
        content_manager.db.collection.return_value.stream.return_value = []

        topics = await content_manager.get_topics()
        assert len(topics) == len(DEFAULT_TOPICS)

    async def test_firestore_error_falls_back(self, content_manager):
        content_manager.db = MagicMock()
        content_manager.db.collection.side_effect = RuntimeError("unavailable")

        categories = await content_manager.get_categories()
        assert len(categories) == 4
