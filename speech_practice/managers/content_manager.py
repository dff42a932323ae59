import copy
import firebase_admin
from firebase_admin import credentials, firestore
from typing import List, Dict, Any, Optional
from speech_practice.models.catalog import DEFAULT_CATEGORIES, DEFAULT_QUESTIONS, DEFAULT_TOPICS
import logging

logger = logging.getLogger(__name__)

class ContentManager:
    """Practice categories, questions and conversation topics.

    Content is read from Firestore when credentials are available and falls
    back to the built-in catalog otherwise (or when a collection is empty).
    """

    def __init__(self, credentials_path: str):
        try:
            cred = credentials.Certificate(credentials_path)
            if not firebase_admin._apps:
                firebase_admin.initialize_app(cred)
            self.db = firestore.client()
            logger.info("Firebase initialized successfully")
        except Exception as e:
            logger.warning(f"Firebase unavailable, using built-in content: {e}")
            self.db = None

    @property
    def source(self) -> str:
        return "firebase" if self.db else "built_in"

    async def get_categories(self) -> List[Dict[str, Any]]:
        """All practice categories"""
        if not self.db:
            return copy.deepcopy(DEFAULT_CATEGORIES)

        try:
            categories = [doc.to_dict() | {"id": doc.id} for doc in self.db.collection('categories').stream()]
            if categories:
                categories.sort(key=lambda c: c.get('order', 0))
                for category in categories:
                    category.pop('order', None)
                return categories
            logger.warning("No categories in Firebase, using built-in catalog")
        except Exception as e:
            logger.error(f"Error fetching categories: {e}")

        return copy.deepcopy(DEFAULT_CATEGORIES)

    async def get_category(self, category_id: str) -> Optional[Dict[str, Any]]:
        categories = await self.get_categories()
        return next((c for c in categories if c['id'] == category_id), None)

    async def get_questions(self, category_id: str) -> List[Dict[str, Any]]:
        """Questions for a category; an unknown category yields an empty list"""
        if self.db:
            try:
                docs = self.db.collection('questions').where('categoryId', '==', category_id).stream()
                questions = [doc.to_dict() | {"id": doc.id} for doc in docs]
                if questions:
                    questions.sort(key=lambda q: q.get('order', 0))
                    for question in questions:
                        question.pop('order', None)
                    return questions
            except Exception as e:
                logger.error(f"Error fetching questions for {category_id}: {e}")

        return self._get_default_questions(category_id)

    async def get_question(self, category_id: Optional[str], question_id: Optional[str]) -> Optional[Dict[str, Any]]:
        if not category_id or not question_id:
            return None
        questions = await self.get_questions(category_id)
        return next((q for q in questions if q['id'] == question_id), None)

    async def get_topics(self) -> List[Dict[str, Any]]:
        """Conversation topics for live AI conversations"""
        if self.db:
            try:
                topics = [doc.to_dict() | {"id": doc.id} for doc in self.db.collection('conversation_topics').stream()]
                if topics:
                    topics.sort(key=lambda t: t.get('order', 0))
                    for topic in topics:
                        topic.pop('order', None)
                    return topics
            except Exception as e:
                logger.error(f"Error fetching conversation topics: {e}")

        return copy.deepcopy(DEFAULT_TOPICS)

    async def get_topic(self, topic_id: str) -> Optional[Dict[str, Any]]:
        topics = await self.get_topics()
        return next((t for t in topics if t['id'] == topic_id), None)

    def _get_default_questions(self, category_id: str) -> List[Dict[str, Any]]:
        return [
            dict(question, categoryId=category_id)
            for question in DEFAULT_QUESTIONS.get(category_id, [])
        ]
