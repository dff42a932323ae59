import sys
import logging

import firebase_admin
from firebase_admin import credentials, firestore

from speech_practice.config import settings
from speech_practice.models.catalog import DEFAULT_CATEGORIES, DEFAULT_QUESTIONS, DEFAULT_TOPICS

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

def connect():
    """Initialize Firebase from the configured credentials file"""
    try:
        cred = credentials.Certificate(settings.firebase_credentials_path)
        firebase_admin.initialize_app(cred)
        db = firestore.client()
        logger.info("Firebase initialized successfully")
        return db
    except Exception as e:
        logger.error(f"Failed to initialize Firebase: {e}")
        sys.exit(1)

def upload_documents(db, collection, documents):
    """Write documents keyed by their id, keeping list order in an 'order' field"""
    logger.info(f"Uploading {len(documents)} documents to '{collection}'...")

    success_count = 0
    for order, document in enumerate(documents):
        data = dict(document)
        doc_id = data.pop('id')
        data['order'] = order
        try:
            db.collection(collection).document(doc_id).set(data)
            logger.info(f"  Created {collection}/{doc_id}")
            success_count += 1
        except Exception as e:
            logger.error(f" Failed to create {collection}/{doc_id}: {e}")

    logger.info(f"Successfully uploaded {success_count}/{len(documents)} documents to '{collection}'")
    return success_count

def upload_questions(db):
    total = 0
    for category_id, questions in DEFAULT_QUESTIONS.items():
        tagged = [dict(question, categoryId=category_id) for question in questions]
        total += upload_documents(db, 'questions', tagged)
    return total

def main():
    """Main setup function"""
    logger.info("🚀 Seeding Firestore with practice content...")
    db = connect()

    categories = upload_documents(db, 'categories', DEFAULT_CATEGORIES)
    questions = upload_questions(db)
    topics = upload_documents(db, 'conversation_topics', DEFAULT_TOPICS)

    logger.info("📊 SETUP SUMMARY:")
    logger.info(f"   Categories: {categories}")
    logger.info(f"   Questions: {questions}")
    logger.info(f"   Conversation topics: {topics}")
    logger.info("Setup complete. Restart the server to serve content from Firestore.")

if __name__ == "__main__":
    main()
