"""
MongoDB Client Service
Read-only access to the research-document catalog
"""

from typing import Iterable
import structlog
from pymongo import MongoClient
from pymongo.errors import PyMongoError

logger = structlog.get_logger(__name__)

RESEARCH_DOCUMENTS_COLLECTION = "researchdocuments"


class ResearchDocumentStore:
    """
    Counts research documents linked to projects.

    The matching core never writes here; analytics only reads.
    """

    def __init__(self, mongodb_url=None, mongodb_database=None, client=None):
        """
        Args:
            mongodb_url: Connection string (defaults to settings)
            mongodb_database: Database name (defaults to settings)
            client: Pre-built MongoClient, mainly for tests
        """
        self.client = client
        self.db = None
        self.mongodb_url = mongodb_url
        self.mongodb_database = mongodb_database
        self._initialized = False

    def _lazy_init(self):
        """Lazy initialization to ensure settings are loaded"""
        if self._initialized:
            return

        self._initialized = True

        # Import settings here to avoid circular imports
        from app.config import settings

        self.mongodb_url = self.mongodb_url or settings.mongodb_url
        self.mongodb_database = self.mongodb_database or settings.mongodb_database

        if self.client is None:
            if not self.mongodb_url:
                logger.warning("mongodb_url_not_configured")
                return

            try:
                self.client = MongoClient(self.mongodb_url, serverSelectionTimeoutMS=10000)
                self.client.admin.command('ping')
                logger.info("mongodb_connected", database=self.mongodb_database)
            except PyMongoError as e:
                logger.error("mongodb_connection_failed", error=str(e))
                self.client = None
                return

        self.db = self.client[self.mongodb_database]

    def is_available(self) -> bool:
        """Check if MongoDB is available"""
        self._lazy_init()
        return self.client is not None and self.db is not None

    def count_by_project_ids(self, project_ids: Iterable[int]) -> int:
        """
        Number of research documents attached to any of the given projects.

        Raises:
            PyMongoError: query failed
        """
        project_ids = list(project_ids)
        if not project_ids:
            return 0

        if not self.is_available():
            logger.warning("research_document_count_skipped", reason="not_available")
            return 0

        return self.db[RESEARCH_DOCUMENTS_COLLECTION].count_documents(
            {"projectId": {"$in": project_ids}}
        )


# Global instance
research_document_store = ResearchDocumentStore()
