"""
Document store access for Travexe.

Bookings, trips and notifications live in DynamoDB tables; DocumentStore
gives the services a collection-style interface over them.
"""

from core.db.dynamo import SERVER_TIMESTAMP, DocumentStore, chunked, new_document_id, to_json_safe

__all__ = ["DocumentStore", "SERVER_TIMESTAMP", "chunked", "new_document_id", "to_json_safe"]
