"""Persistence layer: document store collaborator and order repository."""

from .document_store import DocumentStore, InMemoryDocumentStore, JsonFileDocumentStore
from .order_repository import OrderRepository

__all__ = [
    'DocumentStore',
    'InMemoryDocumentStore',
    'JsonFileDocumentStore',
    'OrderRepository',
]
