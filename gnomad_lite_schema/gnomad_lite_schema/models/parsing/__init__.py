from .document_parser import document_parser, DocumentParser

__all__ = ["document_parser", "DocumentParser"]
