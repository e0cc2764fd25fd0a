# ABOUTME: Metadata package: the BookMetadata model, cleaning, validation and online lookup.
# ABOUTME: Exports the types most callers need.

from bookwarden.metadata.fields import InvalidFieldValueError, MetadataField, set_field
from bookwarden.metadata.isbn import InvalidISBNError, clean_isbn
from bookwarden.metadata.types import BookMetadata

__all__ = [
    "BookMetadata",
    "InvalidFieldValueError",
    "InvalidISBNError",
    "MetadataField",
    "clean_isbn",
    "set_field",
]
