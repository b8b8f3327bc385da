"""Custom SQLAlchemy types for cross-database compatibility"""
from sqlalchemy import TypeDecorator, String, JSON
from sqlalchemy.dialects.postgresql import ARRAY
import uuid


def generate_uuid():
    """Generate a UUID string"""
    return str(uuid.uuid4())


class GUID(TypeDecorator):
    """Platform-independent GUID type that stores UUIDs as VARCHAR(36)"""
    impl = String(36)
    cache_ok = True

    def load_dialect_impl(self, dialect):
        return dialect.type_descriptor(String(36))

    def process_bind_param(self, value, dialect):
        if value is not None:
            return str(value)
        return value

    def process_result_value(self, value, dialect):
        if value is not None:
            return str(value)
        return value


class StringArray(TypeDecorator):
    """List of strings: native TEXT[] on PostgreSQL, JSON everywhere else"""
    impl = JSON
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == "postgresql":
            return dialect.type_descriptor(ARRAY(String))
        return dialect.type_descriptor(JSON())

    def process_bind_param(self, value, dialect):
        if value is None:
            return value
        return [str(v) for v in value]

    def process_result_value(self, value, dialect):
        if value is None:
            return []
        return list(value)
