from sqlalchemy.orm import DeclarativeBase


class LocalBase(DeclarativeBase):
    """Metadata for the on-device store; disjoint from the server schema."""
