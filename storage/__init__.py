"""
Storage Package.

The analytics record store: ORM models and the repositories
that read signals and append risk scores.

Modules:
- models/: SQLAlchemy ORM models
- repositories/: Data access layer
"""
