"""Business logic layer for files app.

This package contains all business logic for file operations:
- Upload rules (size, extension)
- Metadata store operations, scoped by owner
- Upload, content replace, download and delete orchestration

All business logic should be implemented here, separate from
models (data layer) and infrastructure (external systems).

Reference: https://github.com/dry-python
for decoupling business logic from Django views.
"""
