"""Infrastructure layer for files app.

This package contains integrations with external systems:
- Custom storage backends (local filesystem, S3/MinIO/R2)
- Owner-scoped blob store on top of the configured backend
- Content hashing and MIME detection, including a streaming upload handler

Keep infrastructure concerns separate from business logic.
"""
