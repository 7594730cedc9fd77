"""Reference-image storage package (S3)."""
