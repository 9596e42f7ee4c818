"""Access to the directory-of-record: HTTP client, property decoding and configuration."""
