"""Domain enums and API request/response models."""
