"""Domain layer: catalog model, hashing, diffing and sync orchestration."""
