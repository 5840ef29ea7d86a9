"""Core chat pipeline: normalizer, tool loop and upstream client."""
