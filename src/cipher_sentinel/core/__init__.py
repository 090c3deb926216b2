"""Core data structures shared by the engine and its callers."""
