"""HTTP service mode for devassist."""
