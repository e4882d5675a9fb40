"""Archive export of generated skills."""
