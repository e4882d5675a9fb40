"""Publishing generated skills to external code hosts."""
