"""Template-driven rendering of skill documents."""
