"""Application services orchestrating the analysis-to-skill pipeline."""
