"""Repository layer — protocols, SQL implementations and fakes."""
