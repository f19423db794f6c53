"""Application layer – push job dispatch."""
