"""User interfaces for decksmith."""
