"""Days - calendar day annotations for a journal graph."""
