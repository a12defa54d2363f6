"""modules/conversation: follow-up chat grounded on the stored trip."""
