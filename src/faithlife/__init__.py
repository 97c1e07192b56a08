"""FaithLife - church events, sermons and admin client."""
