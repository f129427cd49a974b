"""Travel blog: posts, comments and moderation."""
