"""Response cache, provider client and background refresh for news endpoints."""
