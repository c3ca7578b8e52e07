"""Business rules for the social graph, matching and chat."""
